# core/config.py
"""
Application settings, read from the environment (and an optional ``.env``).

Everything tunable about the service lives here: where the Ollama daemon is,
which model to ask, retry policy, where the SQLite file goes and how the
HTTP surface is served.  The sampling options sent with every completion
request are *not* settings; they are fixed in
``services.llm.completion_client``.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    PROJECT_NAME: str = "Knowledge Browser"

    # ------------------------------------------------------------------
    # LLM (Ollama) endpoint
    # ------------------------------------------------------------------
    OLLAMA_ENDPOINT: str = "http://localhost:11434/api"
    LLM_MODEL: str = "llama2:latest"
    LLM_RETRY_ATTEMPTS: int = 3
    LLM_RETRY_DELAY_SECONDS: float = 1.0
    LLM_TIMEOUT_SECONDS: float = 300.0

    # Prompt budgets (characters of page text sent to the model)
    CONTENT_CHAR_LIMIT: int = 2000
    SUMMARY_CHAR_LIMIT: int = 1500

    # ------------------------------------------------------------------
    # Storage / extraction
    # ------------------------------------------------------------------
    DATABASE_PATH: str = "data/knowledge.db"
    EXTRACTION_PROFILE: str = "default"

    # ------------------------------------------------------------------
    # HTTP server
    # ------------------------------------------------------------------
    PORT: int = 8000
    DEBUG: bool = False
    WORKERS: int = 1
    LOG_LEVEL: str = "INFO"
    ALLOWED_HOSTS: List[str] = ["*"]


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
