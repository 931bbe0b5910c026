# services/llm/summarizer.py
from typing import Optional

from loguru import logger

from models.page import PageMetadata

from .completion_client import CompletionClient
from .prompts import build_summary_prompt


class Summarizer:
    """Standalone 2–3 sentence summary, outside the categorization pipeline."""

    def __init__(self, client: CompletionClient, char_limit: int = 1500):
        self.client = client
        self.char_limit = char_limit

    async def summarize(self, content: str, metadata: PageMetadata) -> Optional[str]:
        logger.info(f"Summarizing {len(content)} characters (title={metadata.title!r})")
        response = await self.client.generate(
            build_summary_prompt(content, metadata, self.char_limit)
        )
        if response is None:
            return None
        return response.strip()
