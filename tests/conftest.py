# tests/conftest.py
"""
Shared fixtures: an in-process fake Ollama daemon (served through
``httpx.MockTransport``), a completion-client factory wired to it, and a
temporary SQLite store.
"""

import json
from typing import Any, Callable, List, Optional

import httpx
import pytest

from services.llm.completion_client import CompletionClient
from services.storage.database import KnowledgeStore

ENDPOINT = "http://ollama.test/api"
MODEL = "llama2:latest"


class FakeOllama:
    """
    Answers ``/api/tags`` and ``/api/generate``.

    ``replies`` is consumed first, one item per generate call; afterwards
    ``responder`` is used.  An item may be:
    • ``str``        → 200 with ``{"response": item}``
    • ``int``        → that HTTP status
    • ``dict``       → 200 with the dict as JSON body
    • ``Exception``  → raised as a transport error
    • callable       → called with the request body, result handled as above
    """

    def __init__(self, models=(MODEL,)):
        self.models: List[str] = list(models)
        self.tags_status = 200
        self.tags_body: Any = None
        self.replies: List[Any] = []
        self.responder: Callable[[dict], Any] = lambda body: "OK"
        self.generate_calls: List[dict] = []

    @property
    def prompts(self) -> List[str]:
        return [call["prompt"] for call in self.generate_calls]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/tags"):
            if self.tags_status != 200:
                return httpx.Response(self.tags_status, json={"error": "unavailable"})
            if self.tags_body is not None:
                return httpx.Response(200, json=self.tags_body)
            return httpx.Response(200, json={"models": [{"name": m} for m in self.models]})

        if path.endswith("/generate"):
            body = json.loads(request.content)
            self.generate_calls.append(body)
            reply = self.replies.pop(0) if self.replies else self.responder
            if callable(reply) and not isinstance(reply, Exception):
                reply = reply(body)
            if isinstance(reply, Exception):
                raise reply
            if isinstance(reply, int):
                return httpx.Response(reply, json={"error": "boom"})
            if isinstance(reply, dict):
                return httpx.Response(200, json=reply)
            return httpx.Response(200, json={"model": body["model"], "response": reply, "done": True})

        return httpx.Response(404)


@pytest.fixture
def fake_ollama() -> FakeOllama:
    return FakeOllama()


@pytest.fixture
def sleeps() -> List[float]:
    """Delays requested by the completion client's retry loop."""
    return []


@pytest.fixture
def make_client(fake_ollama, sleeps):
    def _make(ready: bool = True, **kwargs) -> CompletionClient:
        async def fake_sleep(delay: float) -> None:
            sleeps.append(delay)

        http = httpx.AsyncClient(transport=httpx.MockTransport(fake_ollama))
        client = CompletionClient(
            endpoint=ENDPOINT,
            model=MODEL,
            client=http,
            sleep=fake_sleep,
            **kwargs,
        )
        client.ready = ready
        return client

    return _make


@pytest.fixture
def store(tmp_path):
    db = KnowledgeStore(tmp_path / "data" / "knowledge.db")
    yield db
    db.close()


def count_rows(db: KnowledgeStore, table: str, where: Optional[str] = None) -> int:
    sql = f"SELECT COUNT(*) FROM {table}"
    if where:
        sql += f" WHERE {where}"
    return db._conn.execute(sql).fetchone()[0]
