# services/llm/categorizer.py
"""
Ask the model for categories / summary / topics and pull a JSON object out of
whatever it writes back.

Models often wrap the JSON in prose ("Sure! Here is ...").  We take the span
from the first ``{`` to the last ``}`` and parse that.  A page fails only when
there is no span, the span is not valid JSON, or one of the three keys is
missing.  Values of the wrong shape are coerced to text rather than rejected;
the one exception is a ``categories`` value that cannot be read as a list.
"""

import json
import re
from typing import Any, List, Optional

from loguru import logger

from models.page import CategorizationResult, PageMetadata

from .completion_client import CompletionClient
from .prompts import build_categorization_prompt

_JSON_SPAN_RE = re.compile(r"\{[\s\S]*\}")

REQUIRED_KEYS = ("categories", "summary", "topics")


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _as_text_list(value: Any) -> Optional[List[str]]:
    """Stringify list items; a bare string becomes a one-item list."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [_as_text(item) for item in value]
    return None


def parse_categorization(raw: str) -> Optional[CategorizationResult]:
    """Best-effort structured extraction; ``None`` when nothing usable is found."""
    match = _JSON_SPAN_RE.search(raw or "")
    if not match:
        logger.error("Failed to extract JSON from response")
        return None

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        logger.error(f"Model returned invalid JSON: {exc}")
        return None

    if not isinstance(parsed, dict):
        logger.error("Invalid response structure: top-level value is not an object")
        return None

    missing = [key for key in REQUIRED_KEYS if key not in parsed]
    if missing:
        logger.error(f"Invalid response structure: missing {', '.join(missing)}")
        return None

    # the coordinator iterates categories, so they must be list-like
    categories = _as_text_list(parsed["categories"])
    if categories is None:
        logger.error("Invalid response structure: categories is not a list")
        return None

    topics = _as_text_list(parsed["topics"])
    if topics is None:
        topics = [] if parsed["topics"] is None else [_as_text(parsed["topics"])]

    summary = parsed["summary"]
    return CategorizationResult(
        categories=categories,
        summary="" if summary is None else _as_text(summary),
        topics=topics,
    )


class Categorizer:
    def __init__(self, client: CompletionClient, char_limit: int = 2000):
        self.client = client
        self.char_limit = char_limit

    async def categorize(self, content: str, metadata: PageMetadata) -> Optional[CategorizationResult]:
        logger.info(
            f"Categorizing {len(content)} characters (title={metadata.title[:50]!r})"
        )
        prompt = build_categorization_prompt(content, metadata, self.char_limit)

        response = await self.client.generate(prompt)
        if response is None:
            return None

        result = parse_categorization(response)
        if result is not None:
            logger.info(
                f"Categories: {result.categories}; topics: {result.topics}; "
                f"summary length {len(result.summary)} characters"
            )
        return result
