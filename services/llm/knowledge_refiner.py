# services/llm/knowledge_refiner.py
from typing import Optional

from loguru import logger

from .completion_client import CompletionClient
from .prompts import build_knowledge_prompt


class KnowledgeRefiner:
    """
    Asks the model to relate a newly categorized page to its category
    (key points, trends, possible sub-categories).

    The text is advisory: it is logged and handed back, nothing stores it.
    """

    def __init__(self, client: CompletionClient):
        self.client = client

    async def refine(self, category: str, new_content: str) -> Optional[str]:
        logger.info(
            f"Updating knowledge for category {category!r} "
            f"({len(new_content)} characters of new content)"
        )
        response = await self.client.generate(build_knowledge_prompt(category, new_content))
        if response is None:
            logger.warning(f"Knowledge update failed for category {category!r}")
            return None

        logger.debug(f"Knowledge for {category!r}:\n{response}")
        return response
