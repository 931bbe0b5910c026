# services/pipeline/content_handler.py
import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Optional

from loguru import logger
from prometheus_client import Counter, Histogram

from core.config import Settings
from core.exceptions import StorageError
from models.page import PageAnalysis, PageMetadata
from models.records import CategoryRecord, ContentRecord
from services.extractor.content_extractor import ContentExtractor
from services.llm.categorizer import Categorizer
from services.llm.completion_client import CompletionClient
from services.llm.knowledge_refiner import KnowledgeRefiner
from services.llm.prompts import compose_knowledge_input
from services.llm.summarizer import Summarizer
from services.storage.database import KnowledgeStore

PAGES_PROCESSED = Counter('pages_processed_total', 'Pages categorized and stored')
PAGE_FAILURES = Counter('page_failures_total', 'Pages whose pipeline failed', ['stage'])
PAGE_DURATION = Histogram('page_processing_seconds', 'Time spent processing one page')
KNOWLEDGE_FAILURES = Counter('knowledge_refinement_failures_total', 'Per-category refinement failures')


# ----------------------------------------------------------------------
#  ContentHandler – per-page pipeline + query surface for the host
# ----------------------------------------------------------------------
class ContentHandler:
    """
    Runs one page through extraction → categorization → storage →
    per-category linking and knowledge refinement, and answers the host's
    browse/search queries.

    Every collaborator is passed in; build one handler at process start and
    share it.  Store calls run on a single worker thread so the event loop
    never blocks on SQLite and the one connection is used serially.
    """

    def __init__(
        self,
        extractor: ContentExtractor,
        client: CompletionClient,
        categorizer: Categorizer,
        refiner: KnowledgeRefiner,
        store: KnowledgeStore,
        summarizer: Optional[Summarizer] = None,
    ):
        self.extractor = extractor
        self.client = client
        self.categorizer = categorizer
        self.refiner = refiner
        self.store = store
        self.summarizer = summarizer or Summarizer(client)
        self._db_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="knowledge-store")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContentHandler":
        client = CompletionClient.from_settings(settings)
        return cls(
            extractor=ContentExtractor(profile_name=settings.EXTRACTION_PROFILE),
            client=client,
            categorizer=Categorizer(client, char_limit=settings.CONTENT_CHAR_LIMIT),
            refiner=KnowledgeRefiner(client),
            store=KnowledgeStore(settings.DATABASE_PATH),
            summarizer=Summarizer(client, char_limit=settings.SUMMARY_CHAR_LIMIT),
        )

    async def _run_db(self, fn: Callable[..., Any], *args: Any) -> Any:
        return await asyncio.get_running_loop().run_in_executor(self._db_executor, fn, *args)

    @property
    def ready(self) -> bool:
        return self.client.ready

    async def initialize(self) -> bool:
        ready = await self.client.initialize()
        if not ready:
            logger.error("Failed to initialize LLM – page processing is disabled")
        return ready

    # ------------------------------------------------------------------
    async def process_page(
        self,
        url: str,
        raw_text: str,
        metadata: Optional[PageMetadata] = None,
    ) -> Optional[PageAnalysis]:
        """
        Returns the analysis, or ``None`` when the page could not be processed.
        Only knowledge-refinement failures are tolerated along the way.
        """
        if not self.ready:
            logger.error("ContentHandler not initialized")
            PAGE_FAILURES.labels(stage="not_ready").inc()
            return None

        logger.info(f"Processing content for {url} ({len(raw_text or '')} characters)")

        with PAGE_DURATION.time():
            # 1️⃣ Extracted
            extracted = self.extractor.extract_content(raw_text)
            page_meta = extracted.metadata.merged_with(metadata)

            # 2️⃣ Categorized
            analysis = await self.categorizer.categorize(extracted.content, page_meta)
            if analysis is None:
                logger.error(f"Failed to analyze content for {url}")
                PAGE_FAILURES.labels(stage="categorize").inc()
                return None

            try:
                # 3️⃣ ContentStored
                content_id = await self._run_db(
                    self.store.add_content, url, page_meta.title, analysis.summary, extracted.content
                )

                # 4️⃣ per category: ensure → link → refine
                knowledge_input = compose_knowledge_input(page_meta.title, analysis.summary)
                for category in analysis.categories:
                    category_id = await self._run_db(self.store.add_category, category, "")
                    await self._run_db(self.store.link_content_to_category, content_id, category_id)

                    knowledge = await self.refiner.refine(category, knowledge_input)
                    if knowledge is None:
                        KNOWLEDGE_FAILURES.inc()
                        logger.warning(f"Skipping knowledge update for {category!r}")
            except StorageError as exc:
                logger.error(f"Error storing content for {url}: {exc}")
                PAGE_FAILURES.labels(stage="store").inc()
                return None

        PAGES_PROCESSED.inc()
        logger.info(f"Processed {url}: {len(analysis.categories)} categories")
        return PageAnalysis(
            categories=analysis.categories,
            summary=analysis.summary,
            topics=analysis.topics,
        )

    async def summarize(self, raw_text: str, metadata: Optional[PageMetadata] = None) -> Optional[str]:
        extracted = self.extractor.extract_content(raw_text)
        return await self.summarizer.summarize(
            extracted.content, extracted.metadata.merged_with(metadata)
        )

    # ------------------------------------------------------------------
    # Query surface
    # ------------------------------------------------------------------
    async def list_categories(self) -> List[CategoryRecord]:
        return await self._run_db(self.store.get_categories)

    async def get_category(self, category_id: int) -> Optional[CategoryRecord]:
        return await self._run_db(self.store.get_category, category_id)

    async def get_content_for_category(self, category_id: int) -> List[ContentRecord]:
        return await self._run_db(self.store.get_content_by_category, category_id)

    async def search(self, query: str) -> List[ContentRecord]:
        return await self._run_db(self.store.search_content, query)

    # ------------------------------------------------------------------
    async def cleanup(self) -> None:
        """Close the HTTP client, drain pending store calls, close the database."""
        await self.client.close()
        self._db_executor.shutdown(wait=True)
        self.store.close()
