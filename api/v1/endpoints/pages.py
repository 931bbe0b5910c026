# api/v1/endpoints/pages.py
from fastapi import APIRouter, Depends
from loguru import logger

from core.exceptions import LLMUnavailableError, PageProcessingError
from models.page import PageAnalysis
from models.request import ProcessPageRequest, SummarizeRequest
from services.pipeline.content_handler import ContentHandler

from .deps import get_content_handler

router = APIRouter()


def _require_ready(handler: ContentHandler) -> None:
    if not handler.ready:
        raise LLMUnavailableError("The language model is not available")


@router.post("/pages", response_model=PageAnalysis)
async def process_page(
    request: ProcessPageRequest,
    handler: ContentHandler = Depends(get_content_handler),
):
    """Categorize, summarize and store one loaded page."""
    logger.info(f"Received content for processing: {request.url}")
    _require_ready(handler)

    result = await handler.process_page(request.url, request.content, request.metadata)
    if result is None:
        raise PageProcessingError(
            "Failed to process content", details={"url": request.url}
        )
    return result


@router.post("/summaries")
async def summarize(
    request: SummarizeRequest,
    handler: ContentHandler = Depends(get_content_handler),
):
    _require_ready(handler)

    summary = await handler.summarize(request.content, request.metadata)
    if summary is None:
        raise PageProcessingError("Failed to summarize content")
    return {"summary": summary}
