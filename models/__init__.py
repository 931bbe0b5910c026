from .page import (
    DEFAULT_TITLE,
    CategorizationResult,
    ExtractedPage,
    PageAnalysis,
    PageMetadata,
)
from .records import CategoryRecord, ContentRecord
from .request import ProcessPageRequest, SummarizeRequest

__all__ = [
    'DEFAULT_TITLE',
    'CategorizationResult',
    'CategoryRecord',
    'ContentRecord',
    'ExtractedPage',
    'PageAnalysis',
    'PageMetadata',
    'ProcessPageRequest',
    'SummarizeRequest',
]
