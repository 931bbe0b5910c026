# models/request.py
from typing import Optional

from pydantic import BaseModel, Field

from .page import PageMetadata


class ProcessPageRequest(BaseModel):
    """
    Payload the browser host posts after every navigation.

    ``content`` is whatever the host could grab from the page: full markup or
    already-rendered text.  Both go through the extractor.
    """

    url: str = Field(..., min_length=1, description="Address of the loaded page")
    content: str = Field(..., description="Raw page markup or visible text")
    metadata: Optional[PageMetadata] = Field(
        default=None,
        description="Metadata read by the host; non-empty values override extracted ones",
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "url": "https://example.com/post/1",
                "content": "<html><head><title>Example</title></head><body><main>Hello</main></body></html>",
                "metadata": {"title": "Example", "description": "", "keywords": ""},
            }
        }
    }


class SummarizeRequest(BaseModel):
    content: str = Field(..., description="Raw page markup or visible text")
    metadata: Optional[PageMetadata] = None
