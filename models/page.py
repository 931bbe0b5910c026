# models/page.py
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TITLE = "Untitled Page"


class PageMetadata(BaseModel):
    """Title / description / keywords as reported by the page or the host."""

    title: str = ""
    description: str = ""
    keywords: str = ""

    model_config = ConfigDict(extra="ignore")

    @field_validator("title", "description", "keywords", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        # Hosts send ``null`` for absent meta tags; keywords sometimes arrive as a list.
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return ", ".join(str(v) for v in value)
        return value

    def merged_with(self, override: PageMetadata | None) -> PageMetadata:
        """
        Return a copy where every non-empty field of ``override`` wins.
        An empty title falls back to ``DEFAULT_TITLE``.
        """
        data = self.model_dump()
        if override is not None:
            for key, value in override.model_dump().items():
                if value and value.strip():
                    data[key] = value
        if not data["title"].strip():
            data["title"] = DEFAULT_TITLE
        return PageMetadata(**data)


class ExtractedPage(BaseModel):
    """Output of the extractor: normalized visible text plus metadata."""

    content: str = ""
    metadata: PageMetadata = Field(default_factory=PageMetadata)


class CategorizationResult(BaseModel):
    """The JSON object the model is asked to produce for a page."""

    categories: List[str]
    summary: str
    topics: List[str]


class PageAnalysis(BaseModel):
    """What the pipeline hands back to the host after a page is stored."""

    categories: List[str]
    summary: str
    topics: List[str]
