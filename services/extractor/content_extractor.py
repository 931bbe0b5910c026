# services/extractor/content_extractor.py
"""
Pull the visible text and the basic metadata out of a page.

The browser host may hand us full markup or text it already rendered; both
go through BeautifulSoup, so plain text simply comes back normalized.
"""

import re
from typing import List, Optional

from bs4 import BeautifulSoup
from loguru import logger

from models.page import ExtractedPage, PageMetadata

from .config_loader import ExtractionProfile, get_profile_config

_WHITESPACE_RE = re.compile(r"\s+")


class ContentExtractor:
    """
    Strips non-content elements, locates the main content region and returns
    its whitespace-normalized text together with title/description/keywords.
    """

    def __init__(self, profile: Optional[ExtractionProfile] = None, profile_name: str = "default"):
        self.profile = profile or get_profile_config(profile_name)

    @property
    def exclude_tags(self) -> List[str]:
        return self.profile.exclude_tags

    @property
    def content_selectors(self) -> List[str]:
        return self.profile.content_selectors

    # ------------------------------------------------------------------
    def extract_content(self, html: str) -> ExtractedPage:
        soup = BeautifulSoup(html or "", "html.parser")

        if self.exclude_tags:
            for element in soup.find_all(self.exclude_tags):
                element.decompose()

        metadata = self._extract_metadata(soup)
        content = self.clean_text(self._find_main_content(soup))

        logger.debug(
            f"Extracted {len(content)} characters (title={metadata.title[:50]!r})"
        )
        return ExtractedPage(content=content, metadata=metadata)

    # ------------------------------------------------------------------
    def _extract_metadata(self, soup: BeautifulSoup) -> PageMetadata:
        title = ""
        title_tag = soup.find("title")
        if title_tag:
            title = title_tag.get_text().strip()
        if not title:
            title = self._meta_content(soup, property="og:title")

        description = (
            self._meta_content(soup, name="description")
            or self._meta_content(soup, property="og:description")
        )
        keywords = self._meta_content(soup, name="keywords")

        return PageMetadata(title=title, description=description, keywords=keywords)

    @staticmethod
    def _meta_content(soup: BeautifulSoup, **attrs) -> str:
        tag = soup.find("meta", attrs=attrs)
        if tag and tag.get("content"):
            return tag["content"].strip()
        return ""

    def _find_main_content(self, soup: BeautifulSoup) -> str:
        """Text of the first selector with non-empty text, else the body."""
        for selector in self.content_selectors:
            elements = soup.select(selector)
            if not elements:
                continue
            text = " ".join(el.get_text(" ") for el in elements)
            if text.strip():
                logger.debug(f"Main content found via selector {selector!r}")
                return text

        body = soup.body
        if body is not None:
            return body.get_text(" ")
        return soup.get_text(" ")

    @staticmethod
    def clean_text(text: str) -> str:
        text = _WHITESPACE_RE.sub(" ", text)
        return text.strip()
