# models/records.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ContentRecord(BaseModel):
    """
    One processed page.  Append-only: written once by the pipeline and never
    updated.  The database column for ``full_text`` is ``full_content``.
    """

    id: int
    url: str
    title: Optional[str] = None
    summary: Optional[str] = None
    full_text: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")


class CategoryRecord(BaseModel):
    """A category label, created on first use of its (case-sensitive) name."""

    id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")
