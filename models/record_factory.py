# models/record_factory.py
from __future__ import annotations

import sqlite3
from typing import Any, Dict, Mapping, Type, TypeVar, Union

from pydantic import BaseModel

from .records import CategoryRecord, ContentRecord

M = TypeVar("M", bound=BaseModel)

Row = Union[sqlite3.Row, Mapping[str, Any]]

# Database column → model field, where the two differ.
COLUMN_ALIASES: Dict[str, str] = {"full_content": "full_text"}


def record_from_row(model: Type[M], row: Row) -> M:
    """
    Build ``model`` from a ``sqlite3.Row`` (or any mapping).

    • Renames columns listed in ``COLUMN_ALIASES``.
    • Drops keys that are not fields of ``model`` so a ``SELECT c.*`` over a
      join never trips validation.

    Example
    -------
    >>> row = {"id": 1, "url": "https://a", "full_content": "text", "extra": 42}
    >>> record_from_row(ContentRecord, row).full_text
    'text'
    """
    allowed = set(model.model_fields)
    filtered: Dict[str, Any] = {}
    for key in row.keys():
        field = COLUMN_ALIASES.get(key, key)
        if field in allowed:
            filtered[field] = row[key]
    return model.model_validate(filtered)


def content_from_row(row: Row) -> ContentRecord:
    return record_from_row(ContentRecord, row)


def category_from_row(row: Row) -> CategoryRecord:
    return record_from_row(CategoryRecord, row)
