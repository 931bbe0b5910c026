# services/storage/database.py
"""
SQLite persistence for processed pages and their categories.

Three tables: ``categories``, ``content`` and the ``content_categories`` link
table.  Every write is a single auto-committed statement; nothing here opens a
transaction that spans several writes.  All records are append-only.
"""

import sqlite3
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from loguru import logger

from core.exceptions import StorageError
from models.record_factory import category_from_row, content_from_row
from models.records import CategoryRecord, ContentRecord

SCHEMA = """
CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT UNIQUE,
    description TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS content (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    url TEXT,
    title TEXT,
    summary TEXT,
    full_content TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS content_categories (
    content_id INTEGER,
    category_id INTEGER,
    FOREIGN KEY (content_id) REFERENCES content(id),
    FOREIGN KEY (category_id) REFERENCES categories(id),
    PRIMARY KEY (content_id, category_id)
);
"""

MEMORY_PATH = ":memory:"


class KnowledgeStore:
    """File-backed store; pass ``":memory:"`` for a throwaway database."""

    def __init__(self, path: Union[str, Path]):
        self.path = str(path)
        if self.path != MEMORY_PATH:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        try:
            # isolation_level=None → autocommit, one statement per write
            self._conn = sqlite3.connect(
                self.path, timeout=30, isolation_level=None, check_same_thread=False
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys=ON;")
            self._conn.executescript(SCHEMA)
        except sqlite3.Error as exc:
            raise StorageError(f"Error opening database {self.path}: {exc}") from exc

        logger.info(f"Knowledge store ready at {self.path}")

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "KnowledgeStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------
    def _execute(self, sql: str, params: Iterable[Any] = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, tuple(params))
        except sqlite3.Error as exc:
            logger.error(f"Database error: {exc}")
            raise StorageError(str(exc)) from exc

    def _fetch_all(self, sql: str, params: Iterable[Any] = ()) -> List[sqlite3.Row]:
        return self._execute(sql, params).fetchall()

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------
    def add_category(self, name: str, description: str = "") -> int:
        """
        Insert ``name`` unless it already exists and return its id.
        An existing row keeps its original description.
        """
        self._execute(
            "INSERT OR IGNORE INTO categories (name, description) VALUES (?, ?)",
            (name, description),
        )
        row = self._execute("SELECT id FROM categories WHERE name = ?", (name,)).fetchone()
        if row is None:
            raise StorageError(f"Category {name!r} missing after insert")
        return int(row["id"])

    def get_category(self, category_id: int) -> Optional[CategoryRecord]:
        row = self._execute("SELECT * FROM categories WHERE id = ?", (category_id,)).fetchone()
        return category_from_row(row) if row else None

    def get_categories(self) -> List[CategoryRecord]:
        rows = self._fetch_all("SELECT * FROM categories ORDER BY name")
        return [category_from_row(r) for r in rows]

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------
    def add_content(self, url: str, title: str, summary: str, full_text: str) -> int:
        cur = self._execute(
            "INSERT INTO content (url, title, summary, full_content) VALUES (?, ?, ?, ?)",
            (url, title, summary, full_text),
        )
        return int(cur.lastrowid)

    def link_content_to_category(self, content_id: int, category_id: int) -> None:
        """Idempotent; unknown ids fail the foreign-key check."""
        self._execute(
            "INSERT OR IGNORE INTO content_categories (content_id, category_id) VALUES (?, ?)",
            (content_id, category_id),
        )

    def get_content_by_category(self, category_id: int) -> List[ContentRecord]:
        rows = self._fetch_all(
            """
            SELECT c.* FROM content c
            JOIN content_categories cc ON c.id = cc.content_id
            WHERE cc.category_id = ?
            ORDER BY c.created_at DESC, c.id DESC
            """,
            (category_id,),
        )
        return [content_from_row(r) for r in rows]

    def search_content(self, query: str) -> List[ContentRecord]:
        pattern = f"%{query}%"
        rows = self._fetch_all(
            """
            SELECT * FROM content
            WHERE title LIKE ? OR summary LIKE ?
            ORDER BY created_at DESC, id DESC
            """,
            (pattern, pattern),
        )
        return [content_from_row(r) for r in rows]
