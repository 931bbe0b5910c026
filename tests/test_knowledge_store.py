# tests/test_knowledge_store.py
import pytest

from conftest import count_rows
from core.exceptions import StorageError
from models.records import CategoryRecord, ContentRecord
from services.storage.database import KnowledgeStore


# -------------------------------------------------------------------
# 1️⃣  Categories
# -------------------------------------------------------------------
def test_add_category_twice_returns_same_id_and_keeps_description(store):
    first = store.add_category("Tech", "All things technical")
    second = store.add_category("Tech", "Overwritten?")

    assert first == second
    assert count_rows(store, "categories") == 1
    assert store.get_category(first).description == "All things technical"


def test_category_names_are_case_sensitive(store):
    assert store.add_category("Tech") != store.add_category("tech")
    assert count_rows(store, "categories") == 2


def test_get_categories_alphabetical(store):
    for name in ("Science", "Art", "Math"):
        store.add_category(name)

    categories = store.get_categories()
    assert [c.name for c in categories] == ["Art", "Math", "Science"]
    assert all(isinstance(c, CategoryRecord) for c in categories)
    assert categories[0].created_at is not None


def test_get_unknown_category_is_none(store):
    assert store.get_category(999) is None


# -------------------------------------------------------------------
# 2️⃣  Content + links
# -------------------------------------------------------------------
def test_add_content_always_inserts(store):
    a = store.add_content("https://a", "A", "sum", "full text")
    b = store.add_content("https://a", "A", "sum", "full text")

    assert a != b
    assert count_rows(store, "content") == 2


def test_link_is_idempotent(store):
    content_id = store.add_content("https://a", "A", "sum", "text")
    category_id = store.add_category("Tech")

    store.link_content_to_category(content_id, category_id)
    store.link_content_to_category(content_id, category_id)

    assert count_rows(store, "content_categories") == 1


def test_link_to_missing_rows_is_rejected(store):
    category_id = store.add_category("Tech")

    with pytest.raises(StorageError):
        store.link_content_to_category(12345, category_id)
    assert count_rows(store, "content_categories") == 0


def test_get_content_by_category_newest_first(store):
    tech = store.add_category("Tech")
    other = store.add_category("Other")
    first = store.add_content("https://1", "First", "s1", "t1")
    second = store.add_content("https://2", "Second", "s2", "t2")
    unrelated = store.add_content("https://3", "Third", "s3", "t3")
    store.link_content_to_category(first, tech)
    store.link_content_to_category(second, tech)
    store.link_content_to_category(unrelated, other)

    records = store.get_content_by_category(tech)

    assert [r.id for r in records] == [second, first]
    assert all(isinstance(r, ContentRecord) for r in records)
    assert records[0].full_text == "t2"
    assert records[0].url == "https://2"


# -------------------------------------------------------------------
# 3️⃣  Search
# -------------------------------------------------------------------
def test_search_matches_title_or_summary_case_insensitively(store):
    theory = store.add_content("https://ct", "Category theory", "Arrows", "x")
    cat = store.add_content("https://cat", "Pets", "the cat sat", "x")
    store.add_content("https://dog", "dog", "bark", "x")

    results = store.search_content("cat")

    assert {r.id for r in results} == {theory, cat}
    assert [r.id for r in results] == [cat, theory]


def test_search_without_matches(store):
    store.add_content("https://dog", "dog", "bark", "x")
    assert store.search_content("zebra") == []


# -------------------------------------------------------------------
# 4️⃣  Lifecycle
# -------------------------------------------------------------------
def test_data_survives_reopen(tmp_path):
    path = tmp_path / "nested" / "dir" / "knowledge.db"
    with KnowledgeStore(path) as db:
        db.add_category("Tech")

    assert path.exists()
    with KnowledgeStore(path) as db:
        assert [c.name for c in db.get_categories()] == ["Tech"]


def test_in_memory_store():
    with KnowledgeStore(":memory:") as db:
        assert db.add_category("Tech") == 1
