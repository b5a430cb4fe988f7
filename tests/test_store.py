"""Tests for the document store."""

import dataclasses

import pytest

from planlog.core.errors import NotFound
from planlog.core.model import DocKind, Status


def test_create_journal_has_one_empty_block(store):
    """Test a fresh journal's shape."""
    j = store.create_journal("2024-01-01")
    assert j.kind is DocKind.JOURNAL
    assert j.id == j.title == "2024-01-01"
    assert len(j.blocks) == 1
    assert j.blocks[0].text == ""
    assert j.blocks[0].status is Status.TODO


def test_create_journal_twice_disambiguates(store):
    """Test that a second journal on the same day gets a (2) suffix."""
    store.create_journal("2024-01-01")
    second = store.create_journal("2024-01-01")
    third = store.create_journal("2024-01-01")
    assert second.id == "2024-01-01 (2)"
    assert third.id == "2024-01-01 (3)"


def test_create_journal_picks_smallest_free_suffix(store):
    """Test that gaps in the suffix sequence are reused."""
    store.create_journal("2024-01-01")
    store.create_journal("2024-01-01 (3)")
    assert store.create_journal("2024-01-01").id == "2024-01-01 (2)"


def test_ensure_journal_does_not_suffix(store):
    """Test that ensure_journal returns the existing journal."""
    first = store.ensure_journal("2024-01-01")
    assert store.ensure_journal("2024-01-01") is first
    assert list(store.journals) == ["2024-01-01"]


def test_ensure_page_is_idempotent(store):
    """Test that ensure_page creates once with a seed block."""
    page = store.ensure_page("Foo")
    assert page.kind is DocKind.PAGE
    assert [b.text for b in page.blocks] == ["[[Foo]] page created."]
    assert store.ensure_page("Foo") is page
    assert store.ensure_page("  Foo ") is page
    assert len(store.pages) == 1


def test_ensure_page_titles_case_sensitive(store):
    """Test that page titles are not normalized beyond trimming."""
    store.ensure_page("foo")
    store.ensure_page("Foo")
    assert sorted(store.pages) == ["Foo", "foo"]


def test_get_document_missing_raises(store):
    """Test NotFound for unknown documents."""
    with pytest.raises(NotFound) as exc:
        store.get_document(DocKind.PAGE, "Nope")
    assert exc.value.kind == "page"
    assert exc.value.id == "Nope"
    assert store.find_document(DocKind.JOURNAL, "2024-01-01") is None


def test_insert_remove_replace_blocks(store):
    """Test block list operations on a document."""
    page = store.ensure_page("P")
    seed = page.blocks[0]
    added = store.insert_block(DocKind.PAGE, "P", store.new_block("new"))
    assert [b.id for b in page.blocks] == [added.id, seed.id]

    changed = dataclasses.replace(added, text="changed")
    store.replace_block(DocKind.PAGE, "P", changed)
    assert page.blocks[0].text == "changed"

    removed = store.remove_block(DocKind.PAGE, "P", seed.id)
    assert removed.id == seed.id
    assert [b.id for b in page.blocks] == [added.id]

    with pytest.raises(NotFound):
        store.remove_block(DocKind.PAGE, "P", seed.id)


def test_block_ids_unique(store):
    """Test that every new block gets a new id."""
    store.create_journal("2024-01-01")
    store.ensure_page("A")
    store.ensure_page("B")
    ids = [b.id for d in store.documents() for b in d.blocks]
    assert len(ids) == len(set(ids)) == 3


def test_find_block(store):
    """Test locating a block and its owner across documents."""
    store.create_journal("2024-01-01")
    page = store.ensure_page("A")
    doc, block = store.find_block(page.blocks[0].id)
    assert doc is page
    assert block is page.blocks[0]
    with pytest.raises(NotFound):
        store.find_block("missing")


def test_listing_order(store):
    """Test journals newest first and pages alphabetical."""
    store.create_journal("2024-01-01")
    store.create_journal("2024-03-01")
    store.create_journal("2024-02-01")
    store.ensure_page("beta")
    store.ensure_page("Alpha")
    assert [j.id for j in store.list_journals()] == ["2024-03-01", "2024-02-01", "2024-01-01"]
    assert [p.title for p in store.list_pages()] == ["Alpha", "beta"]


def test_new_block_timestamps(store):
    """Test that created_at equals updated_at on a new block."""
    b = store.new_block("x")
    assert b.created_at == b.updated_at
