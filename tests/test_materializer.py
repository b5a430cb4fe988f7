"""Tests for page materialization from links."""

from planlog.core.materializer import ReferenceMaterializer
from planlog.core.model import DocKind


def _snapshot(store):
    return {
        kind: {k: [(b.id, b.text) for b in d.blocks] for k, d in table.items()}
        for kind, table in (("j", store.journals), ("p", store.pages))
    }


def test_link_creates_page(store, parser):
    """Test that a linked page exists after materialization."""
    j = store.create_journal("2024-01-01")
    j.blocks[0].text = "Plan #work [[ProjectX]]"
    created = ReferenceMaterializer(parser).run(store)
    assert created == ["ProjectX"]
    assert store.get_document(DocKind.PAGE, "ProjectX").title == "ProjectX"


def test_materialization_is_idempotent(store, parser):
    """Test that a second run creates nothing."""
    j = store.create_journal("2024-01-01")
    j.blocks[0].text = "[[A]] [[B]] [[A]]"
    m = ReferenceMaterializer(parser)
    m.run(store)
    before = _snapshot(store)
    assert m.run(store) == []
    assert _snapshot(store) == before
    assert ReferenceMaterializer(parser).run(store) == []
    assert _snapshot(store) == before


def test_existing_pages_untouched(store, parser):
    """Test that a linked page that already exists keeps its blocks."""
    page = store.ensure_page("Foo")
    page.blocks[0].text = "custom"
    j = store.create_journal("2024-01-01")
    j.blocks[0].text = "see [[Foo]]"
    ReferenceMaterializer(parser).run(store)
    assert [b.text for b in store.pages["Foo"].blocks] == ["custom"]


def test_links_in_pages_materialize(store, parser):
    """Test that links inside pages are followed too."""
    page = store.ensure_page("Root")
    page.blocks[0].text = "child [[Leaf]]"
    ReferenceMaterializer(parser).run(store)
    assert "Leaf" in store.pages


def test_cache_sees_edits(store, parser):
    """Test that edited text is re-parsed even with an unchanged timestamp."""
    j = store.create_journal("2024-01-01")
    m = ReferenceMaterializer(parser)
    j.blocks[0].text = "[[One]]"
    m.run(store)
    j.blocks[0].text = "[[Two]]"
    m.run(store)
    assert {"One", "Two"} <= set(store.pages)


def test_referenced_union(store, parser):
    """Test the union of links in first-seen order."""
    j = store.create_journal("2024-01-01")
    j.blocks[0].text = "[[B]] [[A]]"
    p = store.ensure_page("C")
    p.blocks[0].text = "[[A]] [[C]]"
    assert ReferenceMaterializer(parser).referenced(store) == ["B", "A", "C"]
