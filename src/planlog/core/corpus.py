"""Flat projection of every block in the store, tagged with its owning document."""

from collections import Counter

from .model import CorpusEntry
from .ports import AnnotationParser
from .store import DocumentStore


def collect_entries(store: DocumentStore) -> list[CorpusEntry]:
    """
    One entry per block, journals first then pages, each in store order.

    Recomputed on every call; the cost is linear in the number of blocks.
    """
    return [
        CorpusEntry(
            block=block,
            scope_kind=doc.kind,
            scope_id=doc.id,
            scope_title=doc.title,
        )
        for doc in store.documents()
        for block in doc.blocks
    ]


def tag_counts(
    entries: list[CorpusEntry], parser: AnnotationParser
) -> list[tuple[str, int]]:
    """Number of blocks carrying each tag, most frequent first."""
    freq: Counter[str] = Counter()
    for entry in entries:
        freq.update(parser.tags(entry.block.text))
    # Counter keeps first-seen order; sorted() is stable
    return sorted(freq.items(), key=lambda kv: kv[1], reverse=True)


def entries_tagged(
    entries: list[CorpusEntry], parser: AnnotationParser, tag: str
) -> list[CorpusEntry]:
    return [e for e in entries if tag in parser.tags(e.block.text)]
