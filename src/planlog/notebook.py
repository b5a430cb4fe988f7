"""
The notebook service: one store plus UI state and saved views.

Every mutation runs the same pipeline: change the store, materialize pages
for new [[links]], then persist the whole snapshot. Reads (queries,
backlinks, tags) project the corpus on demand.
"""

import dataclasses
import logging
from typing import Any

from .core.corpus import collect_entries, entries_tagged, tag_counts
from .core.errors import InvalidSnapshot, NotFound
from .core.materializer import ReferenceMaterializer
from .core.model import (
    Block,
    BlockId,
    CorpusEntry,
    DocKind,
    Document,
    QuerySpec,
    SavedView,
    UIState,
)
from .core.ports import AnnotationParser, Clock, IdGenerator, SnapshotStorage
from .core.query import DEFAULT_QUERY_BLOCK, QueryEngine, describe, parse_query_block
from .core.snapshot import State, state_from_dict, state_to_dict
from .core.status import cycle
from .core.store import DocumentStore

logger = logging.getLogger(__name__)


def default_state(clock: Clock, idgen: IdGenerator) -> State:
    """Today's journal with a few starter blocks and a Dashboard page."""
    store = DocumentStore(clock, idgen)
    tid = clock.today()
    today = store.create_journal(tid)
    today.blocks = [
        store.new_block("What should I do today? #work [[ProjectX]]"),
        store.new_block("Cycle a block through TODO/DOING/DONE with `planlog cycle`."),
        store.new_block(DEFAULT_QUERY_BLOCK),
    ]
    dashboard = store.ensure_page("Dashboard")
    dashboard.blocks = [
        store.new_block("Collect query blocks on [[Dashboard]]."),
        store.new_block("{{query status:DOING scope:all}}"),
    ]
    ui = UIState(current_type=DocKind.JOURNAL, current_id=today.id)
    return State(store=store, ui=ui, views=[])


def _limit(items: list, limit: int | None) -> list:
    return items if limit is None else items[:limit]


class Notebook:
    def __init__(
        self,
        state: State,
        storage: SnapshotStorage,
        clock: Clock,
        idgen: IdGenerator,
        parser: AnnotationParser,
    ):
        self.state = state
        self.storage = storage
        self.clock = clock
        self.idgen = idgen
        self.parser = parser
        self.materializer = ReferenceMaterializer(parser)
        self.engine = QueryEngine(parser)

    @classmethod
    def open(
        cls,
        storage: SnapshotStorage,
        clock: Clock,
        idgen: IdGenerator,
        parser: AnnotationParser,
    ) -> "Notebook":
        """
        Load the stored snapshot. A missing or malformed snapshot yields a
        freshly seeded default state, which is saved straight away.
        """
        state = None
        try:
            data = storage.load()
            if data is not None:
                state = state_from_dict(data, clock, idgen)
        except InvalidSnapshot as e:
            logger.warning("Ignoring stored snapshot: %s", e)

        if state is None:
            logger.info("Starting from default state")
            nb = cls(default_state(clock, idgen), storage, clock, idgen, parser)
            nb.commit()
            return nb

        nb = cls(state, storage, clock, idgen, parser)
        nb.materializer.run(nb.store)
        if nb.store.find_document(nb.ui.current_type, nb.ui.current_id) is None:
            logger.warning(
                "Current %s %r is gone; opening today",
                nb.ui.current_type.value,
                nb.ui.current_id,
            )
            nb.open_today()
        return nb

    # State

    @property
    def store(self) -> DocumentStore:
        return self.state.store

    @property
    def ui(self) -> UIState:
        return self.state.ui

    @property
    def views(self) -> list[SavedView]:
        return self.state.views

    def snapshot(self) -> dict[str, Any]:
        return state_to_dict(self.state)

    def save(self) -> None:
        self.storage.save(self.snapshot())

    def commit(self) -> list[str]:
        """Materialize linked pages, then persist. Returns created page titles."""
        created = self.materializer.run(self.store)
        self.save()
        return created

    def reset(self) -> None:
        logger.info("Resetting notebook")
        self.storage.clear()
        self.state = default_state(self.clock, self.idgen)
        self.materializer = ReferenceMaterializer(self.parser)
        self.commit()

    # Navigation

    def current_document(self) -> Document:
        return self.store.get_document(self.ui.current_type, self.ui.current_id)

    def header(self) -> str:
        doc = self.current_document()
        if doc.kind is DocKind.JOURNAL:
            return "Today" if doc.id == self.clock.today() else f"Journal · {doc.title}"
        return doc.title

    def navigate(self, kind: DocKind, id: str) -> Document:
        doc = self.store.get_document(kind, id)
        self.ui.current_type = doc.kind
        self.ui.current_id = doc.id
        self.save()
        return doc

    def follow_link(self, title: str) -> Document:
        page = self.store.ensure_page(title)
        return self.navigate(DocKind.PAGE, page.id)

    def open_today(self) -> Document:
        doc = self.store.ensure_journal(self.clock.today())
        return self.navigate(DocKind.JOURNAL, doc.id)

    def new_journal(self) -> Document:
        doc = self.store.create_journal(self.clock.today())
        return self.navigate(DocKind.JOURNAL, doc.id)

    def new_page(self, name: str) -> Document | None:
        name = (name or "").strip()
        if not name:
            return None
        return self.follow_link(name)

    # Blocks

    def find_block(self, block_id: BlockId) -> tuple[Document, Block]:
        return self.store.find_block(block_id)

    def add_block(self, text: str = "") -> Block:
        doc = self.current_document()
        block = self.store.insert_block(doc.kind, doc.id, self.store.new_block(text))
        self.commit()
        return block

    def add_query_block(self) -> Block:
        return self.add_block(DEFAULT_QUERY_BLOCK)

    def _update(self, block_id: BlockId, **changes: Any) -> Block:
        doc, block = self.store.find_block(block_id)
        updated = dataclasses.replace(block, updated_at=self.clock.now(), **changes)
        self.store.replace_block(doc.kind, doc.id, updated)
        self.commit()
        return updated

    def edit_block(self, block_id: BlockId, text: str) -> Block:
        return self._update(block_id, text=text)

    def cycle_block(self, block_id: BlockId) -> Block:
        _, block = self.store.find_block(block_id)
        return self._update(block_id, status=cycle(block.status))

    def delete_block(self, block_id: BlockId) -> Block:
        doc, _ = self.store.find_block(block_id)
        removed = self.store.remove_block(doc.kind, doc.id, block_id)
        self.commit()
        return removed

    # Reads

    def corpus(self) -> list[CorpusEntry]:
        return collect_entries(self.store)

    def query(self, spec: QuerySpec, limit: int | None = None) -> list[CorpusEntry]:
        hits = self.engine.evaluate(
            spec, self.corpus(), self.ui.current_type, self.ui.current_id
        )
        return _limit(hits, limit)

    def query_block(self, block: Block) -> QuerySpec | None:
        return parse_query_block(block.text)

    def backlinks(self, limit: int | None = None) -> list[CorpusEntry]:
        hits = self.engine.backlinks(self.corpus(), self.current_document())
        return _limit(hits, limit)

    def tag_cloud(self, limit: int | None = None) -> list[tuple[str, int]]:
        return _limit(tag_counts(self.corpus(), self.parser), limit)

    def tagged(self, tag: str, limit: int | None = None) -> list[CorpusEntry]:
        tag = tag[1:] if tag.startswith("#") else tag
        return _limit(entries_tagged(self.corpus(), self.parser, tag), limit)

    def tags_of(self, block: Block) -> list[str]:
        return self.parser.tags(block.text)

    def links_of(self, block: Block) -> list[str]:
        return self.parser.links(block.text)

    # Saved views

    def save_view(self, name: str | None, query: QuerySpec) -> SavedView | None:
        if name is None:
            name = describe(query)
        name = name.strip()
        if not name:
            return None
        view = SavedView(
            id=self.idgen.new_id(),
            name=name,
            query=query,
            created_at=self.clock.now(),
        )
        self.views.insert(0, view)
        self.save()
        return view

    def remove_view(self, view_id: str) -> SavedView:
        for i, v in enumerate(self.views):
            if v.id == view_id:
                removed = self.views.pop(i)
                self.save()
                return removed
        raise NotFound("view", view_id)

    def view_results(self, view: SavedView, limit: int | None = None) -> list[CorpusEntry]:
        return self.query(view.query, limit)
