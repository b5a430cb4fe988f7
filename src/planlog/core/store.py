from collections.abc import Iterator

from .errors import NotFound
from .model import Block, BlockId, DocId, DocKind, Document, Status
from .ports import Clock, IdGenerator


class DocumentStore:
    """
    Journals and pages, each an ordered list of blocks.

    Journals and pages are kept in insertion order; corpus scans visit all
    journals first, then all pages.
    """

    def __init__(self, clock: Clock, idgen: IdGenerator):
        self.clock = clock
        self.idgen = idgen
        self.journals: dict[DocId, Document] = {}
        self.pages: dict[DocId, Document] = {}

    def _table(self, kind: DocKind) -> dict[DocId, Document]:
        return self.journals if DocKind(kind) is DocKind.JOURNAL else self.pages

    # Blocks

    def new_block(self, text: str = "") -> Block:
        now = self.clock.now()
        return Block(
            id=self.idgen.new_id(),
            text=text,
            status=Status.TODO,
            created_at=now,
            updated_at=now,
        )

    def insert_block(self, kind: DocKind, id: DocId, block: Block) -> Block:
        self.get_document(kind, id).blocks.insert(0, block)
        return block

    def remove_block(self, kind: DocKind, id: DocId, block_id: BlockId) -> Block:
        doc = self.get_document(kind, id)
        idx = doc.block_index(block_id)
        if idx is None:
            raise NotFound("block", block_id)
        return doc.blocks.pop(idx)

    def replace_block(self, kind: DocKind, id: DocId, block: Block) -> Block:
        doc = self.get_document(kind, id)
        idx = doc.block_index(block.id)
        if idx is None:
            raise NotFound("block", block.id)
        doc.blocks[idx] = block
        return block

    def find_block(self, block_id: BlockId) -> tuple[Document, Block]:
        for doc in self.documents():
            idx = doc.block_index(block_id)
            if idx is not None:
                return doc, doc.blocks[idx]
        raise NotFound("block", block_id)

    # Documents

    def documents(self) -> Iterator[Document]:
        yield from self.journals.values()
        yield from self.pages.values()

    def find_document(self, kind: DocKind, id: DocId) -> Document | None:
        return self._table(kind).get(id)

    def get_document(self, kind: DocKind, id: DocId) -> Document:
        doc = self.find_document(kind, id)
        if doc is None:
            raise NotFound(DocKind(kind).value, id)
        return doc

    def add_document(self, doc: Document) -> Document:
        self._table(doc.kind)[doc.id] = doc
        return doc

    def _new_journal(self, id: DocId) -> Document:
        return self.add_document(
            Document(
                kind=DocKind.JOURNAL,
                id=id,
                title=id,
                created_at=self.clock.now(),
                blocks=[self.new_block("")],
            )
        )

    def create_journal(self, date: str) -> Document:
        """
        Create a journal for `date`. If that id is taken, the smallest
        "<date> (n)" with n >= 2 that is free is used instead.
        """
        id = date
        n = 1
        while id in self.journals:
            n += 1
            id = f"{date} ({n})"
        return self._new_journal(id)

    def ensure_journal(self, date: str) -> Document:
        """Return the journal for `date`, creating it if absent (no suffixing)."""
        return self.journals.get(date) or self._new_journal(date)

    def ensure_page(self, title: str) -> Document:
        """
        Return the page titled `title` (surrounding whitespace trimmed),
        creating it with a single seed block if it does not exist.
        """
        title = title.strip()
        page = self.pages.get(title)
        if page is not None:
            return page
        return self.add_document(
            Document(
                kind=DocKind.PAGE,
                id=title,
                title=title,
                created_at=self.clock.now(),
                blocks=[self.new_block(f"[[{title}]] page created.")],
            )
        )

    def list_journals(self) -> list[Document]:
        return sorted(self.journals.values(), key=lambda d: d.id, reverse=True)

    def list_pages(self) -> list[Document]:
        return sorted(self.pages.values(), key=lambda d: d.title)
