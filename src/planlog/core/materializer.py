import logging

from .model import BlockId
from .ports import AnnotationParser
from .store import DocumentStore

logger = logging.getLogger(__name__)


class ReferenceMaterializer:
    """
    Ensure every page named by a [[link]] anywhere in the corpus exists.

    Each run is a full scan, O(blocks x text length). Parsed links are cached
    per block and reused while the block's updated_at and text are unchanged.
    """

    def __init__(self, parser: AnnotationParser):
        self.parser = parser
        self._cache: dict[BlockId, tuple[str, str, list[str]]] = {}

    def _links(self, block) -> list[str]:
        hit = self._cache.get(block.id)
        if hit is not None and hit[0] == block.updated_at and hit[1] == block.text:
            return hit[2]
        links = self.parser.links(block.text)
        self._cache[block.id] = (block.updated_at, block.text, links)
        return links

    def referenced(self, store: DocumentStore) -> list[str]:
        """Union of link targets over all blocks, in first-seen order."""
        seen: dict[str, None] = {}
        live: set[BlockId] = set()
        for doc in store.documents():
            for block in doc.blocks:
                live.add(block.id)
                for name in self._links(block):
                    seen.setdefault(name, None)
        for stale in self._cache.keys() - live:
            del self._cache[stale]
        return list(seen)

    def run(self, store: DocumentStore) -> list[str]:
        """Materialize missing pages; returns the titles that were created."""
        created = []
        for title in self.referenced(store):
            if title in store.pages:
                continue
            store.ensure_page(title)
            created.append(title)
        if created:
            logger.info("Created %d page(s) from links: %s", len(created), ", ".join(created))
        return created
