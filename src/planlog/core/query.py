"""
Query/view evaluation over the block corpus.

A query narrows the corpus in fixed stages (scope, status, tag, text) and
then orders the survivors by updated_at, newest first. Every stage only
removes entries, so adding constraints never grows a result.

Query blocks embed a spec in block text:

    {{query status:TODO tag:#work contains:draft scope:current}}
"""

import re

from .model import CorpusEntry, DocKind, Document, QuerySpec, QueryStatus, Scope
from .ports import AnnotationParser

QUERY_BLOCK_RE = re.compile(r"^\{\{query\s+(.+?)\}\}$", re.IGNORECASE)

DEFAULT_QUERY_BLOCK = "{{query status:TODO scope:current}}"


def parse_query_tokens(body: str) -> QuerySpec:
    """
    Build a spec from whitespace separated key:value tokens. Tokens without
    a value and unknown keys are ignored; later tokens win.
    """
    fields = {"status": "ALL", "tag": "", "text": "", "scope": "ALL"}
    for token in body.split():
        parts = token.split(":")
        if len(parts) < 2 or not parts[1]:
            continue
        key = parts[0].lower()
        value = parts[1].strip()
        if key == "status":
            fields["status"] = value.upper()
        elif key == "tag":
            fields["tag"] = value[1:] if value.startswith("#") else value
        elif key in ("contains", "text"):
            fields["text"] = value
        elif key == "scope":
            fields["scope"] = "CURRENT" if value.upper() == "CURRENT" else "ALL"
    return QuerySpec(**fields)


def parse_query_block(text: str) -> QuerySpec | None:
    """Return the spec embedded in a {{query ...}} block, or None."""
    m = QUERY_BLOCK_RE.match(str(text or "").strip())
    if not m:
        return None
    return parse_query_tokens(m.group(1).strip())


def describe(spec: QuerySpec) -> str:
    """One-line summary, e.g. "scope:current · status:TODO · #work"."""
    parts = ["scope:current" if spec.scope is Scope.CURRENT else "scope:all"]
    if spec.status is not QueryStatus.ALL:
        parts.append(f"status:{spec.status.value}")
    if spec.tag:
        parts.append(f"#{spec.tag}")
    if spec.text:
        parts.append(f"contains:{spec.text}")
    return " · ".join(parts)


class QueryEngine:
    def __init__(self, parser: AnnotationParser):
        self.parser = parser

    def evaluate(
        self,
        spec: QuerySpec,
        entries: list[CorpusEntry],
        current_kind: DocKind,
        current_id: str,
    ) -> list[CorpusEntry]:
        """Full ordered match set; callers slice their own top-N."""
        hits = list(entries)
        if spec.scope is Scope.CURRENT:
            kind = DocKind(current_kind)
            hits = [e for e in hits if e.scope_kind is kind and e.scope_id == current_id]
        if spec.status is not QueryStatus.ALL:
            hits = [e for e in hits if e.block.status.value == spec.status.value]
        if spec.tag:
            hits = [e for e in hits if spec.tag in self.parser.tags(e.block.text)]
        if spec.text:
            needle = spec.text.casefold()
            hits = [e for e in hits if needle in e.block.text.casefold()]
        # list.sort is stable, including with reverse=True
        hits.sort(key=lambda e: e.block.updated_at, reverse=True)
        return hits

    def backlinks(
        self, entries: list[CorpusEntry], doc: Document
    ) -> list[CorpusEntry]:
        """
        Blocks in other documents that mention `doc`: the raw journal id for
        journals, "[[Title]]" or a parsed link for pages. Corpus order.
        """
        is_page = doc.kind is DocKind.PAGE
        token = f"[[{doc.title}]]" if is_page else doc.id
        out = []
        for e in entries:
            if e.scope_kind is doc.kind and e.scope_id == doc.id:
                continue
            text = e.block.text
            if token in text or (is_page and doc.title in self.parser.links(text)):
                out.append(e)
        return out
