from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

BlockId = str
DocId = str


class Status(str, Enum):
    TODO = "TODO"
    DOING = "DOING"
    DONE = "DONE"


class QueryStatus(str, Enum):
    TODO = "TODO"
    DOING = "DOING"
    DONE = "DONE"
    ALL = "ALL"


class Scope(str, Enum):
    CURRENT = "CURRENT"
    ALL = "ALL"


class DocKind(str, Enum):
    JOURNAL = "journal"
    PAGE = "page"


@dataclass
class Block:
    id: BlockId
    text: str
    status: Status
    created_at: str  # ISO-8601 UTC, never changes
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "status": self.status.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Block:
        return cls(
            id=str(data["id"]),
            text=str(data.get("text", "")),
            status=Status(data.get("status", "TODO")),
            created_at=str(data["createdAt"]),
            updated_at=str(data.get("updatedAt", data["createdAt"])),
        )


@dataclass
class Document:
    """
    A journal (keyed by a YYYY-MM-DD date, optionally suffixed " (n)") or a
    page (keyed by its exact, case-sensitive title). For both kinds id == title.
    """

    kind: DocKind
    id: DocId
    title: str
    created_at: str
    blocks: list[Block] = field(default_factory=list)

    def block_index(self, block_id: BlockId) -> int | None:
        for i, b in enumerate(self.blocks):
            if b.id == block_id:
                return i
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": self.created_at,
            "blocks": [b.to_dict() for b in self.blocks],
        }

    @classmethod
    def from_dict(cls, kind: DocKind, data: dict[str, Any]) -> Document:
        return cls(
            kind=kind,
            id=str(data["id"]),
            title=str(data.get("title", data["id"])),
            created_at=str(data["createdAt"]),
            blocks=[Block.from_dict(b) for b in data.get("blocks", [])],
        )


@dataclass(frozen=True)
class CorpusEntry:
    block: Block
    scope_kind: DocKind
    scope_id: DocId
    scope_title: str


def _coerce(enum_cls: type[Enum], value: Any, default: Enum) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, Enum):
        value = value.value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        return default


@dataclass(frozen=True)
class QuerySpec:
    """
    Filter predicate over the block corpus.

    Values are normalized on construction: an unknown status or scope falls
    back to ALL, a leading "#" on the tag is dropped and None becomes "".
    """

    status: QueryStatus = QueryStatus.ALL
    tag: str = ""
    text: str = ""
    scope: Scope = Scope.ALL

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "status", _coerce(QueryStatus, self.status, QueryStatus.ALL)
        )
        object.__setattr__(self, "scope", _coerce(Scope, self.scope, Scope.ALL))
        tag = (self.tag or "").strip()
        if tag.startswith("#"):
            tag = tag[1:]
        object.__setattr__(self, "tag", tag)
        object.__setattr__(self, "text", self.text or "")

    def to_dict(self) -> dict[str, str]:
        return {
            "status": self.status.value,
            "tag": self.tag,
            "text": self.text,
            "scope": self.scope.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuerySpec:
        return cls(
            status=data.get("status", "ALL"),
            tag=data.get("tag", ""),
            text=data.get("text", ""),
            scope=data.get("scope", "ALL"),
        )


@dataclass(frozen=True)
class SavedView:
    id: str
    name: str
    query: QuerySpec
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "query": self.query.to_dict(),
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SavedView:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            query=QuerySpec.from_dict(data.get("query") or {}),
            created_at=str(data.get("createdAt", "")),
        )


@dataclass
class UIState:
    current_type: DocKind
    current_id: DocId
    panel_tab: str = "backlinks"
    extra: dict[str, Any] = field(default_factory=dict)  # unknown keys, kept verbatim

    def to_dict(self) -> dict[str, Any]:
        out = {
            "currentType": self.current_type.value,
            "currentId": self.current_id,
            "panelTab": self.panel_tab,
        }
        out.update(self.extra)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UIState:
        known = {"currentType", "currentId", "panelTab"}
        return cls(
            current_type=DocKind(data["currentType"]),
            current_id=str(data["currentId"]),
            panel_tab=str(data.get("panelTab", "backlinks")),
            extra={k: v for k, v in data.items() if k not in known},
        )
