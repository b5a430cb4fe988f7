from typing import Any, Protocol

from .model import BlockId


class Clock(Protocol):
    def now(self) -> str:
        """ISO-8601 UTC timestamp."""

    def today(self) -> str:
        """Local calendar date as YYYY-MM-DD."""


class IdGenerator(Protocol):
    def new_id(self) -> BlockId:
        pass


class AnnotationParser(Protocol):
    """
    Pure lexical scan of block text. Both methods return distinct values in
    order of first occurrence.
    """

    def tags(self, text: str) -> list[str]:
        pass

    def links(self, text: str) -> list[str]:
        pass


class SnapshotCodec(Protocol):
    def decode(self, text: str) -> dict[str, Any]:
        pass

    def encode(self, data: dict[str, Any]) -> str:
        pass


class SnapshotStorage(Protocol):
    """
    Load/save pair for the whole-state blob. load() returns None when nothing
    is stored; save() never raises.
    """

    def load(self) -> dict[str, Any] | None:
        pass

    def save(self, data: dict[str, Any]) -> None:
        pass

    def clear(self) -> None:
        pass
