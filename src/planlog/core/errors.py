class PlanlogError(Exception):
    """Base class for planlog errors."""


class NotFound(PlanlogError, KeyError):
    """A document, block or saved view lookup failed."""

    def __init__(self, kind: str, id: str):
        self.kind = kind
        self.id = id
        super().__init__(f"{kind} {id!r} not found")

    def __str__(self) -> str:
        return self.args[0]


class InvalidSnapshot(PlanlogError, ValueError):
    """A persisted snapshot could not be decoded into a state."""
