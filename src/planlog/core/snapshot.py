"""Whole-state snapshot <-> plain dict conversion."""

from dataclasses import dataclass, field
from typing import Any

from .errors import InvalidSnapshot
from .model import DocKind, Document, SavedView, UIState
from .ports import Clock, IdGenerator
from .store import DocumentStore


@dataclass
class State:
    store: DocumentStore
    ui: UIState
    views: list[SavedView] = field(default_factory=list)


def state_to_dict(state: State) -> dict[str, Any]:
    return {
        "ui": state.ui.to_dict(),
        "journals": {k: d.to_dict() for k, d in state.store.journals.items()},
        "pages": {k: d.to_dict() for k, d in state.store.pages.items()},
        "views": [v.to_dict() for v in state.views],
    }


def state_from_dict(
    data: Any, clock: Clock, idgen: IdGenerator
) -> State:
    """
    Rebuild a State from a decoded snapshot.

    Raises InvalidSnapshot if the shape is wrong (missing sections, bad
    enum values, missing timestamps).
    """
    if not isinstance(data, dict):
        raise InvalidSnapshot(f"snapshot must be a mapping, got {type(data).__name__}")
    try:
        store = DocumentStore(clock, idgen)
        for key, raw in (data.get("journals") or {}).items():
            doc = Document.from_dict(DocKind.JOURNAL, raw)
            store.journals[str(key)] = doc
        for key, raw in (data.get("pages") or {}).items():
            doc = Document.from_dict(DocKind.PAGE, raw)
            store.pages[str(key)] = doc
        ui = UIState.from_dict(data["ui"])
        raw_views = data.get("views", data.get("savedViews")) or []
        views = [SavedView.from_dict(v) for v in raw_views]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise InvalidSnapshot(f"malformed snapshot: {e!r}") from e
    return State(store=store, ui=ui, views=views)
