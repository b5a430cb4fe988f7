import copy
import logging
from pathlib import Path
from typing import Any

from ..core.errors import InvalidSnapshot
from ..core.ports import SnapshotCodec, SnapshotStorage

logger = logging.getLogger(__name__)


class FsStorage(SnapshotStorage):
    """Whole-state snapshot kept in a single file."""

    def __init__(self, path: Path, codec: SnapshotCodec):
        self.path = path
        self.codec = codec

    def read_raw(self) -> str | None:
        p = self.path
        return p.read_text(encoding="utf-8") if p.exists() else None

    def load(self) -> dict[str, Any] | None:
        try:
            raw = self.read_raw()
        except (UnicodeDecodeError, OSError) as e:
            raise InvalidSnapshot(f"unreadable snapshot {self.path}: {e}") from e
        if raw is None or not raw.strip():
            return None
        # InvalidSnapshot from the codec propagates; the notebook falls back
        return self.codec.decode(raw)

    def save(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_name(self.path.name + ".tmp")
            tmp.write_text(self.codec.encode(data), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            logger.error("Failed to save snapshot to %s: %s", self.path, e)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


class MemoryStorage(SnapshotStorage):
    """Snapshot held in memory; copies on the way in and out."""

    def __init__(self, data: dict[str, Any] | None = None):
        self.data = copy.deepcopy(data)
        self.saves = 0

    def load(self) -> dict[str, Any] | None:
        return copy.deepcopy(self.data)

    def save(self, data: dict[str, Any]) -> None:
        self.data = copy.deepcopy(data)
        self.saves += 1

    def clear(self) -> None:
        self.data = None
