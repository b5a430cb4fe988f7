"""Shared fixtures: deterministic clock and ids, in-memory storage."""

from datetime import datetime, timedelta, timezone

import pytest

from planlog.adapters.annotations import RegexAnnotationParser
from planlog.adapters.fs_storage import MemoryStorage
from planlog.core.store import DocumentStore
from planlog.core.utils import now_iso
from planlog.notebook import Notebook


class FakeClock:
    """Each now() call advances by `step`; step=0 freezes time."""

    def __init__(self, today: str = "2024-01-01", step: timedelta = timedelta(seconds=1)):
        self._today = today
        self.moment = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
        self.step = step

    def now(self) -> str:
        stamp = now_iso(self.moment)
        self.moment += self.step
        return stamp

    def today(self) -> str:
        return self._today


class SeqIds:
    def __init__(self, prefix: str = "b"):
        self.prefix = prefix
        self.n = 0

    def new_id(self) -> str:
        self.n += 1
        return f"{self.prefix}{self.n:04d}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ids():
    return SeqIds()


@pytest.fixture
def parser():
    return RegexAnnotationParser()


@pytest.fixture
def store(clock, ids):
    return DocumentStore(clock, ids)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def notebook(storage, clock, ids, parser):
    return Notebook.open(storage, clock, ids, parser)
