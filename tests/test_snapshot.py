"""Tests for snapshot conversion, codecs and file storage."""

import tempfile
from pathlib import Path

import pytest

from planlog.adapters.fs_storage import FsStorage, MemoryStorage
from planlog.adapters.snapshot_codecs import JsonCodec, YamlCodec, codec_for
from planlog.core.errors import InvalidSnapshot
from planlog.core.model import QuerySpec, SavedView
from planlog.core.snapshot import state_from_dict, state_to_dict
from planlog.notebook import default_state


def _graph(state):
    return {
        (d.kind, key): (d.id, d.title, d.created_at, [
            (b.id, b.text, b.status, b.created_at, b.updated_at) for b in d.blocks
        ])
        for key, d in list(state.store.journals.items()) + list(state.store.pages.items())
    }


@pytest.fixture
def state(clock, ids):
    st = default_state(clock, ids)
    st.store.create_journal("2024-01-01").blocks[0].text = "오늘 #업무 [[ProjectX]]"
    st.views.append(
        SavedView(id="v1", name="todo", query=QuerySpec(status="TODO"), created_at=clock.now())
    )
    st.ui.extra["theme"] = "dark"
    return st


def test_dict_round_trip(state, clock, ids):
    """Test that a state survives to_dict/from_dict unchanged."""
    data = state_to_dict(state)
    again = state_from_dict(data, clock, ids)
    assert _graph(again) == _graph(state)
    assert again.views == state.views
    assert again.ui == state.ui
    assert state_to_dict(again) == data


@pytest.mark.parametrize("codec", [JsonCodec(), YamlCodec()])
def test_codec_round_trip(state, clock, ids, codec):
    """Test that both codecs reproduce the snapshot exactly."""
    data = state_to_dict(state)
    decoded = codec.decode(codec.encode(data))
    assert decoded == data
    assert _graph(state_from_dict(decoded, clock, ids)) == _graph(state)


def test_snapshot_shape(state):
    """Test the top-level keys and camelCase fields."""
    data = state_to_dict(state)
    assert set(data) == {"ui", "journals", "pages", "views"}
    assert data["ui"]["currentType"] == "journal"
    assert data["ui"]["theme"] == "dark"
    block = data["journals"]["2024-01-01"]["blocks"][0]
    assert set(block) == {"id", "text", "status", "createdAt", "updatedAt"}


def test_saved_views_alias(state, clock, ids):
    """Test that savedViews is accepted in place of views."""
    data = state_to_dict(state)
    data["savedViews"] = data.pop("views")
    assert state_from_dict(data, clock, ids).views == state.views


@pytest.mark.parametrize(
    "data",
    [
        [],
        "text",
        {"journals": {}, "pages": {}},
        {"ui": {"currentType": "shelf", "currentId": "x"}},
        {"ui": {"currentType": "page", "currentId": "x"}, "pages": {"x": {"id": "x"}}},
        {
            "ui": {"currentType": "page", "currentId": "x"},
            "pages": {"x": {"id": "x", "createdAt": "t", "blocks": [
                {"id": "b", "text": "", "status": "LATER", "createdAt": "t"}
            ]}},
        },
    ],
)
def test_malformed_snapshot_rejected(data, clock, ids):
    """Test that structural problems raise InvalidSnapshot."""
    with pytest.raises(InvalidSnapshot):
        state_from_dict(data, clock, ids)


def test_codecs_reject_garbage():
    """Test that parse errors become InvalidSnapshot."""
    with pytest.raises(InvalidSnapshot):
        JsonCodec().decode("{not json")
    with pytest.raises(InvalidSnapshot):
        YamlCodec().decode("a: [unclosed")


def test_codec_for():
    """Test codec selection by name and suffix."""
    assert isinstance(codec_for(None, Path("s.json")), JsonCodec)
    assert isinstance(codec_for(None, Path("s.yml")), YamlCodec)
    assert isinstance(codec_for("yaml", Path("s.json")), YamlCodec)
    with pytest.raises(ValueError):
        codec_for("xml")


def test_fs_storage_round_trip(state):
    """Test saving and loading through a file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "nested" / "state.json"
        storage = FsStorage(path, JsonCodec())
        assert storage.load() is None
        data = state_to_dict(state)
        storage.save(data)
        assert path.exists()
        assert "오늘" in path.read_text(encoding="utf-8")
        assert storage.load() == data
        storage.clear()
        assert not path.exists()
        assert storage.load() is None


def test_fs_storage_corrupt_file_raises():
    """Test that a corrupt file surfaces as InvalidSnapshot."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "state.json"
        path.write_text("{oops", encoding="utf-8")
        with pytest.raises(InvalidSnapshot):
            FsStorage(path, JsonCodec()).load()


def test_fs_storage_unreadable_file_raises():
    """Test that undecodable bytes and unreadable paths surface as InvalidSnapshot."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "state.json"
        path.write_bytes(b'{"ui": "\xff\xfe broken"}')
        with pytest.raises(InvalidSnapshot):
            FsStorage(path, JsonCodec()).load()

        as_dir = Path(tmpdir) / "dir.json"
        as_dir.mkdir()
        with pytest.raises(InvalidSnapshot):
            FsStorage(as_dir, JsonCodec()).load()


def test_fs_storage_save_failure_is_logged(state, caplog):
    """Test that save() does not raise on I/O errors."""
    with tempfile.TemporaryDirectory() as tmpdir:
        blocker = Path(tmpdir) / "file"
        blocker.write_text("x")
        storage = FsStorage(blocker / "state.json", JsonCodec())
        storage.save(state_to_dict(state))
        assert "Failed to save snapshot" in caplog.text


def test_memory_storage_copies():
    """Test that stored data is isolated from the caller."""
    storage = MemoryStorage()
    data = {"a": [1]}
    storage.save(data)
    data["a"].append(2)
    assert storage.load() == {"a": [1]}
    assert storage.saves == 1
