"""Unit tests for registry snapshot persistence."""

from __future__ import annotations

import json
import os
import stat

import pytest

from core.errors import SnapshotCorruptError, SnapshotNotFoundError, SnapshotWriteError
from store.snapshot_store import SnapshotStore


@pytest.mark.parametrize(
    "state",
    [{}, {"vol1": "data/vol1"}, {"a": "x", "b": "y/z", "c": ""}],
)
def test_save_then_load_returns_equal_state(tmp_path, state: dict[str, str]) -> None:
    """Saved state should load back unchanged, including the empty map."""
    store = SnapshotStore(tmp_path, "local-persist")
    store.save(state)

    loaded = store.load()

    assert loaded == state


def test_save_writes_state_document_with_owner_only_mode(tmp_path) -> None:
    """Snapshot should be a state document readable only by its owner."""
    store = SnapshotStore(tmp_path, "local-persist")
    store.save({"vol1": "data/vol1"})

    payload = json.loads((tmp_path / "local-persist.json").read_text(encoding="utf-8"))
    mode = stat.S_IMODE(os.stat(store.path).st_mode)

    assert payload == {"state": {"vol1": "data/vol1"}} and mode == 0o600


def test_save_overwrites_previous_snapshot_without_leftovers(tmp_path) -> None:
    """A later save should fully replace the earlier state and leave no temp files."""
    store = SnapshotStore(tmp_path, "local-persist")
    store.save({"old": "a"})
    store.save({"new": "b"})

    leftovers = sorted(path.name for path in tmp_path.iterdir())

    assert store.load() == {"new": "b"} and leftovers == ["local-persist.json"]


def test_load_missing_snapshot_raises_not_found(tmp_path) -> None:
    """First run should be distinguishable from corruption."""
    store = SnapshotStore(tmp_path, "local-persist")

    with pytest.raises(SnapshotNotFoundError):
        store.load()


@pytest.mark.parametrize(
    "raw_text",
    ["{not json", "[]", '{"state": ["a"]}', '{"state": {"vol1": 3}}'],
)
def test_load_invalid_snapshot_raises_corrupt(tmp_path, raw_text: str) -> None:
    """Unparsable or mistyped snapshots should be reported as corrupt."""
    (tmp_path / "local-persist.json").write_text(raw_text, encoding="utf-8")
    store = SnapshotStore(tmp_path, "local-persist")

    with pytest.raises(SnapshotCorruptError):
        store.load()


@pytest.mark.parametrize("raw_text", ["{}", '{"state": null}'])
def test_load_snapshot_without_state_yields_empty_map(tmp_path, raw_text: str) -> None:
    """A document lacking state should load as an empty registry."""
    (tmp_path / "local-persist.json").write_text(raw_text, encoding="utf-8")
    store = SnapshotStore(tmp_path, "local-persist")

    assert store.load() == {}


def test_save_into_missing_directory_raises_write_error(tmp_path) -> None:
    """Write failures should surface as SnapshotWriteError."""
    store = SnapshotStore(tmp_path / "missing", "local-persist")

    with pytest.raises(SnapshotWriteError):
        store.save({"vol1": "data"})


def test_ensure_state_dir_creates_owner_only_directory(tmp_path) -> None:
    """State directory should be created with owner-only permissions."""
    state_dir = tmp_path / "plugin-data"
    store = SnapshotStore(state_dir, "local-persist")
    previous_umask = os.umask(0o022)
    try:
        store.ensure_state_dir()
    finally:
        os.umask(previous_umask)

    mode = stat.S_IMODE(os.stat(state_dir).st_mode)

    assert state_dir.is_dir() and mode == 0o700
