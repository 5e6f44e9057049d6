"""Registry snapshot persistence.

This module stores the full volume registry state as one JSON document
per driver instance. Writes go through a temporary file and an atomic
rename so a crash mid-write never leaves a truncated snapshot behind.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
import tempfile
from typing import Any, Mapping

from core.constants import (
    SNAPSHOT_FILE_MODE,
    SNAPSHOT_FILE_SUFFIX,
    SNAPSHOT_STATE_KEY,
    STATE_DIR_MODE,
)
from core.errors import SnapshotCorruptError, SnapshotNotFoundError, SnapshotWriteError


class SnapshotStore:
    """Filesystem-backed snapshot store for one driver instance."""

    def __init__(self, state_dir: Path, driver_name: str) -> None:
        self._state_dir = state_dir
        self._driver_name = driver_name

    @property
    def path(self) -> Path:
        """Snapshot file path, ``<state_dir>/<driver_name>.json``."""
        return self._state_dir / f"{self._driver_name}{SNAPSHOT_FILE_SUFFIX}"

    def ensure_state_dir(self) -> None:
        """Create the state directory with owner-only permissions if absent.

        Raises:
            SnapshotWriteError: If the directory cannot be created.
        """
        if self._state_dir.is_dir():
            return
        try:
            self._state_dir.mkdir(mode=STATE_DIR_MODE, parents=True, exist_ok=True)
        except OSError as error:
            raise SnapshotWriteError(
                f"Failed to create state directory {self._state_dir}: {error}. "
                "Check permissions or point the state dir elsewhere."
            ) from error

    def save(self, state: Mapping[str, str]) -> None:
        """Replace the snapshot with the given registry state.

        Args:
            state: Volume name to mountpoint mapping, possibly empty.

        Raises:
            SnapshotWriteError: If the snapshot cannot be written.
        """
        payload = json.dumps({SNAPSHOT_STATE_KEY: dict(state)}, indent=2, sort_keys=True)
        snapshot_path = self.path
        temp_path: Path | None = None
        try:
            file_descriptor, temp_name = tempfile.mkstemp(
                prefix=f".{snapshot_path.name}.",
                suffix=".tmp",
                dir=self._state_dir,
            )
            temp_path = Path(temp_name)
            with os.fdopen(file_descriptor, "w", encoding="utf-8") as handle:
                handle.write(payload + "\n")
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(temp_path, SNAPSHOT_FILE_MODE)
            os.replace(temp_path, snapshot_path)
        except OSError as error:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise SnapshotWriteError(
                f"Failed to write snapshot {snapshot_path}: {error}. "
                "In-memory volume state may now differ from disk."
            ) from error

    def load(self) -> dict[str, str]:
        """Load registry state from the snapshot.

        Returns:
            Volume name to mountpoint mapping.

        Raises:
            SnapshotNotFoundError: If no snapshot has been written yet.
            SnapshotCorruptError: If the snapshot is unreadable or invalid.
        """
        snapshot_path = self.path
        try:
            raw_text = snapshot_path.read_text(encoding="utf-8")
        except FileNotFoundError as error:
            raise SnapshotNotFoundError(
                f"No snapshot found at {snapshot_path}. Starting with empty state."
            ) from error
        except (OSError, UnicodeDecodeError) as error:
            raise SnapshotCorruptError(
                f"Failed to read snapshot {snapshot_path}: {error}."
            ) from error
        try:
            payload = json.loads(raw_text)
        except json.JSONDecodeError as error:
            raise SnapshotCorruptError(
                f"Failed to parse snapshot {snapshot_path}: {error.msg}. "
                "Delete or repair the file to reset driver state."
            ) from error
        return _state_from_payload(snapshot_path, payload)


def _state_from_payload(snapshot_path: Path, payload: Any) -> dict[str, str]:
    """Validate decoded snapshot payload and extract the state mapping."""
    if not isinstance(payload, dict):
        raise SnapshotCorruptError(
            f"Invalid snapshot {snapshot_path}: expected JSON object at top level."
        )
    state = payload.get(SNAPSHOT_STATE_KEY)
    if state is None:
        return {}
    if not isinstance(state, dict):
        raise SnapshotCorruptError(
            f"Invalid snapshot {snapshot_path}: expected '{SNAPSHOT_STATE_KEY}' to be an object."
        )
    for name, mountpoint in state.items():
        if not isinstance(mountpoint, str):
            raise SnapshotCorruptError(
                f"Invalid snapshot {snapshot_path}: mountpoint for volume '{name}' "
                "is not a string."
            )
    return dict(state)
