"""In-memory volume registry.

This module owns the authoritative name to mountpoint map and keeps it
consistent with the on-disk snapshot. One lock guards every read and
write; mutations flush the snapshot inside the same critical section.
"""

from __future__ import annotations

import posixpath
from pathlib import Path
import threading
from typing import Any, Mapping

from core.constants import MOUNTPOINT_OPTION, VOLUME_DIR_MODE
from core.errors import (
    DirectoryCreationError,
    MissingRequiredOptionError,
    SnapshotWriteError,
    VolumeAlreadyExistsError,
)
from core.logging_config import get_logger
from core.types import Volume
from store.snapshot_store import SnapshotStore

_LOGGER = get_logger(__name__)


class VolumeRegistry:
    """Thread-safe registry of named volumes.

    Snapshot write failures during create or remove are logged and do not
    roll back the in-memory change, so memory and disk may diverge until
    the next successful flush.
    """

    def __init__(
        self,
        base_dir: Path,
        snapshot_store: SnapshotStore,
        initial_state: Mapping[str, str] | None = None,
        logger: Any | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            base_dir: Directory every mountpoint is relative to.
            snapshot_store: Durable copy of the registry state.
            initial_state: Reconciled starting state.
            logger: Structured logger; module logger when omitted.
        """
        self._base_dir = base_dir
        self._snapshot_store = snapshot_store
        self._volumes: dict[str, str] = dict(initial_state or {})
        self._lock = threading.Lock()
        self._logger = logger or _LOGGER

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def lookup(self, name: str) -> Volume | None:
        """Return the registered volume, or None when unknown."""
        with self._lock:
            mountpoint = self._volumes.get(name)
        if mountpoint is None:
            return None
        return Volume(name=name, mountpoint=mountpoint)

    def list_all(self) -> frozenset[Volume]:
        """Return all registered volumes, unordered."""
        with self._lock:
            items = list(self._volumes.items())
        return frozenset(Volume(name=name, mountpoint=mountpoint) for name, mountpoint in items)

    def state(self) -> dict[str, str]:
        """Return a copy of the name to mountpoint map."""
        with self._lock:
            return dict(self._volumes)

    def create(self, name: str, options: Mapping[str, str]) -> Volume:
        """Register a new volume and ensure its directory exists.

        Args:
            name: Volume name, must not already be registered.
            options: Driver options; ``mountpoint`` is required.

        Returns:
            The registered volume.

        Raises:
            MissingRequiredOptionError: If ``mountpoint`` is absent or empty.
            VolumeAlreadyExistsError: If ``name`` is already registered.
            DirectoryCreationError: If the mountpoint directory cannot be created.
        """
        mountpoint = options.get(MOUNTPOINT_OPTION, "")
        if not mountpoint:
            self._logger.warning("create_missing_option", volume=name, option=MOUNTPOINT_OPTION)
            raise MissingRequiredOptionError(
                f"The `{MOUNTPOINT_OPTION}` option is required to create volume '{name}'."
            )
        real_mountpoint = resolve_mountpoint(self._base_dir, mountpoint)
        with self._lock:
            if name in self._volumes:
                raise VolumeAlreadyExistsError(f"The volume {name} already exists.")
            self._logger.debug("ensure_directory", path=str(real_mountpoint))
            try:
                real_mountpoint.mkdir(mode=VOLUME_DIR_MODE, parents=True, exist_ok=True)
            except OSError as error:
                self._logger.error(
                    "directory_creation_failed",
                    volume=name,
                    path=str(real_mountpoint),
                    error=str(error),
                )
                raise DirectoryCreationError(
                    f"Could not create directory {real_mountpoint} for volume '{name}': {error}."
                ) from error
            self._volumes[name] = mountpoint
            self._flush()
        self._logger.info("volume_created", volume=name, mountpoint=str(real_mountpoint))
        return Volume(name=name, mountpoint=mountpoint)

    def remove(self, name: str) -> None:
        """Forget a volume; unknown names are a no-op.

        The volume directory and its contents are left untouched.
        """
        with self._lock:
            removed = self._volumes.pop(name, None) is not None
            self._flush()
        self._logger.info("volume_removed", volume=name, was_registered=removed)

    def resolve(self, name: str) -> Path:
        """Return the absolute path of a volume.

        Unknown names resolve to exactly the base directory.
        """
        with self._lock:
            mountpoint = self._volumes.get(name, "")
        return resolve_mountpoint(self._base_dir, mountpoint)

    def _flush(self) -> None:
        """Persist current state; caller holds the lock."""
        try:
            self._snapshot_store.save(self._volumes)
        except SnapshotWriteError as error:
            self._logger.error(
                "snapshot_write_failed",
                path=str(self._snapshot_store.path),
                error=str(error),
            )


def resolve_mountpoint(base_dir: Path, mountpoint: str) -> Path:
    """Join a mountpoint onto the base directory.

    Mountpoints are always relative to ``base_dir``; leading separators are
    ignored and the result is lexically normalized. An empty mountpoint
    yields ``base_dir`` itself.

    Args:
        base_dir: Driver base directory.
        mountpoint: Volume mountpoint.

    Returns:
        Absolute volume path.
    """
    relative = mountpoint.lstrip("/")
    if not relative:
        return base_dir
    return Path(posixpath.normpath(posixpath.join(str(base_dir), relative)))
