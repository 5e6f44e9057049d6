"""localpersist exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class LocalPersistError(Exception):
    """Base exception for all localpersist failures."""


class LocalPersistConfigError(LocalPersistError):
    """Raised for invalid runtime configuration."""


class LocalPersistDependencyError(LocalPersistError):
    """Raised when an optional runtime dependency is missing."""


class LocalPersistVolumeError(LocalPersistError):
    """Raised when a volume lifecycle request cannot be applied."""


class MissingRequiredOptionError(LocalPersistVolumeError):
    """Raised when a create request lacks a required option."""


class VolumeAlreadyExistsError(LocalPersistVolumeError):
    """Raised when creating a volume whose name is already registered."""


class DirectoryCreationError(LocalPersistVolumeError):
    """Raised when a volume mountpoint directory cannot be created."""


class LocalPersistStoreError(LocalPersistError):
    """Raised for snapshot persistence failures."""


class SnapshotNotFoundError(LocalPersistStoreError):
    """Raised when no snapshot exists yet for a driver instance."""


class SnapshotCorruptError(LocalPersistStoreError):
    """Raised when a snapshot exists but cannot be parsed."""


class SnapshotWriteError(LocalPersistStoreError):
    """Raised when a snapshot cannot be written to disk."""


class LiveQueryError(LocalPersistError):
    """Raised when the live volume source cannot be queried."""
