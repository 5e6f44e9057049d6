"""Shared typed models.

This module defines immutable data models used by the store,
registry, reconciler, and driver layers to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping

ConflictPolicy = Literal["first-wins", "reject"]
StateSource = Literal["live", "snapshot", "empty"]


@dataclass(frozen=True)
class Volume:
    """Registered named volume.

    Attributes:
        name: Unique volume name.
        mountpoint: Path relative to the driver base directory.
    """

    name: str
    mountpoint: str


@dataclass(frozen=True)
class VolumeObservation:
    """One mounted volume reported by a live volume source.

    Attributes:
        name: Volume name as known to the container engine.
        source: Host path the engine reports for the mount.
    """

    name: str
    source: str


@dataclass(frozen=True)
class ReconcileResult:
    """Initial registry state selected at startup.

    Attributes:
        state: Volume name to mountpoint mapping.
        source: Where the state came from.
    """

    state: Mapping[str, str]
    source: StateSource


@dataclass(frozen=True)
class VolumeRequest:
    """Lifecycle request forwarded by the plugin transport.

    Attributes:
        name: Target volume name.
        options: Driver options supplied with the request.
    """

    name: str
    options: Mapping[str, str] = field(default_factory=dict)
