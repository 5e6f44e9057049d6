"""Public SDK surface for localpersist.

This module provides a stable import path for embedding the driver.
It re-exports the driver, registry, and typed models.
"""

from __future__ import annotations

from core.config import LocalPersistConfig
from core.logging_config import configure_logging
from core.types import ReconcileResult, Volume, VolumeObservation, VolumeRequest
from driver.volume_driver import VolumeDriver, build_driver
from registry.live_source import DockerLiveSource, LiveVolumeSource, StaticLiveSource
from registry.reconciler import reconcile
from registry.volume_registry import VolumeRegistry
from store.snapshot_store import SnapshotStore

__all__ = [
    "DockerLiveSource",
    "LiveVolumeSource",
    "LocalPersistConfig",
    "ReconcileResult",
    "SnapshotStore",
    "StaticLiveSource",
    "Volume",
    "VolumeDriver",
    "VolumeObservation",
    "VolumeRegistry",
    "VolumeRequest",
    "build_driver",
    "configure_logging",
    "reconcile",
]
