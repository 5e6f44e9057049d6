"""Lifecycle request handling for the volume plugin protocol.

Each request maps onto exactly one registry operation and yields a
plugin-style response payload. Failures are reported in the ``Err`` field
rather than raised, so the transport can forward them verbatim.
"""

from __future__ import annotations

from typing import Any

from core.config import LocalPersistConfig
from core.errors import LocalPersistVolumeError, SnapshotWriteError
from core.logging_config import get_logger
from core.types import ReconcileResult, Volume, VolumeRequest
from registry.live_source import DockerLiveSource, LiveVolumeSource
from registry.reconciler import reconcile
from registry.volume_registry import VolumeRegistry
from store.snapshot_store import SnapshotStore

_LOGGER = get_logger(__name__)

Response = dict[str, Any]


class VolumeDriver:
    """Plugin lifecycle facade over a volume registry."""

    def __init__(
        self,
        registry: VolumeRegistry,
        reconcile_result: ReconcileResult | None = None,
        logger: Any | None = None,
    ) -> None:
        self._registry = registry
        self._reconcile_result = reconcile_result
        self._logger = logger or _LOGGER

    @property
    def registry(self) -> VolumeRegistry:
        return self._registry

    @property
    def reconcile_result(self) -> ReconcileResult | None:
        return self._reconcile_result

    def get(self, request: VolumeRequest) -> Response:
        volume = self._registry.lookup(request.name)
        if volume is None:
            self._logger.debug("get_not_found", volume=request.name)
            return {"Err": f"No volume found with the name {request.name}"}
        self._logger.debug("get_found", volume=request.name)
        return {"Volume": _volume_payload(volume)}

    def list(self, request: VolumeRequest) -> Response:
        volumes = self._registry.list_all()
        self._logger.debug("list_called", volume_count=len(volumes))
        return {"Volumes": [_volume_payload(volume) for volume in volumes]}

    def create(self, request: VolumeRequest) -> Response:
        try:
            self._registry.create(request.name, request.options)
        except LocalPersistVolumeError as error:
            return {"Err": str(error)}
        return {}

    def remove(self, request: VolumeRequest) -> Response:
        self._registry.remove(request.name)
        return {}

    def mount(self, request: VolumeRequest) -> Response:
        self._logger.debug("mount_called", volume=request.name)
        return self.path(request)

    def path(self, request: VolumeRequest) -> Response:
        mountpoint = self._registry.resolve(request.name)
        if mountpoint == self._registry.base_dir:
            self._logger.debug("path_unknown_volume", volume=request.name)
        return {"Mountpoint": str(mountpoint)}

    def unmount(self, request: VolumeRequest) -> Response:
        self._logger.debug("unmount_called", volume=request.name)
        return self.path(request)


def build_driver(
    config: LocalPersistConfig,
    live_source: LiveVolumeSource | None = None,
    logger: Any | None = None,
) -> VolumeDriver:
    """Reconcile startup state and return a ready driver.

    Args:
        config: Runtime configuration.
        live_source: Source of mounted volumes; Docker engine when omitted.
        logger: Structured logger shared by all components.

    Returns:
        Driver seeded with the reconciled registry state.
    """
    log = logger or _LOGGER
    log.debug("driver_starting", driver_name=config.driver_name, base_dir=str(config.base_dir))
    snapshot_store = SnapshotStore(config.state_dir, config.driver_name)
    try:
        snapshot_store.ensure_state_dir()
    except SnapshotWriteError as error:
        log.error("state_dir_unavailable", path=str(config.state_dir), error=str(error))
    result = reconcile(
        config.driver_name,
        live_source or DockerLiveSource(config.docker_url),
        snapshot_store,
        conflict_policy=config.conflict_policy,
        accept_empty_live=config.accept_empty_live,
        logger=log,
    )
    registry = VolumeRegistry(config.base_dir, snapshot_store, result.state, logger=log)
    log.info(
        "driver_started",
        driver_name=config.driver_name,
        volume_count=len(result.state),
        source=result.source,
    )
    return VolumeDriver(registry, result, logger=log)


def _volume_payload(volume: Volume) -> dict[str, str]:
    return {"Name": volume.name, "Mountpoint": volume.mountpoint}
