"""Live volume sources consulted during startup reconciliation.

A live source reports the volumes the container engine currently has
mounted for this driver. It is queried once at startup, never per request.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol

from core.errors import LiveQueryError, LocalPersistDependencyError
from core.types import VolumeObservation


class LiveVolumeSource(Protocol):
    """Source of currently mounted volumes owned by one driver."""

    def observe(self, driver_name: str) -> list[VolumeObservation]:
        """Return observed volumes for the driver.

        Raises:
            LiveQueryError: If the source cannot be queried.
        """
        ...


class StaticLiveSource:
    """Live source returning a fixed set of observations."""

    def __init__(
        self,
        observations: Iterable[VolumeObservation] = (),
        error_message: str | None = None,
    ) -> None:
        self._observations = tuple(observations)
        self._error_message = error_message

    @classmethod
    def failing(cls, message: str) -> "StaticLiveSource":
        """Build a source whose every query fails with the given message."""
        return cls(error_message=message)

    def observe(self, driver_name: str) -> list[VolumeObservation]:
        if self._error_message is not None:
            raise LiveQueryError(self._error_message)
        return list(self._observations)


class DockerLiveSource:
    """Live source backed by the Docker engine API.

    Every container, running or not, is inspected and its mounts whose
    volume driver matches this driver's identity are reported.
    """

    def __init__(self, base_url: str) -> None:
        self._base_url = base_url

    def observe(self, driver_name: str) -> list[VolumeObservation]:
        """Collect mounts created by ``driver_name`` across all containers.

        Args:
            driver_name: Volume driver identity to match against.

        Returns:
            Observations in container listing order.

        Raises:
            LiveQueryError: If the SDK is missing or the engine query fails.
        """
        try:
            client = _create_docker_client(self._base_url)
        except LocalPersistDependencyError as error:
            raise LiveQueryError(str(error)) from error
        except Exception as error:
            raise LiveQueryError(
                f"Failed to connect to container engine at {self._base_url}: {error}."
            ) from error
        try:
            return _collect_driver_mounts(client, driver_name)
        except Exception as error:
            raise LiveQueryError(
                f"Failed to query container engine at {self._base_url}: {error}."
            ) from error
        finally:
            client.close()


def _create_docker_client(base_url: str) -> Any:
    """Create a Docker API client.

    Args:
        base_url: Engine endpoint, e.g. ``unix:///var/run/docker.sock``.

    Returns:
        Docker SDK client.

    Raises:
        LocalPersistDependencyError: If the docker SDK is missing.
        docker.errors.DockerException: If the engine cannot be reached.
    """
    try:
        import docker
    except ImportError as error:
        raise LocalPersistDependencyError(
            "Live reconciliation requires the docker SDK, but it is not installed. "
            "Install localpersist[docker] or run with --no-live."
        ) from error
    return docker.DockerClient(base_url=base_url)


def _collect_driver_mounts(client: Any, driver_name: str) -> list[VolumeObservation]:
    """Inspect all containers and keep mounts owned by the driver.

    Containers removed between listing and inspection are skipped.
    """
    observations: list[VolumeObservation] = []
    for container in client.containers.list(all=True, ignore_removed=True):
        for mount in container.attrs.get("Mounts") or []:
            if mount.get("Driver") != driver_name:
                continue
            name = str(mount.get("Name", ""))
            source = str(mount.get("Source", ""))
            observations.append(VolumeObservation(name=name, source=source))
    return observations
