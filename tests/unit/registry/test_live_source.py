"""Unit tests for live volume sources."""

from __future__ import annotations

import builtins

import pytest

from core.errors import LiveQueryError
from core.types import VolumeObservation
from registry import live_source
from registry.live_source import DockerLiveSource, StaticLiveSource
from registry.reconciler import reconcile
from store.snapshot_store import SnapshotStore


class _FakeContainer:
    def __init__(self, mounts: list[dict[str, str]] | None) -> None:
        self.attrs = {"Mounts": mounts}


class _FakeContainers:
    def __init__(self, containers: list[_FakeContainer], error: Exception | None) -> None:
        self._containers = containers
        self._error = error
        self.list_kwargs: dict[str, object] = {}

    def list(self, **kwargs: object) -> list[_FakeContainer]:
        self.list_kwargs = kwargs
        if self._error is not None:
            raise self._error
        return self._containers


class _FakeDockerClient:
    def __init__(
        self,
        containers: list[_FakeContainer],
        error: Exception | None = None,
    ) -> None:
        self.containers = _FakeContainers(containers, error)
        self.closed = False

    def close(self) -> None:
        self.closed = True


def test_static_source_returns_observations() -> None:
    """Static source should echo its configured observations."""
    observations = [VolumeObservation(name="A", source="/p1")]

    assert StaticLiveSource(observations).observe("local-persist") == observations


def test_static_failing_source_raises() -> None:
    """Failing static source should raise LiveQueryError."""
    with pytest.raises(LiveQueryError):
        StaticLiveSource.failing("down").observe("local-persist")


def test_docker_source_keeps_only_mounts_of_this_driver(monkeypatch) -> None:
    """Mounts from other drivers and bind mounts should be ignored."""
    client = _FakeDockerClient(
        [
            _FakeContainer(
                [
                    {"Driver": "local-persist", "Name": "A", "Source": "/p1"},
                    {"Driver": "local", "Name": "other", "Source": "/var/lib/other"},
                    {"Type": "bind", "Source": "/etc/hosts"},
                ]
            ),
            _FakeContainer(None),
            _FakeContainer([{"Driver": "local-persist", "Name": "B", "Source": "/p2"}]),
        ]
    )
    monkeypatch.setattr(live_source, "_create_docker_client", lambda base_url: client)

    observations = DockerLiveSource("unix:///var/run/docker.sock").observe("local-persist")

    assert (
        observations
        == [
            VolumeObservation(name="A", source="/p1"),
            VolumeObservation(name="B", source="/p2"),
        ]
        and client.containers.list_kwargs == {"all": True, "ignore_removed": True}
        and client.closed
    )


def test_docker_source_wraps_engine_errors(monkeypatch) -> None:
    """Engine failures should surface as LiveQueryError."""
    client = _FakeDockerClient([], error=RuntimeError("connection refused"))
    monkeypatch.setattr(live_source, "_create_docker_client", lambda base_url: client)

    with pytest.raises(LiveQueryError):
        DockerLiveSource("unix:///var/run/docker.sock").observe("local-persist")

    assert client.closed


def test_docker_source_without_sdk_raises_live_query_error(monkeypatch) -> None:
    """Missing docker SDK should not escape as ImportError."""
    original_import = builtins.__import__

    def _patched_import(name, *args, **kwargs):
        if name == "docker":
            raise ImportError("No module named docker")
        return original_import(name, *args, **kwargs)

    monkeypatch.setattr(builtins, "__import__", _patched_import)

    with pytest.raises(LiveQueryError):
        DockerLiveSource("unix:///var/run/docker.sock").observe("local-persist")


class _EngineUnavailable(Exception):
    """Stands in for the SDK error raised when the engine socket is missing."""


def _unreachable_engine(base_url: str):
    raise _EngineUnavailable(f"Error while fetching server API version: {base_url}")


def test_docker_source_wraps_client_construction_errors(monkeypatch) -> None:
    """An unreachable engine while building the client should be a LiveQueryError."""
    monkeypatch.setattr(live_source, "_create_docker_client", _unreachable_engine)

    with pytest.raises(LiveQueryError):
        DockerLiveSource("unix:///tmp/no-such.sock").observe("local-persist")


def test_unreachable_engine_reconciles_from_snapshot(
    monkeypatch, tmp_path, recording_logger
) -> None:
    """Startup should fall back to the snapshot when the engine is down."""
    monkeypatch.setattr(live_source, "_create_docker_client", _unreachable_engine)
    store = SnapshotStore(tmp_path, "local-persist")
    store.save({"B": "/p2"})

    result = reconcile(
        "local-persist",
        DockerLiveSource("unix:///tmp/no-such.sock"),
        store,
        logger=recording_logger,
    )

    assert result.state == {"B": "/p2"} and result.source == "snapshot"
