"""Startup reconciliation of registry state.

This module selects the registry's initial contents exactly once, before
any lifecycle request is served. The live container engine wins when it
reports volumes for this driver; otherwise the persisted snapshot is used,
and failing that the registry starts empty. Nothing here aborts startup.
"""

from __future__ import annotations

from typing import Any, Sequence

from core.constants import CONFLICT_POLICY_REJECT, DEFAULT_CONFLICT_POLICY
from core.errors import LiveQueryError, SnapshotCorruptError, SnapshotNotFoundError
from core.logging_config import get_logger
from core.types import ConflictPolicy, ReconcileResult, VolumeObservation
from registry.live_source import LiveVolumeSource
from store.snapshot_store import SnapshotStore

_LOGGER = get_logger(__name__)


def reconcile(
    driver_name: str,
    live_source: LiveVolumeSource,
    snapshot_store: SnapshotStore,
    conflict_policy: ConflictPolicy = DEFAULT_CONFLICT_POLICY,
    accept_empty_live: bool = False,
    logger: Any | None = None,
) -> ReconcileResult:
    """Choose the initial registry state.

    Args:
        driver_name: Driver identity passed to the live source.
        live_source: Source of currently mounted volumes.
        snapshot_store: Fallback persisted state.
        conflict_policy: Resolution for one name observed with different sources.
        accept_empty_live: Treat a successful empty live result as authoritative.
        logger: Structured logger; module logger when omitted.

    Returns:
        Selected state and the source it came from.
    """
    log = logger or _LOGGER
    try:
        observations = live_source.observe(driver_name)
        live_state = merge_observations(observations, conflict_policy, log)
    except LiveQueryError as error:
        log.warning("live_query_failed", driver_name=driver_name, error=str(error))
    else:
        if live_state or accept_empty_live:
            log.info("reconcile_completed", source="live", volume_count=len(live_state))
            return ReconcileResult(state=live_state, source="live")
        log.debug("live_query_empty", driver_name=driver_name)
    return _reconcile_from_snapshot(snapshot_store, log)


def merge_observations(
    observations: Sequence[VolumeObservation],
    conflict_policy: ConflictPolicy,
    logger: Any | None = None,
) -> dict[str, str]:
    """Fold live observations into a name to source mapping.

    Repeated identical observations collapse silently. A name observed with
    differing sources keeps its first source under ``first-wins`` and fails
    the whole live result under ``reject``.

    Raises:
        LiveQueryError: On a conflicting observation under ``reject``.
    """
    log = logger or _LOGGER
    state: dict[str, str] = {}
    for observation in observations:
        existing = state.get(observation.name)
        if existing is None:
            state[observation.name] = observation.source
            continue
        if existing == observation.source:
            continue
        if conflict_policy == CONFLICT_POLICY_REJECT:
            raise LiveQueryError(
                f"Volume '{observation.name}' observed with conflicting sources "
                f"'{existing}' and '{observation.source}'. Rejecting live state."
            )
        log.warning(
            "live_observation_conflict",
            volume=observation.name,
            kept_source=existing,
            ignored_source=observation.source,
        )
    return state


def _reconcile_from_snapshot(snapshot_store: SnapshotStore, log: Any) -> ReconcileResult:
    try:
        state = snapshot_store.load()
    except SnapshotNotFoundError:
        log.info("snapshot_not_found", path=str(snapshot_store.path))
    except SnapshotCorruptError as error:
        log.error("snapshot_corrupt", path=str(snapshot_store.path), error=str(error))
    else:
        log.info("reconcile_completed", source="snapshot", volume_count=len(state))
        return ReconcileResult(state=state, source="snapshot")
    log.info("reconcile_completed", source="empty", volume_count=0)
    return ReconcileResult(state={}, source="empty")
