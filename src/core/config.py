"""Runtime configuration model for localpersist.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_BASE_DIR,
    DEFAULT_CONFLICT_POLICY,
    DEFAULT_DOCKER_URL,
    DEFAULT_DRIVER_NAME,
    DEFAULT_STATE_DIR,
    FALSE_FLAG_VALUES,
    SUPPORTED_CONFLICT_POLICIES,
    TRUE_FLAG_VALUES,
)
from core.errors import LocalPersistConfigError
from core.types import ConflictPolicy


@dataclass(frozen=True)
class LocalPersistConfig:
    """Validated runtime configuration.

    Attributes:
        driver_name: Driver identity, also the snapshot file stem.
        base_dir: Directory every volume mountpoint is relative to.
        state_dir: Directory holding the per-driver snapshot file.
        docker_url: Container engine API endpoint for live reconciliation.
        conflict_policy: How conflicting live observations are resolved.
        accept_empty_live: Whether an empty live result is authoritative.
        debug: Whether debug-level events are emitted.
    """

    driver_name: str
    base_dir: Path
    state_dir: Path
    docker_url: str
    conflict_policy: ConflictPolicy
    accept_empty_live: bool
    debug: bool

    @classmethod
    def from_env(cls) -> "LocalPersistConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            LocalPersistConfigError: If environment values are invalid.
        """
        driver_name = validate_driver_name(
            os.getenv("LOCAL_PERSIST_NAME", DEFAULT_DRIVER_NAME)
        )
        base_dir_value = os.getenv("LOCAL_PERSIST_BASE_DIR", str(DEFAULT_BASE_DIR))
        state_dir_value = os.getenv("LOCAL_PERSIST_STATE_DIR", str(DEFAULT_STATE_DIR))
        docker_url = os.getenv("LOCAL_PERSIST_DOCKER_URL", DEFAULT_DOCKER_URL)
        conflict_policy = _parse_conflict_policy(
            os.getenv("LOCAL_PERSIST_CONFLICT_POLICY", DEFAULT_CONFLICT_POLICY)
        )
        return cls(
            driver_name=driver_name,
            base_dir=Path(base_dir_value).expanduser().resolve(),
            state_dir=Path(state_dir_value).expanduser().resolve(),
            docker_url=docker_url,
            conflict_policy=conflict_policy,
            accept_empty_live=_parse_flag(
                "LOCAL_PERSIST_ACCEPT_EMPTY_LIVE",
                os.getenv("LOCAL_PERSIST_ACCEPT_EMPTY_LIVE", "false"),
            ),
            debug=_parse_flag("LOCAL_PERSIST_DEBUG", os.getenv("LOCAL_PERSIST_DEBUG", "false")),
        )

    @property
    def snapshot_path(self) -> Path:
        """Snapshot file location for this driver instance."""
        return self.state_dir / f"{self.driver_name}.json"


def validate_driver_name(raw_value: str) -> str:
    """Validate a driver identity.

    Args:
        raw_value: Candidate driver name.

    Returns:
        The stripped driver name.

    Raises:
        LocalPersistConfigError: If the name is empty or contains a separator.
    """
    name = raw_value.strip()
    if not name or "/" in name or name in {".", ".."}:
        raise LocalPersistConfigError(
            f"Invalid driver name '{raw_value}': expected a non-empty name without '/'. "
            "Set LOCAL_PERSIST_NAME or --name to a plain identifier."
        )
    return name


def _parse_conflict_policy(raw_value: str) -> ConflictPolicy:
    """Parse the live-conflict policy environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Supported conflict policy name.

    Raises:
        LocalPersistConfigError: If value is not a supported policy.
    """
    policy = raw_value.strip().lower()
    if policy not in SUPPORTED_CONFLICT_POLICIES:
        supported = ", ".join(SUPPORTED_CONFLICT_POLICIES)
        raise LocalPersistConfigError(
            "Invalid LOCAL_PERSIST_CONFLICT_POLICY value: "
            f"expected one of {supported}, got '{raw_value}'."
        )
    return policy  # type: ignore[return-value]


def _parse_flag(variable: str, raw_value: str) -> bool:
    """Parse a boolean environment flag.

    Args:
        variable: Environment variable name, for error messages.
        raw_value: Raw string from environment.

    Returns:
        Parsed boolean.

    Raises:
        LocalPersistConfigError: If value is not a recognized boolean.
    """
    value = raw_value.strip().lower()
    if value in TRUE_FLAG_VALUES:
        return True
    if value in FALSE_FLAG_VALUES:
        return False
    raise LocalPersistConfigError(
        f"Invalid {variable} value: expected true/false, got '{raw_value}'. "
        f"Set {variable} to true or false."
    )
