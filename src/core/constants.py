"""Core constants used across localpersist modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DRIVER_NAME = "local-persist"
DEFAULT_BASE_DIR = Path("/")
DEFAULT_STATE_DIR = Path("/var/lib/docker/plugin-data")
DEFAULT_DOCKER_URL = "unix:///var/run/docker.sock"
SNAPSHOT_FILE_SUFFIX = ".json"
SNAPSHOT_STATE_KEY = "state"
MOUNTPOINT_OPTION = "mountpoint"
STATE_DIR_MODE = 0o700
SNAPSHOT_FILE_MODE = 0o600
VOLUME_DIR_MODE = 0o755
CONFLICT_POLICY_FIRST_WINS = "first-wins"
CONFLICT_POLICY_REJECT = "reject"
SUPPORTED_CONFLICT_POLICIES = (CONFLICT_POLICY_FIRST_WINS, CONFLICT_POLICY_REJECT)
DEFAULT_CONFLICT_POLICY = CONFLICT_POLICY_FIRST_WINS
TRUE_FLAG_VALUES = ("1", "true", "yes", "on")
FALSE_FLAG_VALUES = ("0", "false", "no", "off", "")
