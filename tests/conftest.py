"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import structlog


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


class RecordingLogger:
    """Structured logger double that keeps emitted events in memory."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, object]]] = []

    def debug(self, event: str, **fields: object) -> None:
        self.events.append(("debug", event, fields))

    def info(self, event: str, **fields: object) -> None:
        self.events.append(("info", event, fields))

    def warning(self, event: str, **fields: object) -> None:
        self.events.append(("warning", event, fields))

    def error(self, event: str, **fields: object) -> None:
        self.events.append(("error", event, fields))

    def names(self, level: str | None = None) -> list[str]:
        """Return event names, optionally filtered by level."""
        return [name for event_level, name, _ in self.events if level in (None, event_level)]


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Restore default structlog configuration after each test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    """Provide a silent logger that records structured events."""
    return RecordingLogger()
