"""Central Pytest Fixtures for lifeflow.

This module provides reusable events, snapshot files and config isolation
across all test modules.

Fixtures included:
- Events: make_event, jan_jun_events, family_events, crowded_day_events
- Files: events_file, write_events
- Isolation: isolated_config (autouse)
"""

import json
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

import lifeflow.config as config_module
from lifeflow.config import reset_config
from lifeflow.core.models import TimelineEvent

# =============================================================================
# Helper Functions
# =============================================================================


def utc(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    """Shorthand for a UTC datetime."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def build_event(
    event_id: str,
    timestamp: datetime,
    event_type: str = "note",
    owner_id: str = "alice",
    participant_ids: tuple[str, ...] = (),
    **kwargs: Any,
) -> TimelineEvent:
    """Create a TimelineEvent with sensible defaults."""
    return TimelineEvent(
        id=event_id,
        timestamp=timestamp,
        event_type=event_type,
        owner_id=owner_id,
        participant_ids=participant_ids,
        title=kwargs.pop("title", f"Event {event_id}"),
        **kwargs,
    )


def event_to_json(event: TimelineEvent) -> dict:
    """Serialize an event the way a host snapshot would store it."""
    return event.model_dump(mode="json")


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep config loading away from the developer's files and environment."""
    for name in list(os.environ):
        if name.upper().startswith("LIFEFLOW_"):
            monkeypatch.delenv(name, raising=False)

    monkeypatch.setattr(
        config_module,
        "DEFAULT_CONFIG_PATHS",
        (Path("./lifeflow.yaml"), Path("./lifeflow.yml")),
    )
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


# =============================================================================
# Event Fixtures
# =============================================================================


@pytest.fixture
def make_event() -> Callable[..., TimelineEvent]:
    """Factory fixture for single events."""
    return build_event


@pytest.fixture
def jan_jun_events() -> list[TimelineEvent]:
    """Two January events and one June event in 2024."""
    return [
        build_event("jan-1", utc(2024, 1, 1), event_type="photo"),
        build_event("jan-15", utc(2024, 1, 15), event_type="milestone"),
        build_event("jun-1", utc(2024, 6, 1), event_type="note"),
    ]


@pytest.fixture
def family_events() -> list[TimelineEvent]:
    """A small multi-person history.

    - P1 alone on day 0
    - P1 with P2 and P3 on day 10 (shared)
    - P2 alone on day 20
    """
    start = utc(2024, 3, 1)
    return [
        build_event("solo-p1", start, owner_id="P1"),
        build_event(
            "picnic",
            start + timedelta(days=10),
            event_type="photo",
            owner_id="P1",
            participant_ids=("P2", "P3"),
        ),
        build_event("solo-p2", start + timedelta(days=20), owner_id="P2"),
    ]


@pytest.fixture
def crowded_day_events() -> list[TimelineEvent]:
    """Nine events on one calendar day."""
    base = utc(2024, 1, 15, hour=8)
    return [build_event(f"busy-{i}", base + timedelta(minutes=30 * i)) for i in range(9)]


# =============================================================================
# File Fixtures
# =============================================================================


@pytest.fixture
def write_events(tmp_path: Path) -> Callable[..., Path]:
    """Write events to a JSON snapshot file."""

    def _write(events: list[TimelineEvent], name: str = "events.json", wrap: bool = False) -> Path:
        items = [event_to_json(e) for e in events]
        payload: Any = {"events": items} if wrap else items
        path = tmp_path / name
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def events_file(write_events, jan_jun_events) -> Path:
    """JSON snapshot of the January/June events."""
    return write_events(jan_jun_events)
