"""Pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from toolbocks.events import EventBus, ReflectionEvent


@pytest.fixture
def recorded() -> list[ReflectionEvent]:
    """Events received by the ``bus`` fixture."""
    return []


@pytest.fixture
def bus(recorded: list[ReflectionEvent]) -> EventBus:
    """An event bus that records every event it emits."""
    return EventBus(recorded.append, meta={"test": True})
