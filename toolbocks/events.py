from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from uuid6 import uuid7

from .errors import Error, ErrorCode
from .logging import logger

# ─────────────────────────────────────────────────────────────────────────────
# Event Types
# ─────────────────────────────────────────────────────────────────────────────


class ReflectionEventType(str, Enum):
    # Reflection
    ACCESSOR_FAILED = "ACCESSOR_FAILED"
    REBIND_FAILED = "REBIND_FAILED"
    CLONE_FAILED = "CLONE_FAILED"

    # Comparison
    COERCION_FAILED = "COERCION_FAILED"
    COMPARE_FAILED = "COMPARE_FAILED"

    # Limits
    STACK_LIMIT_REACHED = "STACK_LIMIT_REACHED"
    MERGE_DEPTH_EXCEEDED = "MERGE_DEPTH_EXCEEDED"


# ─────────────────────────────────────────────────────────────────────────────
# Reflection Event
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class ReflectionEvent:
    type: ReflectionEventType
    ts: float
    bus_id: str
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def error(self) -> Error | None:
        """The reported error, if the event carries one."""
        error = self.meta.get("error")
        return error if isinstance(error, Error) else None


class EventBus:
    """Side channel for failures the engines absorb instead of raising."""

    def __init__(
        self,
        handler: Callable[[ReflectionEvent], None] | None = None,
        meta: dict[str, Any] | None = None,
    ):
        self._handler = handler
        self._bus_id = str(uuid7())
        self._meta = meta or {}

    @property
    def bus_id(self) -> str:
        return self._bus_id

    @property
    def handler(self) -> Callable[[ReflectionEvent], None] | None:
        return self._handler

    @handler.setter
    def handler(self, handler: Callable[[ReflectionEvent], None] | None) -> None:
        self._handler = handler

    def emit(self, event_type: ReflectionEventType, **event_meta: Any) -> None:
        if not self._handler:
            return

        event = ReflectionEvent(
            type=event_type,
            ts=time.time() * 1000,
            bus_id=self._bus_id,
            meta={**self._meta, **event_meta},
        )
        try:
            self._handler(event)
        except Exception as e:
            # A broken listener must not break the caller's copy or sort
            logger.debug(f"Event handler failed for {event_type.value}: {e}")

    def report(
        self,
        error: Error,
        event_type: ReflectionEventType | None = None,
        **event_meta: Any,
    ) -> None:
        """Log an absorbed error and emit it."""
        logger.debug(error.to_detailed_string())
        self.emit(
            event_type or ReflectionEventType(error.code.value),
            error=error,
            code=error.code,
            **event_meta,
        )


# ─────────────────────────────────────────────────────────────────────────────
# Default Bus
# ─────────────────────────────────────────────────────────────────────────────

_default_bus = EventBus()


def get_event_bus() -> EventBus:
    """Get the bus used when a function is not given one."""
    return _default_bus


def set_event_handler(
    handler: Callable[[ReflectionEvent], None] | None,
) -> None:
    """Install (or clear with None) the handler of the default bus."""
    _default_bus.handler = handler


def resolve_bus(bus: EventBus | None) -> EventBus:
    return bus if bus is not None else _default_bus


def report_failure(
    bus: EventBus | None,
    cause: BaseException,
    code: ErrorCode,
    **context: Any,
) -> Error:
    """Wrap an absorbed exception and report it on the bus."""
    error = Error.wrap(cause, code, **context)
    resolve_bus(bus).report(error)
    return error
