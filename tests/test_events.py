"""Tests for toolbocks.events module."""

import pytest

from toolbocks.errors import Error, ErrorCode
from toolbocks.events import (
    EventBus,
    ReflectionEvent,
    ReflectionEventType,
    get_event_bus,
    report_failure,
    resolve_bus,
    set_event_handler,
)


class TestEventBus:
    def test_emit_calls_handler(self):
        events = []
        bus = EventBus(events.append)
        bus.emit(ReflectionEventType.CLONE_FAILED, key="a")

        assert len(events) == 1
        event = events[0]
        assert isinstance(event, ReflectionEvent)
        assert event.type == ReflectionEventType.CLONE_FAILED
        assert event.meta == {"key": "a"}
        assert event.bus_id == bus.bus_id
        assert event.ts > 0

    def test_emit_without_handler(self):
        """Test that emitting with no handler is a no-op."""
        EventBus().emit(ReflectionEventType.COMPARE_FAILED)

    def test_bus_meta_is_merged(self):
        events = []
        bus = EventBus(events.append, meta={"caller": "test", "key": "default"})
        bus.emit(ReflectionEventType.ACCESSOR_FAILED, key="name")
        assert events[0].meta == {"caller": "test", "key": "name"}

    def test_bus_ids_are_unique(self):
        assert EventBus().bus_id != EventBus().bus_id

    def test_failing_handler_is_absorbed(self):
        def handler(event):
            raise RuntimeError("listener broke")

        EventBus(handler).emit(ReflectionEventType.REBIND_FAILED)

    def test_handler_can_be_replaced(self):
        first, second = [], []
        bus = EventBus(first.append)
        bus.handler = second.append
        bus.emit(ReflectionEventType.STACK_LIMIT_REACHED)
        assert first == []
        assert len(second) == 1

    def test_report(self):
        events = []
        bus = EventBus(events.append)
        error = Error("boom", ErrorCode.COMPARE_FAILED)
        bus.report(error, key="a")

        event = events[0]
        assert event.type == ReflectionEventType.COMPARE_FAILED
        assert event.error is error
        assert event.meta["code"] == ErrorCode.COMPARE_FAILED
        assert event.meta["key"] == "a"

    def test_event_without_error(self):
        event = ReflectionEvent(ReflectionEventType.STACK_LIMIT_REACHED, 0.0, "id")
        assert event.error is None


class TestDefaultBus:
    @pytest.fixture(autouse=True)
    def reset_handler(self):
        yield
        set_event_handler(None)

    def test_set_event_handler(self):
        events = []
        set_event_handler(events.append)
        get_event_bus().emit(ReflectionEventType.MERGE_DEPTH_EXCEEDED)
        assert [e.type for e in events] == [ReflectionEventType.MERGE_DEPTH_EXCEEDED]

    def test_resolve_bus(self, bus):
        assert resolve_bus(bus) is bus
        assert resolve_bus(None) is get_event_bus()

    def test_report_failure_uses_default_bus(self):
        events = []
        set_event_handler(events.append)
        error = report_failure(None, KeyError("x"), ErrorCode.ACCESSOR_FAILED, key="x")

        assert isinstance(error, Error)
        assert error.code == ErrorCode.ACCESSOR_FAILED
        assert events[0].error is error
        assert events[0].type == ReflectionEventType.ACCESSOR_FAILED


class TestReportFailure:
    def test_reports_on_given_bus(self, bus, recorded):
        cause = ValueError("nope")
        error = report_failure(bus, cause, ErrorCode.COERCION_FAILED, source="coerce")

        assert error.cause is cause
        assert error.context.source == "coerce"
        assert recorded[0].type == ReflectionEventType.COERCION_FAILED
        assert recorded[0].meta["test"] is True
