"""Structural copy engine.

Copies arbitrary values to a configurable depth, optionally freezing
what it produces.

Usage:
    from toolbocks import immutable_copy, local_copy

    copy = local_copy(config)                 # deep, mutable
    shallow = local_copy(config, {"depth": 0})
    frozen = immutable_copy(config)           # deep, read-only

Members below ``depth`` are shared with the source, and so is anything
found deeper than ``max_stack_size`` levels. Use copy_value() to learn
whether the stack ceiling cut the copy short.
"""

from __future__ import annotations

import copy as _copy_module
import dataclasses
import datetime as _dt
import inspect
import re
import types
from collections.abc import Mapping, MutableMapping, MutableSequence, MutableSet
from dataclasses import dataclass, field
from typing import Any

from .entries import storage_entries
from .errors import ErrorCode, ErrorContext, ImmutableValueError
from .events import EventBus, ReflectionEventType, report_failure, resolve_bus
from .kinds import kind_of
from .logging import logger
from .options import CopyOptions
from .types import CopyResult, ValueKind

# ─────────────────────────────────────────────────────────────────────────────
# Frozen Values
# ─────────────────────────────────────────────────────────────────────────────


class FrozenObject:
    """Read-only proxy over an instance.

    Attribute and item reads go to the wrapped instance; writes and
    deletes raise ImmutableValueError. ``isinstance`` checks see the
    wrapped instance's class. Methods are bound to the proxy and
    ``__dict__`` is a read-only view, so neither can write through.

    Usage:
        frozen = FrozenObject(user)
        frozen.name           # "Ada"
        frozen.name = "Bob"   # ImmutableValueError
    """

    __slots__ = ("_target",)

    def __init__(self, target: Any) -> None:
        object.__setattr__(self, "_target", target)

    @property  # type: ignore[misc]
    def __class__(self) -> type:
        return type(object.__getattribute__(self, "_target"))

    def __getattr__(self, name: str) -> Any:
        target = object.__getattribute__(self, "_target")
        member = getattr(target, name)
        if name == "__dict__" and isinstance(member, MutableMapping):
            return types.MappingProxyType(member)
        # Methods run against the proxy so their writes are refused too
        if inspect.ismethod(member) and member.__self__ is target:
            return types.MethodType(member.__func__, self)
        return member

    def __setattr__(self, name: str, value: Any) -> None:
        raise self._refuse(name)

    def __delattr__(self, name: str) -> None:
        raise self._refuse(name)

    def __getitem__(self, key: Any) -> Any:
        return object.__getattribute__(self, "_target")[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        raise self._refuse(key)

    def __delitem__(self, key: Any) -> None:
        raise self._refuse(key)

    def __iter__(self) -> Any:
        return iter(object.__getattribute__(self, "_target"))

    def __len__(self) -> int:
        return len(object.__getattribute__(self, "_target"))

    def __contains__(self, item: Any) -> bool:
        return item in object.__getattribute__(self, "_target")

    def __eq__(self, other: Any) -> bool:
        if type(other) is FrozenObject:
            other = object.__getattribute__(other, "_target")
        return bool(object.__getattribute__(self, "_target") == other)

    def __hash__(self) -> int:
        return hash(object.__getattribute__(self, "_target"))

    def __repr__(self) -> str:
        return f"FrozenObject({object.__getattribute__(self, '_target')!r})"

    def __dir__(self) -> list[str]:
        return dir(object.__getattribute__(self, "_target"))

    def _refuse(self, key: Any) -> ImmutableValueError:
        target = object.__getattribute__(self, "_target")
        return ImmutableValueError(
            f"cannot modify {key!r} of a frozen {type(target).__name__}",
            ErrorContext(
                code=ErrorCode.IMMUTABLE_VALUE,
                source="FrozenObject",
                key=key,
                type_name=type(target).__name__,
            ),
        )


def _is_frozen_dataclass(value: Any) -> bool:
    if not dataclasses.is_dataclass(value) or isinstance(value, type):
        return False
    params = getattr(value, "__dataclass_params__", None)
    return bool(params and params.frozen)


def _is_frozen_model(value: Any) -> bool:
    config = getattr(type(value), "model_config", None)
    return isinstance(config, Mapping) and config.get("frozen") is True


def _freeze(value: Any) -> Any:
    """Read-only form of one value; members are not visited."""
    if type(value) is FrozenObject:
        return value

    kind = kind_of(value)
    if kind is ValueKind.BINARY and isinstance(value, bytearray):
        return bytes(value)
    if kind is ValueKind.MAPPING:
        if isinstance(value, MutableMapping):
            return types.MappingProxyType(value)
        return value
    if kind is ValueKind.SEQUENCE:
        if isinstance(value, MutableSequence):
            return tuple(value)
        return value
    if kind is ValueKind.SET:
        if isinstance(value, MutableSet):
            return frozenset(value)
        return value
    if kind is ValueKind.OBJECT:
        if _is_frozen_dataclass(value) or _is_frozen_model(value):
            return value
        return FrozenObject(value)
    return value


# ─────────────────────────────────────────────────────────────────────────────
# Copy State
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class _CopyState:
    options: CopyOptions
    bus: EventBus | None = None
    memo: dict[int, Any] | None = None
    truncated: bool = False
    diagnostics: list[str] = field(default_factory=list)

    def remember(self, source: Any, clone: Any) -> Any:
        if self.memo is not None:
            self.memo[id(source)] = clone
        return clone


# ─────────────────────────────────────────────────────────────────────────────
# Copy
# ─────────────────────────────────────────────────────────────────────────────


def _copy(value: Any, depth: int, stack: list[Any], state: _CopyState) -> Any:
    options = state.options

    if len(stack) > options.max_stack_size:
        path = ".".join(str(key) for key in stack)
        state.truncated = True
        state.diagnostics.append(f"stack limit reached at {path}")
        logger.debug(f"copy: stack limit {options.max_stack_size} reached at {path}")
        resolve_bus(state.bus).emit(
            ReflectionEventType.STACK_LIMIT_REACHED,
            code=ErrorCode.STACK_LIMIT_REACHED,
            path=list(stack),
        )
        return _freeze(value) if options.freeze else value

    kind = kind_of(value)

    if kind is ValueKind.UNDEFINED:
        replacement = options.undefined_replacement
        return value if replacement is None else replacement
    if kind is ValueKind.NULL:
        return options.null_replacement
    if kind.is_scalar:
        return _copy_scalar(value, options.freeze)
    if kind is ValueKind.CALLABLE:
        return value
    if kind is ValueKind.DATE:
        return _copy_date(value)
    if kind is ValueKind.PATTERN:
        return re.compile(value.pattern, value.flags)

    if state.memo is not None and id(value) in state.memo:
        return state.memo[id(value)]

    if kind is ValueKind.SEQUENCE:
        clone = _copy_sequence(value, depth, stack, state)
    elif kind is ValueKind.MAPPING:
        clone = _copy_mapping(value, depth, stack, state)
    elif kind is ValueKind.SET:
        clone = _copy_set(value, depth, stack, state)
    else:
        clone = _copy_object(value, depth, stack, state)

    if options.freeze:
        clone = state.remember(value, _freeze(clone))
    return clone


def _copy_scalar(value: Any, freeze: bool) -> Any:
    if type(value) in (int, float, str):
        return type(value)(value)
    if isinstance(value, bytearray):
        return bytes(value) if freeze else bytearray(value)
    return value


def _copy_date(value: Any) -> Any:
    if isinstance(value, _dt.timedelta):
        return _dt.timedelta(
            days=value.days, seconds=value.seconds, microseconds=value.microseconds
        )
    return value.replace()


def _copy_sequence(value: Any, depth: int, stack: list[Any], state: _CopyState) -> Any:
    if isinstance(value, MutableSequence):
        clone = state.remember(value, _copy_module.copy(value))
        if depth > 0:
            for index, item in enumerate(value):
                clone[index] = _copy(item, depth - 1, [*stack, index], state)
        return clone

    if isinstance(value, range):
        return state.remember(value, value)

    items = list(value)
    if depth > 0:
        items = [
            _copy(item, depth - 1, [*stack, index], state)
            for index, item in enumerate(items)
        ]
    return state.remember(value, _rebuild_sequence(value, items))


def _rebuild_sequence(source: Any, items: list[Any]) -> Any:
    cls = type(source)
    if isinstance(source, tuple):
        make = getattr(cls, "_make", None)
        return make(items) if callable(make) else cls(items)
    try:
        return cls(items)
    except Exception:
        return list(items)


def _copy_mapping(value: Any, depth: int, stack: list[Any], state: _CopyState) -> Any:
    if isinstance(value, MutableMapping):
        clone = state.remember(value, _copy_module.copy(value))
        if depth > 0:
            for key in list(clone.keys()):
                clone[key] = _copy(value[key], depth - 1, [*stack, key], state)
        return clone

    items = dict(value.items())
    if depth > 0:
        items = {
            key: _copy(item, depth - 1, [*stack, key], state)
            for key, item in items.items()
        }
    try:
        clone = type(value)(items)
    except Exception:
        clone = items
    return state.remember(value, clone)


def _copy_set(value: Any, depth: int, stack: list[Any], state: _CopyState) -> Any:
    members = list(value)
    if depth > 0:
        members = [
            _copy(member, depth - 1, [*stack, index], state)
            for index, member in enumerate(members)
        ]
    try:
        clone = type(value)(members)
    except TypeError:
        # A copied member became unhashable
        clone = type(value)(value)
    return state.remember(value, clone)


def _copy_object(value: Any, depth: int, stack: list[Any], state: _CopyState) -> Any:
    if type(value) is FrozenObject:
        value = object.__getattribute__(value, "_target")

    clone_method = getattr(value, "clone", None)
    if callable(clone_method):
        try:
            return state.remember(value, clone_method())
        except Exception as e:
            report_failure(
                state.bus, e, ErrorCode.CLONE_FAILED, source="clone", value=value
            )
            return value

    try:
        clone = _copy_module.copy(value)
    except Exception as e:
        report_failure(
            state.bus, e, ErrorCode.CLONE_FAILED, source="copy.copy", value=value
        )
        return value

    state.remember(value, clone)

    for entry in storage_entries(value):
        member = entry.value
        if depth > 0:
            member = _copy(member, depth - 1, [*stack, entry.key], state)
        member = _rebind(member, value, clone, entry.key, state)
        try:
            object.__setattr__(clone, entry.attribute, member)
        except Exception as e:
            report_failure(
                state.bus,
                e,
                ErrorCode.CLONE_FAILED,
                source="setattr",
                key=entry.key,
                value=value,
            )
    return clone


def _rebind(member: Any, source: Any, clone: Any, key: Any, state: _CopyState) -> Any:
    if not inspect.ismethod(member) or member.__self__ is not source:
        return member
    try:
        return types.MethodType(member.__func__, clone)
    except Exception as e:
        report_failure(
            state.bus, e, ErrorCode.REBIND_FAILED, source="rebind", key=key, value=source
        )
        return member


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────


def copy_value(
    value: Any,
    options: Any = None,
    *,
    bus: EventBus | None = None,
) -> CopyResult:
    """Copy a value and report how the copy went.

    Args:
        value: Anything
        options: CopyOptions, or a record of its fields (either spelling)
        bus: Event bus for absorbed failures and truncations

    Returns:
        CopyResult whose ``truncated`` flag is set if the stack ceiling
        left some members shared with the source
    """
    resolved = CopyOptions.resolve(options)
    state = _CopyState(
        options=resolved,
        bus=bus,
        memo={} if resolved.track_identity else None,
    )
    result = _copy(value, resolved.depth, [], state)
    return CopyResult(
        value=result,
        truncated=state.truncated,
        diagnostics=state.diagnostics,
    )


def local_copy(value: Any, options: Any = None, *, bus: EventBus | None = None) -> Any:
    """Mutable copy of a value, to ``depth`` levels (99 by default)."""
    resolved = CopyOptions.resolve(options).merged(freeze=False)
    return copy_value(value, resolved, bus=bus).value


def immutable_copy(
    value: Any, options: Any = None, *, bus: EventBus | None = None
) -> Any:
    """Read-only copy of a value.

    Dicts become MappingProxyType, lists tuples, sets frozensets and
    instances FrozenObject proxies, at every copied level.
    """
    resolved = CopyOptions.resolve(options).merged(freeze=True)
    return copy_value(value, resolved, bus=bus).value


def deep_freeze(value: Any, *, bus: EventBus | None = None) -> Any:
    """immutable_copy() with the default options."""
    return immutable_copy(value, bus=bus)


def lock(value: Any, options: Any = None) -> Any:
    """Read-only view of a value, without copying it.

    Only the top level is converted: a dict is wrapped in a
    MappingProxyType over the same dict, a list becomes a tuple of the
    same members.
    """
    resolved = CopyOptions.resolve(options)
    kind = kind_of(value)
    if kind is ValueKind.NULL:
        return resolved.null_replacement
    if kind is ValueKind.UNDEFINED:
        replacement = resolved.undefined_replacement
        return value if replacement is None else replacement
    return _freeze(value)
