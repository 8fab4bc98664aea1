"""Generic comparator factory.

Builds reusable ``cmp(a, b) -> -1 | 0 | 1`` functions for sorting mixed,
nested and partly-null data.

Usage:
    from toolbocks import ComparatorFactory

    factory = ComparatorFactory("number")
    sorted([3, None, 1], key=factory.key())        # [None, 1, 3]

    by_name = ComparatorFactory("string").case_insensitive_comparator()
    names.sort(key=functools.cmp_to_key(by_name))
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from .entries import object_entries
from .errors import ErrorCode
from .events import EventBus, ReflectionEventType, report_failure, resolve_bus
from .kinds import (
    TypeSpec,
    coerce,
    is_absent,
    is_nan,
    is_wildcard,
    kind_of,
    matches,
    text_of,
    to_number,
)
from .logging import logger
from .options import ComparatorOptions
from .types import EntryOrigin, ValueKind

Comparator = Callable[[Any, Any], int]

_NUMERIC_KINDS = frozenset({ValueKind.NUMBER, ValueKind.DATE, ValueKind.BOOLEAN})
_TEXT_KINDS = frozenset({ValueKind.STRING, ValueKind.PATTERN, ValueKind.BINARY})
_UNORDERED_KINDS = frozenset({ValueKind.CALLABLE, ValueKind.SYMBOL})


def _sign(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _as_int(result: Any) -> int:
    if isinstance(result, bool) or is_nan(result):
        return 0
    try:
        return _sign(result, 0)
    except TypeError:
        return 0


class ComparatorFactory:
    """Configured source of comparison functions.

    Args:
        type: "*" (any), a type name such as "string" or "number", or a class
        options: ComparatorOptions, or a record of its fields
        bus: Event bus for absorbed failures
        **overrides: Individual option fields, applied last

    Ordering rules:
        - None, UNDEFINED and NaN sort first (or last with nulls_first=False);
          ``reverse`` does not move them
        - with ``strict``, operands that are not both of ``type`` compare as 0;
          nested members only need to be of the same kind as each other
        - strings compare optionally trimmed and case-folded
        - numbers, dates and booleans compare numerically (False < True)
        - enum members compare by name and callables always tie
        - sequences compare by length, the shorter one first, then item by item
        - objects use compare_to(), their own ``<``, or their members in order

    The factory is immutable; the variant methods build new factories.
    """

    def __init__(
        self,
        type: TypeSpec | None = None,
        options: Any = None,
        *,
        bus: EventBus | None = None,
        **overrides: Any,
    ) -> None:
        resolved = ComparatorOptions.resolve(options)
        if type is not None:
            overrides["type"] = type
        if overrides:
            resolved = resolved.merged(**overrides)
        self._options = resolved
        self._bus = bus

    # ─────────────────────────────────────────────────────────────────────────
    # Options
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def options(self) -> ComparatorOptions:
        return self._options

    @property
    def type(self) -> TypeSpec:
        return self._options.type

    @property
    def strict(self) -> bool:
        return self._options.strict

    @property
    def nulls_first(self) -> bool:
        return self._options.nulls_first

    @property
    def case_sensitive(self) -> bool:
        return self._options.case_sensitive

    @property
    def trim_strings(self) -> bool:
        return self._options.trim_strings

    @property
    def reverse(self) -> bool:
        return self._options.reverse

    @property
    def coerce(self) -> bool:
        return self._options.coerce

    @property
    def max_stack_size(self) -> int:
        return self._options.max_stack_size

    def with_options(self, **overrides: Any) -> ComparatorFactory:
        """Return a new factory with some options replaced."""
        return ComparatorFactory(
            options=self._options.merged(**overrides), bus=self._bus
        )

    def __repr__(self) -> str:
        return f"ComparatorFactory({self._options!r})"

    # ─────────────────────────────────────────────────────────────────────────
    # Comparators
    # ─────────────────────────────────────────────────────────────────────────

    def comparator(self) -> Comparator:
        """Return ``cmp(a, b)`` bound to this factory's options."""
        return self.compare

    def key(self) -> Any:
        """Return a ``key=`` function for sorted() and list.sort()."""
        return functools.cmp_to_key(self.compare)

    def nulls_first_comparator(self) -> Comparator:
        return self.with_options(nulls_first=True).comparator()

    def nulls_last_comparator(self) -> Comparator:
        return self.with_options(nulls_first=False).comparator()

    def case_insensitive_comparator(self) -> Comparator:
        return self.with_options(case_sensitive=False).comparator()

    def reverse_comparator(self) -> Comparator:
        return self.with_options(reverse=True).comparator()

    def compare(self, a: Any, b: Any) -> int:
        """Compare two values.

        Returns:
            -1 if a sorts before b, 1 if after, 0 if they tie
        """
        a, b = self._prepare(a), self._prepare(b)
        nulls = self._order_nulls(a, b)
        if nulls is not None:
            return nulls
        result = self._order(a, b, 0)
        return -result if self.reverse else result

    def matches_type(self, a: Any, b: Any) -> bool:
        """True if both values are of the configured type.

        With the "*" type the two values only need to be of the same kind.
        """
        return self._kinds_match(self._prepare(a), self._prepare(b), 0)

    # ─────────────────────────────────────────────────────────────────────────
    # Ordering
    # ─────────────────────────────────────────────────────────────────────────

    def _prepare(self, value: Any, top: bool = True) -> Any:
        if is_absent(value):
            return None
        if isinstance(value, Enum):
            value = value.name
        if self.coerce and top:
            value = coerce(value, self.type, bus=self._bus)
        if is_nan(value):
            return None
        return value

    def _order_nulls(self, a: Any, b: Any) -> int | None:
        if a is None:
            if b is None:
                return 0
            return -1 if self.nulls_first else 1
        if b is None:
            return 1 if self.nulls_first else -1
        return None

    def _place_nulls(self, a: Any, b: Any) -> int | None:
        # Results of _order are negated by compare() under reverse
        placed = self._order_nulls(a, b)
        if placed is not None and self.reverse:
            return -placed
        return placed

    def _kinds_match(self, a: Any, b: Any, depth: int) -> bool:
        # The configured type describes the operands, not their members
        if depth == 0 and not is_wildcard(self.type):
            return matches(a, self.type) and matches(b, self.type)
        return kind_of(a) is kind_of(b)

    def _order(self, a: Any, b: Any, depth: int) -> int:
        if depth > self.max_stack_size:
            logger.debug(f"compare: stack limit {self.max_stack_size} reached")
            resolve_bus(self._bus).emit(
                ReflectionEventType.STACK_LIMIT_REACHED,
                code=ErrorCode.STACK_LIMIT_REACHED,
                source="compare",
                depth=depth,
            )
            return 0

        top = depth == 0
        a, b = self._prepare(a, top), self._prepare(b, top)
        nulls = self._place_nulls(a, b)
        if nulls is not None:
            return nulls

        if self.strict and not self._kinds_match(a, b, depth):
            return 0

        kind_a, kind_b = kind_of(a), kind_of(b)

        if kind_a in _UNORDERED_KINDS or kind_b in _UNORDERED_KINDS:
            return 0

        hooked = self._order_by_hook(a, b)
        if hooked is not None:
            return hooked

        sequences = (ValueKind.SEQUENCE, ValueKind.SET)
        if kind_a in sequences or kind_b in sequences:
            return self._order_sequences(a, b, depth)

        if kind_a is kind_b:
            if kind_a is ValueKind.STRING:
                return self._order_text(a, b)
            if kind_a is ValueKind.BOOLEAN:
                return _sign(1 if a else -1, 1 if b else -1)
            if kind_a in (ValueKind.NUMBER, ValueKind.DATE, ValueKind.BINARY):
                native = self._order_natively(a, b)
                if native is not None:
                    return native

        if kind_a in _NUMERIC_KINDS or kind_b in _NUMERIC_KINDS:
            return self._order_numbers(a, b)

        if kind_a in _TEXT_KINDS or kind_b in _TEXT_KINDS:
            return self._order_text(a, b)

        if kind_a is ValueKind.OBJECT and type(a) is type(b):
            native = self._order_natively(a, b)
            if native is not None:
                return native

        return self._order_members(a, b, depth)

    def _order_text(self, a: Any, b: Any) -> int:
        left, right = text_of(a), text_of(b)
        if self.trim_strings:
            left, right = left.strip(), right.strip()
        if not self.case_sensitive:
            left, right = left.casefold(), right.casefold()
        return _sign(left, right)

    def _order_numbers(self, a: Any, b: Any) -> int:
        left, right = to_number(a), to_number(b)
        nulls = self._place_nulls(
            None if is_nan(left) else left, None if is_nan(right) else right
        )
        if nulls is not None:
            return nulls
        try:
            return _sign(left, right)
        except TypeError:
            # complex numbers have no order
            return 0

    def _order_natively(self, a: Any, b: Any) -> int | None:
        if type(a).__lt__ is object.__lt__:
            return None
        try:
            return _sign(a, b)
        except TypeError:
            return None
        except Exception as e:
            report_failure(
                self._bus, e, ErrorCode.COMPARE_FAILED, source="__lt__", value=a
            )
            return 0

    def _order_by_hook(self, a: Any, b: Any) -> int | None:
        hook = _ordering_hook(a)
        flip = 1
        if hook is None:
            hook, flip = _ordering_hook(b), -1
            if hook is None:
                return None
            a, b = b, a
        try:
            return flip * _as_int(hook(b))
        except Exception as e:
            report_failure(
                self._bus, e, ErrorCode.COMPARE_FAILED, source="compare_to", value=a
            )
            return 0

    def _order_sequences(self, a: Any, b: Any, depth: int) -> int:
        left, right = self._items_of(a, depth), self._items_of(b, depth)

        if left is not None and right is not None:
            if len(left) != len(right):
                return -1 if len(left) < len(right) else 1
            for x, y in zip(left, right):
                result = self._order(x, y, depth + 1)
                if result:
                    return result
            return 0

        if left is not None:
            return self._order_against_scalar(left, b, depth)
        return -self._order_against_scalar(right or [], a, depth)

    def _order_against_scalar(self, items: list[Any], other: Any, depth: int) -> int:
        # An empty sequence counts as absent and a single item stands for itself
        if not items:
            return self._place_nulls(None, other) or 0
        result = self._order(items[0], other, depth + 1)
        if result or len(items) == 1:
            return result
        return 1

    def _items_of(self, value: Any, depth: int) -> list[Any] | None:
        kind = kind_of(value)
        if kind is ValueKind.SEQUENCE:
            return list(value)
        if kind is ValueKind.SET:
            key = functools.cmp_to_key(lambda x, y: self._order(x, y, depth + 1))
            return sorted(value, key=key)
        return None

    def _order_members(self, a: Any, b: Any, depth: int) -> int:
        for entry in object_entries(a, bus=self._bus):
            if entry.origin is EntryOrigin.CLASS:
                continue
            result = self._order(entry.value, self._member_of(b, entry), depth + 1)
            if result:
                return result
        return 0

    def _member_of(self, value: Any, entry: Any) -> Any:
        try:
            if isinstance(value, Mapping):
                return value.get(entry.key)
            name = entry.attribute if entry.attribute is not None else entry.key
            if isinstance(name, str):
                return getattr(value, name, None)
        except Exception as e:
            report_failure(
                self._bus,
                e,
                ErrorCode.COMPARE_FAILED,
                source="compare",
                key=entry.key,
                value=value,
            )
        return None


def _ordering_hook(value: Any) -> Callable[[Any], Any] | None:
    if kind_of(value) not in (ValueKind.OBJECT, ValueKind.MAPPING):
        return None
    for name in ("compare_to", "compareTo"):
        hook = getattr(value, name, None)
        if callable(hook):
            return hook
    return None


# ─────────────────────────────────────────────────────────────────────────────
# Ready-made Comparators
# ─────────────────────────────────────────────────────────────────────────────

DEFAULT_COMPARATOR = ComparatorFactory().comparator()
STRING_COMPARATOR = ComparatorFactory("string").comparator()
NUMBER_COMPARATOR = ComparatorFactory("number").comparator()
