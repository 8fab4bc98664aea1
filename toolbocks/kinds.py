"""Value kind classification.

Every engine dispatches on ``kind_of(value)`` rather than on ad-hoc
isinstance chains.
"""

from __future__ import annotations

import dataclasses
import datetime as _dt
import math
import numbers
import re
from collections.abc import Mapping, Sequence, Set
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import ErrorCode
from .events import EventBus, report_failure
from .types import UNDEFINED, ValueKind

TypeSpec = str | type

_DATE_TYPES = (_dt.datetime, _dt.date, _dt.time, _dt.timedelta)

# Names accepted wherever a TypeSpec is expected
_TYPE_NAMES: dict[str, ValueKind] = {
    "undefined": ValueKind.UNDEFINED,
    "null": ValueKind.NULL,
    "none": ValueKind.NULL,
    "string": ValueKind.STRING,
    "str": ValueKind.STRING,
    "binary": ValueKind.BINARY,
    "bytes": ValueKind.BINARY,
    "number": ValueKind.NUMBER,
    "int": ValueKind.NUMBER,
    "float": ValueKind.NUMBER,
    "bigint": ValueKind.NUMBER,
    "boolean": ValueKind.BOOLEAN,
    "bool": ValueKind.BOOLEAN,
    "symbol": ValueKind.SYMBOL,
    "enum": ValueKind.SYMBOL,
    "function": ValueKind.CALLABLE,
    "callable": ValueKind.CALLABLE,
    "date": ValueKind.DATE,
    "datetime": ValueKind.DATE,
    "pattern": ValueKind.PATTERN,
    "regexp": ValueKind.PATTERN,
    "sequence": ValueKind.SEQUENCE,
    "list": ValueKind.SEQUENCE,
    "array": ValueKind.SEQUENCE,
    "tuple": ValueKind.SEQUENCE,
    "mapping": ValueKind.MAPPING,
    "dict": ValueKind.MAPPING,
    "map": ValueKind.MAPPING,
    "set": ValueKind.SET,
    "object": ValueKind.OBJECT,
}


# ─────────────────────────────────────────────────────────────────────────────
# Classification
# ─────────────────────────────────────────────────────────────────────────────


def kind_of(value: Any) -> ValueKind:
    """Classify a value into its ValueKind."""
    if value is None:
        return ValueKind.NULL
    if value is UNDEFINED or value is dataclasses.MISSING:
        return ValueKind.UNDEFINED
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, Enum):
        return ValueKind.SYMBOL
    if isinstance(value, numbers.Number):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ValueKind.BINARY
    if isinstance(value, _DATE_TYPES):
        return ValueKind.DATE
    if isinstance(value, re.Pattern):
        return ValueKind.PATTERN
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, Set):
        return ValueKind.SET
    if isinstance(value, Sequence):
        return ValueKind.SEQUENCE
    if callable(value):
        return ValueKind.CALLABLE
    return ValueKind.OBJECT


def is_absent(value: Any) -> bool:
    """True for None and UNDEFINED."""
    return value is None or value is UNDEFINED or value is dataclasses.MISSING


def is_composite(value: Any) -> bool:
    return kind_of(value).is_composite


def is_record(value: Any) -> bool:
    """True for values the option resolver can read keys from."""
    if isinstance(value, Mapping):
        return True
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return True
    if _is_pydantic_model(value):
        return True
    return kind_of(value) is ValueKind.OBJECT and hasattr(value, "__dict__")


def is_empty_composite(value: Any) -> bool:
    """True for an empty mapping, sequence or set."""
    kind = kind_of(value)
    if kind in (ValueKind.MAPPING, ValueKind.SEQUENCE, ValueKind.SET):
        try:
            return len(value) == 0
        except TypeError:
            return False
    return False


def is_nan(value: Any) -> bool:
    try:
        return isinstance(value, numbers.Real) and math.isnan(value)
    except (TypeError, ValueError):
        return False


def _is_pydantic_model(value: Any) -> bool:
    return isinstance(value, BaseModel)


# ─────────────────────────────────────────────────────────────────────────────
# Type Specs
# ─────────────────────────────────────────────────────────────────────────────


def resolve_kind(type_spec: TypeSpec | None) -> ValueKind | None:
    """Map a type name to its ValueKind.

    Returns None for "*" (any type), for class references and for
    names that are not recognised.
    """
    if isinstance(type_spec, str):
        return _TYPE_NAMES.get(type_spec.strip().lower())
    return None


def is_wildcard(type_spec: TypeSpec | None) -> bool:
    if type_spec is None:
        return True
    if isinstance(type_spec, str):
        return type_spec.strip() in ("*", "") or resolve_kind(type_spec) is None
    return not isinstance(type_spec, type)


def matches(value: Any, type_spec: TypeSpec | None) -> bool:
    """True if value is of the given type name or class."""
    if is_wildcard(type_spec):
        return True
    if isinstance(type_spec, type):
        return isinstance(value, type_spec)
    return kind_of(value) is resolve_kind(type_spec)


# ─────────────────────────────────────────────────────────────────────────────
# Coercion
# ─────────────────────────────────────────────────────────────────────────────


def to_number(value: Any) -> Any:
    """Best-effort numeric form of a value; NaN when there is none."""
    if value is None or is_absent(value):
        return math.nan
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, numbers.Number):
        return value
    if isinstance(value, _dt.datetime):
        return value.timestamp()
    if isinstance(value, _dt.date):
        return _dt.datetime.combine(value, _dt.time()).timestamp()
    if isinstance(value, _dt.timedelta):
        return value.total_seconds()
    if isinstance(value, Enum):
        return to_number(value.value)
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return math.nan


def coerce(
    value: Any,
    type_spec: TypeSpec | None,
    *,
    bus: EventBus | None = None,
) -> Any:
    """Best-effort cast of value to the given type.

    Never raises. Values that cannot be cast are returned unchanged
    (numbers become NaN), and the failure is reported on the bus.
    """
    a = None if is_absent(value) else value

    if is_wildcard(type_spec) or matches(a, type_spec):
        return a

    try:
        if isinstance(type_spec, type):
            if a is None:
                return None
            return type_spec(a)

        kind = resolve_kind(type_spec)
        if kind is ValueKind.STRING:
            return "" if a is None else _text_of(a)
        if kind is ValueKind.NUMBER:
            return to_number(a)
        if kind is ValueKind.BOOLEAN:
            return bool(a)
        if kind is ValueKind.BINARY:
            return b"" if a is None else _text_of(a).encode("utf-8")
        if kind is ValueKind.CALLABLE:
            return lambda: a
        if kind is ValueKind.SEQUENCE:
            return [] if a is None else [a]
        if kind is ValueKind.DATE:
            number = to_number(a)
            return None if is_nan(number) else _dt.datetime.fromtimestamp(number)
        if kind is ValueKind.PATTERN:
            return re.compile("" if a is None else _text_of(a))
    except Exception as e:
        report_failure(
            bus,
            e,
            ErrorCode.COERCION_FAILED,
            source="coerce",
            value=a,
            target=str(type_spec),
        )

    return a


def _text_of(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.name)
    if isinstance(value, re.Pattern):
        return str(value.pattern)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def text_of(value: Any) -> str:
    """Textual form used when values are compared as strings."""
    return _text_of(value)
