"""Option resolution for toolbocks.

Merges caller options against one or more default records, and the
validated option models used by the copy engine and the comparator
factory. Nothing here raises: options that are not records resolve to
``{}``, and invalid field values fall back to their defaults.

Usage:
    from toolbocks import merge_options, populate_options

    populate_options({"depth": 2}, {"depth": 99, "freeze": False})
    # {"depth": 2, "freeze": False}

    merge_options({"a": 1}, {"a": 10, "d": 40}, {"d": 400})
    # {"a": 1, "d": 400}
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .errors import ErrorCode
from .events import EventBus, ReflectionEventType, resolve_bus
from .kinds import TypeSpec, is_absent, is_empty_composite, is_record
from .logging import logger
from .types import DEFAULT_COPY_DEPTH, MAX_MERGE_DEPTH, MAX_STACK_SIZE

# ─────────────────────────────────────────────────────────────────────────────
# Records
# ─────────────────────────────────────────────────────────────────────────────


def as_record(value: Any) -> dict[Any, Any]:
    """Read a value as a plain dict of its keys, {} if it has none."""
    if isinstance(value, Mapping):
        try:
            return dict(value.items())
        except Exception:
            return {}
    if isinstance(value, BaseModel):
        # Validated option models are read by field name
        return {name: getattr(value, name) for name in type(value).model_fields}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if is_record(value):
        try:
            return {k: v for k, v in vars(value).items() if not k.startswith("_")}
        except TypeError:
            return {}
    return {}


# ─────────────────────────────────────────────────────────────────────────────
# Populate / Merge
# ─────────────────────────────────────────────────────────────────────────────


def populate_options(options: Any, *defaults: Any) -> dict[Any, Any]:
    """Combine defaults with the caller's options (shallow).

    Defaults are applied left to right and the options last. A key that
    is None (or UNDEFINED) in a later source does not override the value
    an earlier source supplied.

    Args:
        options: The caller's options; non-record values count as {}
        *defaults: Records holding default values

    Returns:
        A new dict
    """
    result: dict[Any, Any] = {}
    for source in (*defaults, options):
        for key, value in as_record(source).items():
            if is_absent(value) and key in result:
                continue
            result[key] = value
    return result


def merge_options(
    options: Any,
    *defaults: Any,
    bus: EventBus | None = None,
) -> dict[Any, Any]:
    """Deep-merge the caller's options over one or more defaults.

    Sources are folded from the first default to the last, then the
    options, so the options always win and a later default wins over an
    earlier one. For each key:

    - an absent, None or empty-composite accumulated value is replaced
    - two record-like values are merged recursively, up to
      MAX_MERGE_DEPTH levels, after which the incoming value overwrites
    - otherwise the incoming value overwrites

    None / UNDEFINED incoming values never overwrite. Inputs are not
    mutated.

    Args:
        options: Highest-priority record
        *defaults: Lower-priority records

    Returns:
        A new dict
    """
    result: dict[Any, Any] = {}
    for source in (*defaults, options):
        result = _merge_into(result, as_record(source), 0, bus)
    return result


def _merge_into(
    target: dict[Any, Any],
    source: dict[Any, Any],
    depth: int,
    bus: EventBus | None,
) -> dict[Any, Any]:
    merged = dict(target)
    for key, incoming in source.items():
        if is_absent(incoming):
            merged.setdefault(key, incoming)
            continue

        current = merged.get(key)

        if key not in merged or is_absent(current) or is_empty_composite(current):
            merged[key] = _detach(incoming)
            continue

        if _is_mergeable(current) and _is_mergeable(incoming):
            if depth >= MAX_MERGE_DEPTH:
                logger.debug(f"merge_options: depth limit reached at key {key!r}")
                resolve_bus(bus).emit(
                    ReflectionEventType.MERGE_DEPTH_EXCEEDED,
                    code=ErrorCode.MERGE_DEPTH_EXCEEDED,
                    key=key,
                    depth=depth,
                )
                merged[key] = incoming
            else:
                merged[key] = _merge_into(
                    as_record(current), as_record(incoming), depth + 1, bus
                )
            continue

        merged[key] = _detach(incoming)
    return merged


def _is_mergeable(value: Any) -> bool:
    return isinstance(value, Mapping) or (
        dataclasses.is_dataclass(value) and not isinstance(value, type)
    )


def _detach(value: Any) -> Any:
    # Nested dicts are copied so later merges never write into an input
    if isinstance(value, dict):
        return {k: _detach(v) for k, v in value.items()}
    return value


# ─────────────────────────────────────────────────────────────────────────────
# Option Models
# ─────────────────────────────────────────────────────────────────────────────


def _clamp_int(value: Any, default: int, low: int, high: int | None = None) -> int:
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    number = max(low, number)
    return min(high, number) if high is not None else number


def _flag(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


class _Options(BaseModel):
    """Base for option models: camelCase or snake_case, never failing."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        arbitrary_types_allowed=True,
    )

    _defaults: ClassVar[dict[str, Any]] = {}

    @classmethod
    def resolve(cls, options: Any = None, *defaults: Any) -> Any:
        """Build validated options from any record-like input.

        Keys may be given in either spelling (``max_stack_size`` or
        ``maxStackSize``).
        """
        if isinstance(options, cls) and not defaults:
            return options
        values = populate_options(
            _normalize_keys(cls, options),
            cls._defaults,
            *(_normalize_keys(cls, d) for d in defaults),
        )
        return cls.model_validate(values)

    def merged(self, **overrides: Any) -> Any:
        """Return a copy with some fields replaced."""
        return type(self).resolve(overrides, self)

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in type(self).model_fields}


def _normalize_keys(cls: type[_Options], options: Any) -> dict[str, Any]:
    aliases = {
        (field.alias or name): name for name, field in cls.model_fields.items()
    }
    record = as_record(options)
    return {aliases.get(k, k): v for k, v in record.items()}


class CopyOptions(_Options):
    """How localCopy / immutableCopy traverse and build a copy.

    Attributes:
        max_stack_size: Ancestor budget; capped at MAX_STACK_SIZE
        depth: Levels copied by value; deeper members are shared
        null_replacement: Returned in place of None
        undefined_replacement: Returned in place of UNDEFINED
        freeze: Make every produced container immutable
        track_identity: Reproduce shared and cyclic references
    """

    max_stack_size: int = MAX_STACK_SIZE
    depth: int = DEFAULT_COPY_DEPTH
    null_replacement: Any = None
    undefined_replacement: Any = None
    freeze: bool = False
    track_identity: bool = False

    _defaults: ClassVar[dict[str, Any]] = {
        "max_stack_size": MAX_STACK_SIZE,
        "depth": DEFAULT_COPY_DEPTH,
        "null_replacement": None,
        "undefined_replacement": None,
        "freeze": False,
        "track_identity": False,
    }

    @field_validator("max_stack_size", mode="before")
    @classmethod
    def _clamp_stack(cls, value: Any) -> int:
        return _clamp_int(value, MAX_STACK_SIZE, 0, MAX_STACK_SIZE)

    @field_validator("depth", mode="before")
    @classmethod
    def _clamp_depth(cls, value: Any) -> int:
        return _clamp_int(value, DEFAULT_COPY_DEPTH, 0)

    @field_validator("freeze", mode="before")
    @classmethod
    def _check_freeze(cls, value: Any) -> bool:
        return value is True

    @field_validator("track_identity", mode="before")
    @classmethod
    def _check_track_identity(cls, value: Any) -> bool:
        return _flag(value, False)


DEFAULT_COPY_OPTIONS = CopyOptions()
IMMUTABLE_COPY_OPTIONS = CopyOptions(freeze=True)


class ComparatorOptions(_Options):
    """Rules applied by ComparatorFactory.

    Attributes:
        type: "*", a type name ("string", "number", ...) or a class
        strict: Operands not of ``type`` compare as equal (0)
        nulls_first: None sorts before other values
        case_sensitive: Compare strings with their case
        trim_strings: Strip strings before comparing
        reverse: Negate the result (null placement is not reversed)
        coerce: Cast both operands to ``type`` before comparing
        max_stack_size: Recursion budget for nested values
    """

    type: Any = "*"
    strict: bool = True
    nulls_first: bool = True
    case_sensitive: bool = True
    trim_strings: bool = False
    reverse: bool = False
    coerce: bool = False
    max_stack_size: int = MAX_STACK_SIZE

    _defaults: ClassVar[dict[str, Any]] = {
        "type": "*",
        "strict": True,
        "nulls_first": True,
        "case_sensitive": True,
        "trim_strings": False,
        "reverse": False,
        "coerce": False,
        "max_stack_size": MAX_STACK_SIZE,
    }

    @field_validator("type", mode="before")
    @classmethod
    def _check_type(cls, value: Any) -> TypeSpec:
        if isinstance(value, (str, type)):
            return value
        return "*"

    @field_validator("strict", mode="before")
    @classmethod
    def _check_strict(cls, value: Any) -> bool:
        return _flag(value, True)

    @field_validator("nulls_first", mode="before")
    @classmethod
    def _check_nulls_first(cls, value: Any) -> bool:
        return _flag(value, True)

    @field_validator("case_sensitive", mode="before")
    @classmethod
    def _check_case_sensitive(cls, value: Any) -> bool:
        return _flag(value, True)

    @field_validator("trim_strings", "reverse", "coerce", mode="before")
    @classmethod
    def _check_off_by_default(cls, value: Any) -> bool:
        return _flag(value, False)

    @field_validator("max_stack_size", mode="before")
    @classmethod
    def _clamp_stack(cls, value: Any) -> int:
        return _clamp_int(value, MAX_STACK_SIZE, 2, MAX_STACK_SIZE)


DEFAULT_COMPARATOR_OPTIONS = ComparatorOptions()
