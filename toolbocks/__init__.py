"""toolbocks - reflection, copying and comparison helpers for Python values."""

from typing import Any as _Any

from ._utils import IterationCap
from .comparators import (
    DEFAULT_COMPARATOR,
    NUMBER_COMPARATOR,
    STRING_COMPARATOR,
    Comparator,
    ComparatorFactory,
)
from .copying import (
    FrozenObject,
    copy_value,
    deep_freeze,
    immutable_copy,
    local_copy,
    lock,
)
from .entries import (
    entries_to_dict,
    iterate_entries,
    normalize_key,
    object_entries,
    object_keys,
    object_values,
)
from .errors import Error, ErrorCode, ErrorContext, ImmutableValueError
from .events import (
    EventBus,
    ReflectionEvent,
    ReflectionEventType,
    get_event_bus,
    set_event_handler,
)
from .kinds import TypeSpec, coerce, is_absent, kind_of, matches
from .logging import disable_debug, enable_debug
from .options import (
    DEFAULT_COMPARATOR_OPTIONS,
    DEFAULT_COPY_OPTIONS,
    IMMUTABLE_COPY_OPTIONS,
    ComparatorOptions,
    CopyOptions,
    merge_options,
    populate_options,
)
from .types import (
    MAX_MERGE_DEPTH,
    MAX_STACK_SIZE,
    UNDEFINED,
    CopyResult,
    Entry,
    EntryOrigin,
    ValueKind,
)
from .version import __version__

# ─────────────────────────────────────────────────────────────────────────────
# Scoped API
# ─────────────────────────────────────────────────────────────────────────────


class Objects:
    """Entries, copies and options of arbitrary values.

    Usage:
        from toolbocks import Objects

        Objects.entries({"a": 1})                # [Entry(key='a', value=1)]
        Objects.copy(config, depth=1)            # copy two levels deep
        Objects.freeze(config)                   # deep read-only copy
        Objects.merge({"a": 1}, {"a": 2, "b": 3})  # {"a": 1, "b": 3}
    """

    @staticmethod
    def entries(*values: _Any) -> list[Entry]:
        return object_entries(*values)

    @staticmethod
    def keys(*values: _Any) -> list[_Any]:
        return object_keys(*values)

    @staticmethod
    def values(*values: _Any) -> list[_Any]:
        return object_values(*values)

    @staticmethod
    def copy(value: _Any, options: _Any = None, **overrides: _Any) -> _Any:
        """Mutable copy; keyword arguments override individual options."""
        if overrides:
            options = populate_options(overrides, options)
        return local_copy(value, options)

    @staticmethod
    def freeze(value: _Any, options: _Any = None, **overrides: _Any) -> _Any:
        """Read-only copy; keyword arguments override individual options."""
        if overrides:
            options = populate_options(overrides, options)
        return immutable_copy(value, options)

    @staticmethod
    def lock(value: _Any) -> _Any:
        return lock(value)

    @staticmethod
    def merge(options: _Any, *defaults: _Any) -> dict[_Any, _Any]:
        return merge_options(options, *defaults)

    @staticmethod
    def populate(options: _Any, *defaults: _Any) -> dict[_Any, _Any]:
        return populate_options(options, *defaults)


class Compare:
    """Ready-made comparators.

    Usage:
        from toolbocks import Compare

        sorted(values, key=Compare.key("number"))
        rows.sort(key=Compare.key(nulls_first=False, reverse=True))
        Compare.values("b", "A", case_sensitive=False)   # 1
    """

    @staticmethod
    def factory(type: TypeSpec | None = None, **options: _Any) -> ComparatorFactory:
        return ComparatorFactory(type, **options)

    @staticmethod
    def comparator(type: TypeSpec | None = None, **options: _Any) -> Comparator:
        return ComparatorFactory(type, **options).comparator()

    @staticmethod
    def key(type: TypeSpec | None = None, **options: _Any) -> _Any:
        """``key=`` function for sorted() and list.sort()."""
        return ComparatorFactory(type, **options).key()

    @staticmethod
    def values(a: _Any, b: _Any, type: TypeSpec | None = None, **options: _Any) -> int:
        return ComparatorFactory(type, **options).compare(a, b)


__all__ = [
    # Version
    "__version__",
    # Scoped API
    "Objects",  # Class with .entries(), .copy(), .freeze(), .merge(), etc.
    "Compare",  # Class with .key(), .comparator(), .values(), .factory()
    # Types
    "ValueKind",
    "TypeSpec",
    "Entry",
    "EntryOrigin",
    "CopyResult",
    "UNDEFINED",
    "MAX_STACK_SIZE",
    "MAX_MERGE_DEPTH",
    "IterationCap",
    # Kinds
    "kind_of",
    "is_absent",
    "matches",
    "coerce",
    # Options
    "populate_options",
    "merge_options",
    "CopyOptions",
    "ComparatorOptions",
    "DEFAULT_COPY_OPTIONS",
    "IMMUTABLE_COPY_OPTIONS",
    "DEFAULT_COMPARATOR_OPTIONS",
    # Entries
    "object_entries",
    "object_keys",
    "object_values",
    "entries_to_dict",
    "iterate_entries",
    "normalize_key",
    # Copying
    "copy_value",
    "local_copy",
    "immutable_copy",
    "deep_freeze",
    "lock",
    "FrozenObject",
    # Comparators
    "ComparatorFactory",
    "Comparator",
    "DEFAULT_COMPARATOR",
    "STRING_COMPARATOR",
    "NUMBER_COMPARATOR",
    # Errors
    "Error",
    "ErrorCode",
    "ErrorContext",
    "ImmutableValueError",
    # Events
    "EventBus",
    "ReflectionEvent",
    "ReflectionEventType",
    "get_event_bus",
    "set_event_handler",
    # Debug
    "enable_debug",
    "disable_debug",
]
