"""toolbocks types - value kinds, entries and copy results."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# ─────────────────────────────────────────────────────────────────────────────
# Limits
# ─────────────────────────────────────────────────────────────────────────────

MAX_STACK_SIZE = 32  # Hard ceiling for recursion, whatever the caller asks for
MAX_MERGE_DEPTH = 12  # Nested levels merged by merge_options
DEFAULT_COPY_DEPTH = 99  # Levels copied by value unless told otherwise


# ─────────────────────────────────────────────────────────────────────────────
# Undefined
# ─────────────────────────────────────────────────────────────────────────────


class _Undefined:
    """Marker for a value that is absent, as opposed to explicitly None."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Undefined:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Undefined:
        return self

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()


# ─────────────────────────────────────────────────────────────────────────────
# Value Kinds
# ─────────────────────────────────────────────────────────────────────────────


class ValueKind(str, Enum):
    """Tagged classification of an arbitrary runtime value."""

    UNDEFINED = "undefined"
    NULL = "null"
    STRING = "string"
    BINARY = "binary"
    BOOLEAN = "boolean"
    NUMBER = "number"
    SYMBOL = "symbol"
    CALLABLE = "callable"
    DATE = "date"
    PATTERN = "pattern"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    SET = "set"
    OBJECT = "object"

    @property
    def is_absent(self) -> bool:
        """UNDEFINED or NULL."""
        return self in (ValueKind.UNDEFINED, ValueKind.NULL)

    @property
    def is_scalar(self) -> bool:
        return self in _SCALAR_KINDS

    @property
    def is_composite(self) -> bool:
        """Kinds that hold nested members."""
        return self in _COMPOSITE_KINDS


_SCALAR_KINDS = frozenset(
    {
        ValueKind.STRING,
        ValueKind.BINARY,
        ValueKind.BOOLEAN,
        ValueKind.NUMBER,
        ValueKind.SYMBOL,
    }
)

_COMPOSITE_KINDS = frozenset(
    {
        ValueKind.SEQUENCE,
        ValueKind.MAPPING,
        ValueKind.SET,
        ValueKind.OBJECT,
    }
)


# ─────────────────────────────────────────────────────────────────────────────
# Entries
# ─────────────────────────────────────────────────────────────────────────────


class EntryOrigin(str, Enum):
    """Where an entry was found on its parent."""

    ITEM = "item"  # Mapping item, sequence or set position
    ATTRIBUTE = "attribute"  # Instance storage (__dict__ or __slots__)
    ACCESSOR = "accessor"  # Read through a property or describe_fields()
    CLASS = "class"  # Synthetic ("class", <name>) entry


@dataclass(frozen=True)
class Entry:
    """A key/value pair discovered on a composite value.

    Unpacks and indexes like a 2-tuple:

        for key, value in object_entries(obj):
            ...

        entry[0], entry[1]

    Only ``key`` and ``value`` take part in equality.
    """

    key: Any
    value: Any
    parent: Any = field(default=None, compare=False, repr=False)
    origin: EntryOrigin = field(default=EntryOrigin.ITEM, compare=False)
    attribute: Any = field(default=None, compare=False, repr=False)

    def __iter__(self) -> Iterator[Any]:
        yield self.key
        yield self.value

    def __len__(self) -> int:
        return 2

    def __getitem__(self, index: int) -> Any:
        return self.to_tuple()[index]

    def __hash__(self) -> int:
        try:
            return hash((self.key, self.value))
        except TypeError:
            return hash((self.key, id(self.value)))

    def to_tuple(self) -> tuple[Any, Any]:
        return (self.key, self.value)

    def is_empty(self) -> bool:
        """True if the value is None or UNDEFINED."""
        return self.value is None or self.value is UNDEFINED

    def is_valid(self) -> bool:
        """True if the entry has a usable key and a non-empty value."""
        if self.key is None or self.key is UNDEFINED:
            return False
        if isinstance(self.key, str) and not self.key:
            return False
        return not self.is_empty()

    @property
    def is_storage(self) -> bool:
        """True if the value lives in the parent itself (not computed)."""
        return self.origin in (EntryOrigin.ITEM, EntryOrigin.ATTRIBUTE)

    def map(self, fn: Callable[[Any], Any]) -> Entry:
        """Return a new entry whose value is fn(value)."""
        return Entry(
            self.key,
            fn(self.value),
            parent=self.parent,
            origin=self.origin,
            attribute=self.attribute,
        )

    def fold(self, _depth: int = 0) -> dict[Any, Any]:
        """Return {key: value}, folding nested entries into dicts."""
        value = self.value
        if isinstance(value, Entry) and _depth < MAX_STACK_SIZE:
            value = value.fold(_depth + 1)
        return {self.key: value}


# ─────────────────────────────────────────────────────────────────────────────
# Copy Result
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class CopyResult:
    """Outcome of a structural copy.

    The value is always present. ``truncated`` tells whether the stack
    ceiling stopped the descent somewhere, in which case members below
    that point are shared with the source.
    """

    value: Any
    truncated: bool = False
    diagnostics: list[str] = field(default_factory=list)
