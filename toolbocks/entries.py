"""Entry enumeration.

Extracts the (key, value) entries of arbitrary values: mappings,
sequences, sets and class instances, including state that is only
reachable through properties.

Usage:
    from toolbocks import object_entries

    for key, value in object_entries(obj):
        print(key, value)

Order of the entries found on one value:

1. mapping items, or the public attributes of an instance
2. (index, item) pairs of sequences and sets
3. remaining own storage: underscore attributes and __slots__
4. property values, then ("class", <class name>) if any were found

Entries are de-duplicated on (key, value) and entries whose value is
None are dropped. Nothing here raises.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Callable, Iterable
from typing import Any

from ._utils import IterationCap
from .errors import ErrorCode
from .events import EventBus, report_failure
from .kinds import is_absent, kind_of
from .logging import logger
from .types import MAX_STACK_SIZE, Entry, EntryOrigin, ValueKind

_MANGLED = re.compile(r"^_[A-Za-z0-9]\w*?__(?P<name>\w+)$")

Visitor = Callable[[Entry], Any]

# Properties declared by these packages are framework API, not object state
_LIBRARY_MODULES = frozenset({"pydantic", "pydantic_core", "collections", "enum"})


# ─────────────────────────────────────────────────────────────────────────────
# Keys
# ─────────────────────────────────────────────────────────────────────────────


def _is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def normalize_key(name: Any) -> Any:
    """Printable key of an attribute name.

    Leading underscores and name-mangling prefixes are removed, so that
    ``_count`` and ``_Counter__count`` both become ``count``. Non-string
    keys pass through unchanged.
    """
    if not isinstance(name, str):
        return name
    match = _MANGLED.match(name)
    if match:
        return match.group("name")
    stripped = name.lstrip("_")
    return stripped or name


# ─────────────────────────────────────────────────────────────────────────────
# Collection
# ─────────────────────────────────────────────────────────────────────────────


def _item_entries(value: Any, kind: ValueKind) -> list[Entry]:
    if kind is ValueKind.MAPPING:
        return [Entry(k, v, parent=value, attribute=k) for k, v in value.items()]
    if kind in (ValueKind.SEQUENCE, ValueKind.SET):
        return [
            Entry(i, item, parent=value, attribute=i) for i, item in enumerate(value)
        ]
    return []


def _instance_storage(value: Any) -> list[tuple[str, Any]]:
    storage: list[tuple[str, Any]] = []
    try:
        attributes = vars(value)
    except TypeError:
        attributes = {}
    for name, member in list(attributes.items()):
        if isinstance(name, str) and not _is_dunder(name):
            storage.append((name, member))

    seen = {name for name, _ in storage}
    for cls in type(value).__mro__:
        slots = cls.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in seen or _is_dunder(slot):
                continue
            attribute = slot
            if slot.startswith("__") and not slot.endswith("__"):
                attribute = f"_{cls.__name__.lstrip('_')}{slot}"
            try:
                storage.append((attribute, object.__getattribute__(value, attribute)))
            except AttributeError:
                continue
            seen.add(slot)
    return storage


def _attribute_entries(value: Any, public: bool) -> list[Entry]:
    entries = []
    for name, member in _instance_storage(value):
        if name.startswith("_") == public:
            continue
        entries.append(
            Entry(
                normalize_key(name),
                member,
                parent=value,
                origin=EntryOrigin.ATTRIBUTE,
                attribute=name,
            )
        )
    return entries


def _is_library_class(cls: type) -> bool:
    module = getattr(cls, "__module__", "") or ""
    return module == "builtins" or module.split(".")[0] in _LIBRARY_MODULES


def _accessor_names(cls: type) -> list[str]:
    names: list[str] = []
    cap = IterationCap(MAX_STACK_SIZE)
    for klass in cls.__mro__:
        if klass is object or cap.reached:
            break
        if _is_library_class(klass):
            continue
        for name, member in vars(klass).items():
            if name in names or name.startswith("_"):
                continue
            if isinstance(member, (property, functools.cached_property)):
                names.append(name)
    return names


def _accessor_entries(value: Any, bus: EventBus | None) -> list[Entry]:
    entries: list[Entry] = []

    describe = getattr(type(value), "describe_fields", None)
    if callable(describe):
        try:
            for pair in value.describe_fields() or ():
                key, member = pair[0], pair[1]
                entries.append(
                    Entry(key, member, parent=value, origin=EntryOrigin.ACCESSOR)
                )
        except Exception as e:
            report_failure(
                bus,
                e,
                ErrorCode.ACCESSOR_FAILED,
                source="describe_fields",
                value=value,
            )

    for name in _accessor_names(type(value)):
        try:
            member = getattr(value, name)
        except Exception as e:
            report_failure(
                bus,
                e,
                ErrorCode.ACCESSOR_FAILED,
                source="object_entries",
                key=name,
                value=value,
            )
            continue
        entries.append(Entry(name, member, parent=value, origin=EntryOrigin.ACCESSOR))

    entries = [e for e in entries if not is_absent(e.value)]
    if entries:
        entries.append(
            Entry(
                "class",
                type(value).__name__,
                parent=value,
                origin=EntryOrigin.CLASS,
            )
        )
    return entries


def _same(a: Entry, b: Entry) -> bool:
    return _equal_values(a.key, b.key) and _equal_values(a.value, b.value)


def _equal_values(a: Any, b: Any) -> bool:
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    try:
        return bool(a == b)
    except Exception:
        return False


def _dedupe(entries: Iterable[Entry]) -> list[Entry]:
    unique: list[Entry] = []
    buckets: dict[Any, list[Entry]] = {}
    for entry in entries:
        if entry.is_empty():
            continue
        try:
            bucket_key: Any = hash(entry.key)
        except TypeError:
            bucket_key = id(entry.key)
        bucket = buckets.setdefault(bucket_key, [])
        if any(_same(entry, other) for other in bucket):
            continue
        bucket.append(entry)
        unique.append(entry)
    return unique


def _entries_of(value: Any, bus: EventBus | None) -> list[Entry]:
    if isinstance(value, Entry):
        return [value]

    kind = kind_of(value)
    if not kind.is_composite:
        return []

    entries: list[Entry] = []

    if kind is ValueKind.MAPPING:
        entries.extend(_item_entries(value, kind))
    else:
        entries.extend(_attribute_entries(value, public=True))
        entries.extend(_item_entries(value, kind))

    entries.extend(_attribute_entries(value, public=False))
    entries.extend(_accessor_entries(value, bus))
    return entries


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────


def object_entries(*values: Any, bus: EventBus | None = None) -> list[Entry]:
    """Return the entries of one or more values, in call order.

    Args:
        *values: Any values; scalars and None contribute nothing
        bus: Event bus for absorbed accessor failures

    Returns:
        De-duplicated entries with non-None values
    """
    collected: list[Entry] = []
    for value in values:
        try:
            collected.extend(_entries_of(value, bus))
        except Exception as e:
            logger.debug(f"object_entries: skipped {type(value).__name__}: {e}")
    return _dedupe(collected)


def storage_entries(value: Any) -> list[Entry]:
    """Own attribute entries of an instance, None values included.

    Unlike object_entries() nothing is de-duplicated, so every entry
    names a distinct attribute that can be written back.
    """
    if kind_of(value) is not ValueKind.OBJECT:
        return []
    return _attribute_entries(value, public=True) + _attribute_entries(
        value, public=False
    )


def object_keys(*values: Any, bus: EventBus | None = None) -> list[Any]:
    """Keys of object_entries(), first occurrence first."""
    keys: list[Any] = []
    for entry in object_entries(*values, bus=bus):
        if entry.key not in keys:
            keys.append(entry.key)
    return keys


def object_values(*values: Any, bus: EventBus | None = None) -> list[Any]:
    """Values of object_entries(), first occurrence first."""
    found: list[Any] = []
    for entry in object_entries(*values, bus=bus):
        if not any(_equal_values(v, entry.value) for v in found):
            found.append(entry.value)
    return found


def entries_to_dict(entries: Iterable[Any]) -> dict[Any, Any]:
    """Build a dict from entries or (key, value) pairs.

    Nested entries are folded into dicts.
    """
    result: dict[Any, Any] = {}
    for item in entries or ():
        if isinstance(item, Entry):
            result.update(item.fold())
            continue
        try:
            key, value = item[0], item[1]
        except (TypeError, IndexError, KeyError):
            continue
        result[key] = value.fold() if isinstance(value, Entry) else value
    return result


def iterate_entries(
    value: Any,
    visitor: Visitor,
    *,
    recursive: bool = False,
    max_stack_size: int = MAX_STACK_SIZE,
    bus: EventBus | None = None,
) -> bool:
    """Call visitor(entry) for each entry of value.

    A truthy return from the visitor stops the walk. With recursive=True,
    composite values are walked too; each object is visited once and
    the walk never goes deeper than max_stack_size.

    Returns:
        True if the visitor stopped the walk
    """
    limit = min(max(0, int(max_stack_size)), MAX_STACK_SIZE)
    return _iterate(value, visitor, recursive, limit, set(), [], bus)


def _iterate(
    value: Any,
    visitor: Visitor,
    recursive: bool,
    limit: int,
    visited: set[int],
    stack: list[Any],
    bus: EventBus | None,
) -> bool:
    visited.add(id(value))
    for entry in object_entries(value, bus=bus):
        if visitor(entry):
            return True
        nested = entry.value
        if (
            recursive
            and entry.origin is not EntryOrigin.CLASS
            and kind_of(nested).is_composite
            and id(nested) not in visited
            and len(stack) < limit
        ):
            if _iterate(nested, visitor, recursive, limit, visited, [*stack, entry.key], bus):
                return True
    return False
