"""Tests for toolbocks.types module."""

import copy

import pytest

from toolbocks.types import (
    UNDEFINED,
    CopyResult,
    Entry,
    EntryOrigin,
    ValueKind,
)


class TestUndefined:
    def test_is_falsy(self):
        assert not UNDEFINED

    def test_is_singleton(self):
        """Test that copies of UNDEFINED are UNDEFINED."""
        assert type(UNDEFINED)() is UNDEFINED
        assert copy.copy(UNDEFINED) is UNDEFINED
        assert copy.deepcopy({"a": UNDEFINED})["a"] is UNDEFINED

    def test_repr(self):
        assert repr(UNDEFINED) == "UNDEFINED"


class TestValueKind:
    def test_values_are_strings(self):
        assert ValueKind.MAPPING == "mapping"
        assert ValueKind("sequence") is ValueKind.SEQUENCE

    @pytest.mark.parametrize(
        "kind",
        [ValueKind.SEQUENCE, ValueKind.MAPPING, ValueKind.SET, ValueKind.OBJECT],
    )
    def test_composite_kinds(self, kind):
        assert kind.is_composite
        assert not kind.is_scalar

    @pytest.mark.parametrize(
        "kind",
        [ValueKind.STRING, ValueKind.NUMBER, ValueKind.BOOLEAN, ValueKind.SYMBOL],
    )
    def test_scalar_kinds(self, kind):
        assert kind.is_scalar
        assert not kind.is_composite

    def test_absent_kinds(self):
        assert ValueKind.NULL.is_absent
        assert ValueKind.UNDEFINED.is_absent
        assert not ValueKind.STRING.is_absent

    def test_callable_date_pattern_are_neither(self):
        for kind in (ValueKind.CALLABLE, ValueKind.DATE, ValueKind.PATTERN):
            assert not kind.is_scalar
            assert not kind.is_composite


class TestEntry:
    def test_unpacks_like_a_pair(self):
        key, value = Entry("a", 1)
        assert (key, value) == ("a", 1)

    def test_indexes_like_a_pair(self):
        entry = Entry("a", 1)
        assert entry[0] == "a"
        assert entry[1] == 1
        assert len(entry) == 2
        assert entry.to_tuple() == ("a", 1)

    def test_equality_ignores_parent_and_origin(self):
        first = Entry("a", 1, parent={"a": 1})
        second = Entry("a", 1, parent=object(), origin=EntryOrigin.ATTRIBUTE)
        assert first == second
        assert hash(first) == hash(second)

    def test_hash_with_unhashable_value(self):
        """Test that entries holding lists can be hashed."""
        value = [1, 2]
        assert hash(Entry("a", value)) == hash(Entry("a", value))

    def test_is_frozen(self):
        entry = Entry("a", 1)
        with pytest.raises(AttributeError):
            entry.key = "b"  # type: ignore[misc]

    def test_is_empty(self):
        assert Entry("a", None).is_empty()
        assert Entry("a", UNDEFINED).is_empty()
        assert not Entry("a", 0).is_empty()

    def test_is_valid(self):
        assert Entry("a", 0).is_valid()
        assert Entry(0, "zero").is_valid()
        assert not Entry("", 1).is_valid()
        assert not Entry(None, 1).is_valid()
        assert not Entry("a", None).is_valid()

    def test_is_storage(self):
        assert Entry("a", 1).is_storage
        assert Entry("a", 1, origin=EntryOrigin.ATTRIBUTE).is_storage
        assert not Entry("a", 1, origin=EntryOrigin.ACCESSOR).is_storage
        assert not Entry("class", "X", origin=EntryOrigin.CLASS).is_storage

    def test_map(self):
        parent = {"a": 2}
        entry = Entry("a", 2, parent=parent, origin=EntryOrigin.ITEM, attribute="a")
        mapped = entry.map(lambda v: v * 10)
        assert mapped == Entry("a", 20)
        assert mapped.parent is parent
        assert mapped.attribute == "a"
        assert entry.value == 2

    def test_fold(self):
        assert Entry("a", 1).fold() == {"a": 1}

    def test_fold_nested(self):
        entry = Entry("outer", Entry("inner", Entry("deepest", 3)))
        assert entry.fold() == {"outer": {"inner": {"deepest": 3}}}


class TestCopyResult:
    def test_defaults(self):
        result = CopyResult(value={"a": 1})
        assert result.value == {"a": 1}
        assert result.truncated is False
        assert result.diagnostics == []

    def test_diagnostics_not_shared(self):
        assert CopyResult(1).diagnostics is not CopyResult(2).diagnostics
