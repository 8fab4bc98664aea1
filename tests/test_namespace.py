"""Tests for the toolbocks package namespace and scoped API."""

from __future__ import annotations

import types

import toolbocks
from toolbocks import Compare, Objects


class TestNamespacePollution:
    """Tests that internal symbols are not exposed in the toolbocks namespace."""

    FORBIDDEN_SYMBOLS = [
        # Typing imports
        "Any",
        "Callable",
        # Common pollution patterns
        "annotations",
        "dataclass",
        "re",
    ]

    def test_no_forbidden_symbols(self):
        public_attrs = [x for x in dir(toolbocks) if not x.startswith("_")]

        for forbidden in self.FORBIDDEN_SYMBOLS:
            assert forbidden not in public_attrs, (
                f"Internal symbol '{forbidden}' is exposed in toolbocks namespace."
            )

    def test_all_is_importable(self):
        for name in toolbocks.__all__:
            assert hasattr(toolbocks, name), f"{name} listed in __all__ but missing"

    def test_version_accessible(self):
        assert isinstance(toolbocks.__version__, str)
        assert len(toolbocks.__version__) > 0


class TestObjects:
    def test_entries_keys_values(self):
        assert Objects.keys({"a": 1, "b": 2}) == ["a", "b"]
        assert Objects.values({"a": 1, "b": 2}) == [1, 2]
        assert [e.to_tuple() for e in Objects.entries({"a": 1})] == [("a", 1)]

    def test_copy_with_overrides(self):
        source = {"a": [1]}
        assert Objects.copy(source)["a"] is not source["a"]
        assert Objects.copy(source, depth=0)["a"] is source["a"]

    def test_freeze(self):
        frozen = Objects.freeze({"a": [1]})
        assert isinstance(frozen, types.MappingProxyType)
        assert frozen["a"] == (1,)

    def test_freeze_with_overrides(self):
        inner = [1]
        frozen = Objects.freeze({"a": inner}, depth=0)
        assert frozen["a"] is inner

    def test_lock(self):
        assert Objects.lock([1]) == (1,)

    def test_merge_and_populate(self):
        assert Objects.merge({"a": 1}, {"a": 2, "b": 3}) == {"a": 1, "b": 3}
        assert Objects.populate({"a": None}, {"a": 2}) == {"a": 2}


class TestCompare:
    def test_key(self):
        assert sorted([3, None, 1], key=Compare.key("number")) == [None, 1, 3]

    def test_key_with_options(self):
        result = sorted([3, None, 1], key=Compare.key(nulls_first=False, reverse=True))
        assert result == [3, 1, None]

    def test_values(self):
        assert Compare.values("b", "A", case_sensitive=False) == 1
        assert Compare.values("b", "A") == 1
        assert Compare.values(1, 2, "number") == -1

    def test_comparator(self):
        compare = Compare.comparator("string", trim_strings=True)
        assert compare(" x", "x") == 0

    def test_factory(self):
        factory = Compare.factory("number", coerce=True)
        assert factory.coerce is True
        assert factory.type == "number"
