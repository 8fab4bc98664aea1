"""Tests for toolbocks.errors module."""

import pytest

from toolbocks.errors import Error, ErrorCode, ErrorContext, ImmutableValueError


class TestErrorCode:
    def test_values_match_names(self):
        for code in ErrorCode:
            assert code.value == code.name

    def test_is_string(self):
        assert ErrorCode.CLONE_FAILED == "CLONE_FAILED"


class TestError:
    def test_str_includes_code(self):
        error = Error("accessor raised", ErrorCode.ACCESSOR_FAILED)
        assert str(error) == "[ACCESSOR_FAILED] accessor raised"

    def test_default_context(self):
        error = Error("boom", ErrorCode.COMPARE_FAILED)
        assert error.context.code == ErrorCode.COMPARE_FAILED
        assert error.context.source is None
        assert error.cause is None
        assert error.timestamp > 0

    def test_wrap(self):
        """Test wrapping an absorbed exception."""
        cause = ValueError("bad value")
        error = Error.wrap(
            cause,
            ErrorCode.COERCION_FAILED,
            source="coerce",
            key="size",
            value=[1],
            target="number",
        )
        assert error.code == ErrorCode.COERCION_FAILED
        assert error.cause is cause
        assert error.__cause__ is cause
        assert str(error) == "[COERCION_FAILED] ValueError: bad value"
        assert error.context.source == "coerce"
        assert error.context.key == "size"
        assert error.context.type_name == "list"
        assert error.context.metadata == {"target": "number"}

    def test_wrap_without_metadata(self):
        error = Error.wrap(RuntimeError("x"), ErrorCode.CLONE_FAILED)
        assert error.context.metadata is None
        assert error.context.type_name is None

    def test_detailed_string(self):
        error = Error.wrap(
            KeyError("k"),
            ErrorCode.ACCESSOR_FAILED,
            source="object_entries",
            key="name",
            value=object(),
        )
        detailed = error.to_detailed_string()
        assert detailed.startswith("Error [ACCESSOR_FAILED]: KeyError")
        assert "Source: object_entries" in detailed
        assert "Key: 'name'" in detailed
        assert "Type: object" in detailed
        assert "Metadata" not in detailed

    def test_can_be_raised(self):
        with pytest.raises(Error) as exc_info:
            raise Error("boom", ErrorCode.REBIND_FAILED)
        assert exc_info.value.code == ErrorCode.REBIND_FAILED


class TestImmutableValueError:
    def test_is_type_error(self):
        """Test that writes to frozen values can be caught as TypeError."""
        with pytest.raises(TypeError):
            raise ImmutableValueError("frozen")

    def test_code(self):
        error = ImmutableValueError(
            "frozen",
            ErrorContext(code=ErrorCode.IMMUTABLE_VALUE, key="name"),
        )
        assert error.code == ErrorCode.IMMUTABLE_VALUE
        assert error.context.key == "name"
        assert isinstance(error, Error)
