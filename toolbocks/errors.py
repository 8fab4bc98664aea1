"""Error handling for toolbocks.

Reflection, copy and comparison failures are never raised to the caller.
They are wrapped in an ``Error`` and reported on the event bus instead.
The single exception that escapes is ``ImmutableValueError``, raised when
code writes to a frozen result.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

# ─────────────────────────────────────────────────────────────────────────────
# Error Codes
# ─────────────────────────────────────────────────────────────────────────────


class ErrorCode(str, Enum):
    """Error codes for programmatic handling.

    Usage:
        from toolbocks import ErrorCode, set_event_handler

        def on_event(event):
            if event.meta.get("code") == ErrorCode.ACCESSOR_FAILED:
                ...

        set_event_handler(on_event)
    """

    # Reflection
    ACCESSOR_FAILED = "ACCESSOR_FAILED"
    REBIND_FAILED = "REBIND_FAILED"
    CLONE_FAILED = "CLONE_FAILED"

    # Comparison
    COERCION_FAILED = "COERCION_FAILED"
    COMPARE_FAILED = "COMPARE_FAILED"

    # Limits (truncation, not failure)
    STACK_LIMIT_REACHED = "STACK_LIMIT_REACHED"
    MERGE_DEPTH_EXCEEDED = "MERGE_DEPTH_EXCEEDED"

    # Frozen values
    IMMUTABLE_VALUE = "IMMUTABLE_VALUE"


# ─────────────────────────────────────────────────────────────────────────────
# Error Context
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class ErrorContext:
    """Where a reported failure happened."""

    code: ErrorCode
    source: str | None = None  # Function that absorbed the failure
    key: Any = None  # Member key being processed
    type_name: str | None = None  # Class of the value being processed
    metadata: dict[str, Any] | None = None


# ─────────────────────────────────────────────────────────────────────────────
# Error Class
# ─────────────────────────────────────────────────────────────────────────────


class Error(Exception):
    """toolbocks error with context.

    Attributes:
        code: The error code (ErrorCode enum)
        context: Context about the failure (ErrorContext)
        cause: The underlying exception, if any
        timestamp: Unix timestamp when the error was created
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context = context or ErrorContext(code=code)
        self.cause = cause
        self.timestamp = time.time()
        if cause is not None:
            self.__cause__ = cause

    @classmethod
    def wrap(
        cls,
        cause: BaseException,
        code: ErrorCode,
        *,
        source: str | None = None,
        key: Any = None,
        value: Any = None,
        **metadata: Any,
    ) -> Error:
        """Wrap an absorbed exception for reporting."""
        context = ErrorContext(
            code=code,
            source=source,
            key=key,
            type_name=type(value).__name__ if value is not None else None,
            metadata=metadata or None,
        )
        return cls(f"{type(cause).__name__}: {cause}", code, context, cause)

    def to_detailed_string(self) -> str:
        """Get detailed string representation for logging."""
        lines = [
            f"Error [{self.code.value}]: {self.args[0]}",
            f"  Timestamp: {self.timestamp}",
        ]
        if self.context.source:
            lines.append(f"  Source: {self.context.source}")
        if self.context.key is not None:
            lines.append(f"  Key: {self.context.key!r}")
        if self.context.type_name:
            lines.append(f"  Type: {self.context.type_name}")
        if self.context.metadata:
            lines.append(f"  Metadata: {self.context.metadata}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.args[0]}"


class ImmutableValueError(Error, TypeError):
    """Raised when code tries to modify a frozen value."""

    def __init__(self, message: str, context: ErrorContext | None = None) -> None:
        super().__init__(message, ErrorCode.IMMUTABLE_VALUE, context)
