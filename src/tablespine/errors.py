"""
Structured error types for tablespine.

Every failure raised by a table accessor is a :class:`TableError`.  Instead
of ad-hoc exceptions carrying a message and a status, each error carries:

- **Kind:** an :class:`ErrorKind` classification (invalid range, invalid
  payload, not found, storage fault)
- **Status code:** the protocol-level status an HTTP layer should answer with
- **Context:** table, operation and primary key the failure relates to
- **Cause:** the chained driver exception for storage faults

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                       TableError                         │
        │        (kind, status_code, context, cause)               │
        ├──────────────────────────────────────────────────────────┤
        │                                                          │
        │  ValidationError          NotFoundError                  │
        │  (status 400)             (NOT_FOUND, 404)               │
        │       │                                                  │
        │  InvalidRangeError        StorageFaultError              │
        │  InvalidPayloadError      (STORAGE_FAULT, 500)           │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> error = NotFoundError("users", "username", "ann")
    >>> error.message
    'No item with username: ann'
    >>> error.kind
    <ErrorKind.NOT_FOUND: 'NotFound'>
    >>> error.status_code
    404

    Wrapping a driver failure:

    >>> try:
    ...     raise sqlite3.IntegrityError("UNIQUE constraint failed: users.email")
    ... except sqlite3.IntegrityError as e:
    ...     raise StorageFaultError(str(e), cause=e)
    Traceback (most recent call last):
    ...
    StorageFaultError: UNIQUE constraint failed: users.email

Guardrails:
    ❌ DON'T: Reinterpret or retry storage faults
    ✅ DO: Pass the driver exception as cause= so callers see the original

    ❌ DON'T: Raise NotFoundError for empty reads
    ✅ DO: Return None / [] from get and find_all; NotFound is for mutations

Tags:
    error-handling, exception-hierarchy, error-context, tablespine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Classification carried by every :class:`TableError`.

    The value is the stable, human-readable name callers can switch on or
    serialize.
    """

    INVALID_RANGE = "InvalidRange"      # find_all max bound below min bound
    INVALID_PAYLOAD = "InvalidPayload"  # unknown or missing payload columns
    NOT_FOUND = "NotFound"              # targeted mutation matched no row
    STORAGE_FAULT = "StorageFault"      # anything raised by the store
    INTERNAL = "Internal"               # bugs, unexpected state


@dataclass
class ErrorContext:
    """Structured metadata attached to an error.

    Only non-None fields are serialized by :meth:`to_dict`; anything that
    does not have a dedicated field goes into ``metadata``.
    """

    table: str | None = None
    operation: str | None = None
    primary_key: Any = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["table", "operation", "primary_key"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TableError(Exception):
    """
    Base exception for all tablespine errors.

    Subclasses set ``default_kind`` and ``status_code`` class attributes so
    the caller-facing layer can derive a response without knowing the
    concrete class.

    Examples:
        >>> error = TableError("Something went wrong")
        >>> error.kind
        <ErrorKind.INTERNAL: 'Internal'>
        >>> error.with_context(table="users", operation="get").context.table
        'users'
        >>> error.to_dict()["kind"]
        'Internal'
    """

    default_kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind or self.default_kind
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TableError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotFoundError(...).with_context(operation="update")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "kind": self.kind.value,
            "status_code": self.status_code,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, kind={self.kind.value})"


# =============================================================================
# VALIDATION ERRORS (caller input, never retryable)
# =============================================================================


class ValidationError(TableError):
    """Caller input rejected before any statement was issued."""

    status_code = 400

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.constraint = constraint

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        if self.constraint:
            result["constraint"] = self.constraint
        return result


class InvalidRangeError(ValidationError):
    """A range filter's upper bound is below its lower bound."""

    default_kind = ErrorKind.INVALID_RANGE

    def __init__(self, column: str, lower: Any, upper: Any, message: str | None = None):
        self.lower = lower
        self.upper = upper
        super().__init__(
            message or "Min must be lower than max",
            field=column,
            value=(lower, upper),
            constraint="min <= max",
        )


class InvalidPayloadError(ValidationError):
    """Payload is empty or names columns the table does not declare."""

    default_kind = ErrorKind.INVALID_PAYLOAD


# =============================================================================
# LOOKUP / STORAGE ERRORS
# =============================================================================


class NotFoundError(TableError):
    """A targeted update or delete matched no row."""

    default_kind = ErrorKind.NOT_FOUND
    status_code = 404

    def __init__(self, table: str, primary_key: str, value: Any):
        self.value = value
        super().__init__(
            f"No item with {primary_key}: {value}",
            context=ErrorContext(table=table, primary_key=value),
        )


class StorageFaultError(TableError):
    """Failure surfaced unmodified from the storage collaborator.

    The message is the driver's own message; the driver exception is kept
    as ``cause``.
    """

    default_kind = ErrorKind.STORAGE_FAULT
    status_code = 500


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def status_for(error: BaseException) -> int:
    """Protocol-level status for any exception (500 unless it is a TableError)."""
    if isinstance(error, TableError):
        return error.status_code
    return 500


def kind_of(error: BaseException) -> ErrorKind:
    """Classification for any exception."""
    if isinstance(error, TableError):
        return error.kind
    return ErrorKind.INTERNAL


__all__ = [
    "ErrorKind",
    "ErrorContext",
    "TableError",
    "ValidationError",
    "InvalidRangeError",
    "InvalidPayloadError",
    "NotFoundError",
    "StorageFaultError",
    "status_for",
    "kind_of",
]
