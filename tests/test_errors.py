"""Tests for tablespine.errors module."""

import sqlite3

import pytest

from tablespine.errors import (
    ErrorContext,
    ErrorKind,
    InvalidPayloadError,
    InvalidRangeError,
    NotFoundError,
    StorageFaultError,
    TableError,
    ValidationError,
    kind_of,
    status_for,
)


class TestErrorKind:
    def test_values_are_stable_names(self):
        assert ErrorKind.INVALID_RANGE.value == "InvalidRange"
        assert ErrorKind.NOT_FOUND.value == "NotFound"
        assert ErrorKind.STORAGE_FAULT.value == "StorageFault"

    def test_is_str_enum(self):
        assert ErrorKind.NOT_FOUND == "NotFound"


class TestErrorContext:
    def test_to_dict_skips_none(self):
        ctx = ErrorContext(table="users")
        assert ctx.to_dict() == {"table": "users"}

    def test_to_dict_merges_metadata(self):
        ctx = ErrorContext(table="users", operation="get", metadata={"sql": "SELECT 1"})
        assert ctx.to_dict() == {"table": "users", "operation": "get", "sql": "SELECT 1"}


class TestTableError:
    def test_defaults(self):
        error = TableError("boom")
        assert error.message == "boom"
        assert error.kind is ErrorKind.INTERNAL
        assert error.status_code == 500
        assert error.cause is None

    def test_with_context_is_fluent(self):
        error = TableError("boom").with_context(table="users", operation="update", request_id="r1")
        assert error.context.table == "users"
        assert error.context.operation == "update"
        assert error.context.metadata == {"request_id": "r1"}

    def test_cause_is_chained(self):
        cause = ValueError("inner")
        error = TableError("outer", cause=cause)
        assert error.__cause__ is cause
        assert error.to_dict()["cause"] == "inner"

    def test_to_dict(self):
        error = TableError("boom").with_context(table="users")
        data = error.to_dict()
        assert data["error_type"] == "TableError"
        assert data["kind"] == "Internal"
        assert data["status_code"] == 500
        assert data["context"] == {"table": "users"}

    def test_repr(self):
        assert repr(TableError("boom")) == "TableError('boom', kind=Internal)"


class TestInvalidRangeError:
    def test_message_and_kind(self):
        error = InvalidRangeError("age", 10, 5)
        assert error.message == "Min must be lower than max"
        assert error.kind is ErrorKind.INVALID_RANGE
        assert error.status_code == 400
        assert isinstance(error, ValidationError)

    def test_carries_bounds(self):
        error = InvalidRangeError("age", 10, 5)
        assert error.field == "age"
        assert (error.lower, error.upper) == (10, 5)
        assert error.to_dict()["constraint"] == "min <= max"


class TestInvalidPayloadError:
    def test_kind_and_status(self):
        error = InvalidPayloadError("Unknown column(s): nope", field="nope")
        assert error.kind is ErrorKind.INVALID_PAYLOAD
        assert error.status_code == 400
        assert error.to_dict()["field"] == "nope"


class TestNotFoundError:
    def test_message_names_key_and_value(self):
        error = NotFoundError("users", "username", "zed")
        assert error.message == "No item with username: zed"
        assert str(error) == "No item with username: zed"

    def test_kind_status_context(self):
        error = NotFoundError("users", "username", "zed")
        assert error.kind is ErrorKind.NOT_FOUND
        assert error.status_code == 404
        assert error.context.table == "users"
        assert error.context.primary_key == "zed"


class TestStorageFaultError:
    def test_keeps_driver_message(self):
        try:
            raise sqlite3.IntegrityError("UNIQUE constraint failed: users.email")
        except sqlite3.IntegrityError as e:
            error = StorageFaultError(str(e), cause=e)

        assert error.message == "UNIQUE constraint failed: users.email"
        assert isinstance(error.cause, sqlite3.IntegrityError)
        assert error.kind is ErrorKind.STORAGE_FAULT
        assert error.status_code == 500


class TestHelpers:
    @pytest.mark.parametrize(
        "error,status",
        [
            (NotFoundError("t", "id", 1), 404),
            (InvalidRangeError("x", 2, 1), 400),
            (StorageFaultError("x"), 500),
            (RuntimeError("x"), 500),
        ],
    )
    def test_status_for(self, error, status):
        assert status_for(error) == status

    def test_kind_of(self):
        assert kind_of(NotFoundError("t", "id", 1)) is ErrorKind.NOT_FOUND
        assert kind_of(KeyError("x")) is ErrorKind.INTERNAL
