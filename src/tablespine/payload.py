"""Payload preparation for create / update.

Keys starting with ``_`` are request metadata (CSRF tokens, client-side
flags, ...) and are never persisted.  Filtering returns a new dict; the
caller's mapping is left untouched.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any

from tablespine.errors import InvalidPayloadError

METADATA_PREFIX = "_"


def strip_metadata(data: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of ``data`` without ``_``-prefixed keys, in the original key order."""
    return {
        k: v
        for k, v in data.items()
        if not (isinstance(k, str) and k.startswith(METADATA_PREFIX))
    }


def persistable(data: Mapping[str, Any], columns: Collection[str]) -> dict[str, Any]:
    """Strip metadata and check the remaining keys are declared columns.

    Payload keys end up as identifiers in SQL text, so anything outside the
    declared column set is rejected rather than interpolated.

    Raises:
        InvalidPayloadError: Nothing left to write, non-str keys, or unknown
            columns.
    """
    clean = strip_metadata(data)
    if not clean:
        raise InvalidPayloadError("Payload has no columns to write")

    bad_keys = [k for k in clean if not isinstance(k, str)]
    if bad_keys:
        raise InvalidPayloadError(
            f"Payload keys must be column names, got {bad_keys[0]!r}",
            value=bad_keys[0],
            constraint="str keys",
        )

    unknown = [k for k in clean if k not in columns]
    if unknown:
        raise InvalidPayloadError(
            f"Unknown column(s): {', '.join(unknown)}",
            field=unknown[0],
            constraint="declared columns",
        )
    return clean


__all__ = ["METADATA_PREFIX", "strip_metadata", "persistable"]
