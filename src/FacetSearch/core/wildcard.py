"""Wildcard special values for terms filters.

A terms filter value is normally an exact term. Prefixing it with
`WILDCARD_PREFIX` turns it into a substring match request, so the same value
channel carries both kinds of selection.

A literal term that itself starts with the prefix cannot be told apart from an
encoded value; there is no escape mechanism.
"""

from __future__ import annotations

from typing import Final

WILDCARD_PREFIX: Final[str] = "WILDCARD:"


class DecodeError(ValueError):
    """Raised when decoding a value that does not carry the wildcard prefix."""


def encode_wildcard(raw: str) -> str:
    """Tag `raw` as a substring match request."""
    return f"{WILDCARD_PREFIX}{raw}"


def is_wildcard(value: str) -> bool:
    """Return True if `value` was produced by `encode_wildcard`."""
    return value.startswith(WILDCARD_PREFIX)


def decode_wildcard(value: str) -> str:
    """Return the substring carried by a wildcard special value.

    Raises:
        DecodeError: If `value` is not wildcard-encoded.
    """
    if not is_wildcard(value):
        raise DecodeError(f"Not a wildcard value: {value!r}")
    return value[len(WILDCARD_PREFIX):]
