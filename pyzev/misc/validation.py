"""Exceptions and name checks shared by the codec and the event model."""

from __future__ import annotations

from typing import Any, Optional


class ZevError(Exception):
    """Base exception for everything raised by pyzev."""
    pass


# --- Decode errors ---

class ZevParseError(ZevError):
    """Raised when a byte buffer cannot be decoded into events."""
    pass


class InvalidHeaderError(ZevParseError):
    """Raised when the file header fails one of its fixed checks."""

    def __init__(self, message: str, expected: Optional[Any] = None, actual: Optional[Any] = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class InvalidFileError(ZevParseError):
    """Raised when the tables or data blobs are inconsistent or unreadable."""
    pass


# --- Encode errors ---

class ZevWriteError(ZevError):
    """Raised when events cannot be encoded."""
    pass


class LogicError(ZevWriteError):
    """Raised when an internal write fails; never expected for a valid model."""
    pass


# --- Mutation errors ---

class MutationError(ZevError):
    """Base exception for rejected edits to the event model."""
    pass


class StringNotAsciiError(MutationError, ValueError):
    """Raised when a name contains non-ASCII characters."""
    pass


class StringTooLongError(MutationError, ValueError):
    """Raised when a name does not fit its fixed-width field."""
    pass


class StringSizeWrongError(MutationError, ValueError):
    """Raised when a fixed-size name (e.g. a 4 byte short name) has the wrong length."""
    pass


class OutOfRangeError(MutationError, IndexError):
    """Raised when an actor or step index does not exist in the event."""
    pass


def check_name_length(name: str, max_len: int, field: str = "name") -> None:
    """
    Validate a name destined for a fixed-width, zero-padded field.

    Args:
        name: Name to check
        max_len: Field width in bytes
        field: Field label used in the error message

    Raises:
        StringNotAsciiError: name is not a pure ASCII str
        StringTooLongError: name is longer than max_len bytes
    """
    if not isinstance(name, str) or not name.isascii():
        raise StringNotAsciiError(f"{field} must be an ASCII string, got {name!r}")
    if len(name) > max_len:
        raise StringTooLongError(f"{field} {name!r} is {len(name)} bytes, limit is {max_len}")


def check_name_size(name: str, size: int, field: str = "name") -> None:
    """Validate a name that must be exactly `size` ASCII bytes."""
    if not isinstance(name, str) or not name.isascii():
        raise StringNotAsciiError(f"{field} must be an ASCII string, got {name!r}")
    if len(name) != size:
        raise StringSizeWrongError(f"{field} {name!r} must be exactly {size} bytes, got {len(name)}")
