"""Error types raised by the Metrix bindings and native error translation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional, Type

if TYPE_CHECKING:
    from ._native import NativeLibrary


MISSING_ERROR_TEXT = "Database file not found or access denied"
BLANK_ERROR_TEXT = "An unknown error occurred while validating the database."
UNKNOWN_EXECUTION_ERROR_TEXT = "Unknown database execution error"


class ErrorCode:
    """Error codes attached to every MetrixError."""
    UNKNOWN = "UNKNOWN"
    INVALID_INPUT = "INVALID_INPUT"
    NO_CONNECTION = "NO_CONNECTION"
    OPEN_FAILURE = "OPEN_FAILURE"
    EXECUTION_FAILURE = "EXECUTION_FAILURE"
    SYSTEM_FAILURE = "SYSTEM_FAILURE"
    LOCK_FAILURE = "LOCK_FAILURE"
    DECODE_FAILURE = "DECODE_FAILURE"
    NATIVE_LIBRARY = "NATIVE_LIBRARY"


class MetrixError(Exception):
    """Base exception class for all Metrix errors."""

    def __init__(self, message: str, code: str = ErrorCode.UNKNOWN):
        super().__init__(message)
        self.code = code


class InvalidInputError(MetrixError):
    """Error raised when a path or query cannot be passed to the engine."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.INVALID_INPUT)


class NoConnectionError(MetrixError):
    """Error raised when an operation needs a database and none is open."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.NO_CONNECTION)


class OpenFailureError(MetrixError):
    """Error raised when the engine could not open or create a database."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.OPEN_FAILURE)


class ExecutionFailureError(MetrixError):
    """Error raised when the engine rejected a query (syntax or runtime)."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.EXECUTION_FAILURE)


class SystemFailureError(MetrixError):
    """Error raised when the engine returned no result handle at all."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.SYSTEM_FAILURE)


class LockFailureError(MetrixError):
    """Error raised when the connection guard is poisoned. Not retryable."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.LOCK_FAILURE)


class DecodeFailureError(MetrixError):
    """Error raised when a result cell carries an unknown type tag."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.DECODE_FAILURE)


class NativeLibraryError(MetrixError):
    """Error raised when the Metrix shared library cannot be loaded."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.NATIVE_LIBRARY)


# Map of error code strings to their corresponding exception classes
_ERROR_CLASS_MAP: Dict[str, Type[MetrixError]] = {
    ErrorCode.INVALID_INPUT: InvalidInputError,
    ErrorCode.NO_CONNECTION: NoConnectionError,
    ErrorCode.OPEN_FAILURE: OpenFailureError,
    ErrorCode.EXECUTION_FAILURE: ExecutionFailureError,
    ErrorCode.SYSTEM_FAILURE: SystemFailureError,
    ErrorCode.LOCK_FAILURE: LockFailureError,
    ErrorCode.DECODE_FAILURE: DecodeFailureError,
    ErrorCode.NATIVE_LIBRARY: NativeLibraryError,
}


def error_for_code(code: Optional[str], message: str) -> MetrixError:
    """Build the typed exception for ``code``; unknown codes give a plain MetrixError."""
    error_class = _ERROR_CLASS_MAP.get(code or ErrorCode.UNKNOWN)
    if error_class is None:
        return MetrixError(message, ErrorCode.UNKNOWN)
    return error_class(message)


def decode_native_text(raw: bytes) -> str:
    """Decode engine text as UTF-8; invalid bytes are replaced, never raised."""
    return raw.decode("utf-8", errors="replace")


def last_native_error(native: "NativeLibrary") -> str:
    """Read the engine's last error as non-empty, human-readable text.

    A NULL pointer means the engine had nothing to report, which in practice
    is a missing or unreadable database file. A blank message gets a generic
    fallback so callers never surface an empty string.
    """
    raw = native.last_error()
    if raw is None:
        return MISSING_ERROR_TEXT
    text = decode_native_text(raw)
    if not text.strip():
        return BLANK_ERROR_TEXT
    return text
