"""Connection handle and query execution for the Metrix engine."""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

from . import _native
from ._native import NativeLibrary
from .decoder import ResultCursor, ResultDecoder
from .errors import (
    ExecutionFailureError,
    InvalidInputError,
    MetrixError,
    NoConnectionError,
    OpenFailureError,
    SystemFailureError,
    last_native_error,
)
from .events import EventKind, EventSink, resolve_sink
from .models import QueryResult


def _encode_arg(value: str, message: str) -> bytes:
    if not isinstance(value, str):
        raise InvalidInputError(message)
    try:
        encoded = value.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidInputError(message) from None
    if b"\x00" in encoded:
        raise InvalidInputError(message)
    return encoded


class Database:
    """Connection handle wrapped around one native database."""

    def __init__(
        self,
        handle: int,
        path: str,
        *,
        native: NativeLibrary,
        on_event: Optional[EventSink] = None,
    ):
        self._handle: Optional[int] = handle
        self._path = path
        self._native = native
        self._emit = resolve_sink(on_event)

    @classmethod
    def open(
        cls,
        path: str,
        *,
        native: Optional[NativeLibrary] = None,
        on_event: Optional[EventSink] = None,
    ) -> "Database":
        """Open the database at ``path``, creating it when missing."""
        lib = native if native is not None else _native.load_library()
        return cls._open_with(lib.open, path, lib, on_event)

    @classmethod
    def open_if_exists(
        cls,
        path: str,
        *,
        native: Optional[NativeLibrary] = None,
        on_event: Optional[EventSink] = None,
    ) -> "Database":
        """Open an existing database; never creates one."""
        lib = native if native is not None else _native.load_library()
        return cls._open_with(lib.open_if_exists, path, lib, on_event)

    @classmethod
    def _open_with(
        cls,
        opener: Callable[[bytes], Optional[int]],
        path: str,
        native: NativeLibrary,
        on_event: Optional[EventSink],
    ) -> "Database":
        c_path = _encode_arg(path, "Invalid path string")
        handle = opener(c_path)
        if not handle:
            raise OpenFailureError(last_native_error(native))
        db = cls(handle, path, native=native, on_event=on_event)
        db._emit({"kind": EventKind.DATABASE_OPENED, "path": path})
        return db

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_closed(self) -> bool:
        """Returns True if the database has been closed."""
        return self._handle is None

    def close(self) -> None:
        """Close the database, releasing the native handle.

        Calling close() multiple times is safe (subsequent calls are no-ops).
        """
        handle = self._handle
        if handle is None:
            return
        self._handle = None
        self._native.close(handle)
        self._emit({"kind": EventKind.DATABASE_CLOSED, "path": self._path})

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __del__(self) -> None:
        handle = getattr(self, "_handle", None)
        if handle is not None:
            self._handle = None
            self._native.close(handle)

    def __repr__(self) -> str:
        state = "closed" if self.is_closed else "open"
        return f"<Database {self._path!r} ({state})>"

    def execute(self, query: str) -> QueryResult:
        """Run a Cypher query and return the fully decoded result.

        Raises ExecutionFailureError when the engine rejects the query and
        SystemFailureError when it returns no result handle at all.
        """
        if self._handle is None:
            raise NoConnectionError("database is closed")
        c_query = _encode_arg(query, "Invalid query string (contains null byte)")
        self._emit({"kind": EventKind.QUERY_STARTED, "query": query})

        start = time.perf_counter()
        try:
            res = self._native.execute(self._handle, c_query)
            if not res:
                raise SystemFailureError(last_native_error(self._native))

            with ResultCursor(self._native, res) as cursor:
                if not cursor.is_success():
                    raise ExecutionFailureError(cursor.error_message())
                result = ResultDecoder(cursor, self._emit).decode()
        except MetrixError as err:
            self._emit({"kind": EventKind.QUERY_FAILED, "code": err.code, "message": str(err)})
            raise

        result["duration_ms"] = int((time.perf_counter() - start) * 1000)
        return result
