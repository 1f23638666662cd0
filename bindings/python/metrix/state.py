"""Process-wide connection slot guarded by a single lock."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from ._native import NativeLibrary
from .driver import Database
from .errors import LockFailureError, MetrixError, NoConnectionError
from .events import EventSink
from .history import QueryHistory
from .models import QueryResult

LOCK_FAILURE_TEXT = "Failed to acquire db lock"
NO_CONNECTION_TEXT = "No database is currently open."


class ConnectionGuard:
    """Holds at most one open Database and serializes every operation on it.

    Each operation keeps the lock for its whole duration, native call and
    decoding included. An operation that fails with anything other than a
    MetrixError poisons the guard: the slot may hold a half-updated handle,
    so every later operation raises LockFailureError.
    """

    def __init__(
        self,
        *,
        native: Optional[NativeLibrary] = None,
        on_event: Optional[EventSink] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._db: Optional[Database] = None
        self._poisoned = False
        self._native = native
        self._on_event = on_event

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with self._lock:
            if self._poisoned:
                raise LockFailureError(LOCK_FAILURE_TEXT)
            try:
                yield
            except MetrixError:
                raise
            except BaseException:
                self._poisoned = True
                raise

    @property
    def poisoned(self) -> bool:
        return self._poisoned

    @property
    def is_open(self) -> bool:
        with self._locked():
            return self._db is not None

    @property
    def path(self) -> Optional[str]:
        with self._locked():
            return self._db.path if self._db is not None else None

    def open(self, path: str) -> None:
        """Create or open ``path``, replacing the current connection."""
        with self._locked():
            self._release()
            self._db = Database.open(path, native=self._native, on_event=self._on_event)

    def open_if_exists(self, path: str) -> None:
        """Open an existing database at ``path``, replacing the current connection."""
        with self._locked():
            self._release()
            self._db = Database.open_if_exists(path, native=self._native, on_event=self._on_event)

    def execute(self, query: str) -> QueryResult:
        with self._locked():
            if self._db is None:
                raise NoConnectionError(NO_CONNECTION_TEXT)
            return self._db.execute(query)

    def close(self) -> None:
        """Close the current connection; a no-op when none is open."""
        with self._locked():
            self._release()

    def _release(self) -> None:
        db, self._db = self._db, None
        if db is not None:
            db.close()


class AppState:
    """Shared state behind the boundary commands."""

    def __init__(
        self,
        *,
        native: Optional[NativeLibrary] = None,
        on_event: Optional[EventSink] = None,
        history_limit: Optional[int] = None,
    ) -> None:
        self.db = ConnectionGuard(native=native, on_event=on_event)
        self.history = QueryHistory() if history_limit is None else QueryHistory(history_limit)


_app_state: Optional[AppState] = None
_app_state_lock = threading.Lock()


def get_app_state() -> AppState:
    """Return the process-wide AppState, creating it on first use."""
    global _app_state
    with _app_state_lock:
        if _app_state is None:
            _app_state = AppState()
        return _app_state
