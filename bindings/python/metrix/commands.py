"""Boundary operations for a calling shell.

Every command returns a CommandResult and never raises a MetrixError: failures
come back as non-empty text plus the error code for diagnostics. Exceptions
that are not MetrixErrors are bugs and propagate.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from .errors import MetrixError, error_for_code
from .history import HistoryItem
from .models import QueryResult
from .state import AppState, get_app_state

logger = logging.getLogger(__name__)


class CommandResult(dict):
    """``{"ok": bool, "value": Any, "error": str | None, "code": str | None}``"""

    @classmethod
    def success(cls, value: Any = None) -> "CommandResult":
        return cls(ok=True, value=value, error=None, code=None)

    @classmethod
    def failure(cls, err: MetrixError) -> "CommandResult":
        message = str(err) or err.code
        return cls(ok=False, value=None, error=message, code=err.code)

    def is_ok(self) -> bool:
        return bool(self.get("ok"))

    def error(self) -> Optional[str]:
        return self.get("error")

    def unwrap(self) -> Any:
        """Return the value, or raise the typed MetrixError for a failure."""
        if self.is_ok():
            return self.get("value")
        raise error_for_code(self.get("code"), self.get("error") or "")


def _state(state: Optional[AppState]) -> AppState:
    return state if state is not None else get_app_state()


def open_database(path: str, state: Optional[AppState] = None) -> CommandResult:
    """Create or open the database at ``path``."""
    try:
        _state(state).db.open(path)
    except MetrixError as err:
        logger.error("Failed to open database at %s: %s", path, err)
        return CommandResult.failure(err)
    return CommandResult.success(f"Database created/opened at {path}")


def connect_existing(path: str, state: Optional[AppState] = None) -> CommandResult:
    """Open ``path`` only if a database already exists there."""
    try:
        _state(state).db.open_if_exists(path)
    except MetrixError as err:
        logger.error("Failed to connect to existing database at %s: %s", path, err)
        return CommandResult.failure(err)
    return CommandResult.success(f"Connected to existing database at {path}")


def run_query(query: str, state: Optional[AppState] = None) -> CommandResult:
    """Execute ``query`` and record it in the history."""
    app = _state(state)
    start = time.perf_counter()
    try:
        result: QueryResult = app.db.execute(query)
    except MetrixError as err:
        elapsed = int((time.perf_counter() - start) * 1000)
        app.history.record(query, "error", elapsed)
        logger.error("Query execution failed (%s): %s", err.code, err)
        return CommandResult.failure(err)
    app.history.record(query, "success", result.duration_ms(), len(result.nodes()))
    return CommandResult.success(result)


def close_database(state: Optional[AppState] = None) -> CommandResult:
    try:
        _state(state).db.close()
    except MetrixError as err:
        logger.error("Failed to close database: %s", err)
        return CommandResult.failure(err)
    return CommandResult.success(None)


def connection_status(state: Optional[AppState] = None) -> CommandResult:
    guard = _state(state).db
    try:
        path = guard.path
    except MetrixError as err:
        return CommandResult.failure(err)
    status: Dict[str, Any] = {"connected": path is not None, "path": path}
    return CommandResult.success(status)


def query_history(state: Optional[AppState] = None) -> CommandResult:
    items: List[HistoryItem] = _state(state).history.items()
    return CommandResult.success(items)


def clear_history(state: Optional[AppState] = None) -> CommandResult:
    _state(state).history.clear()
    return CommandResult.success(None)
