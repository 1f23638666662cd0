"""Python bindings for the Metrix graph engine."""

from ._native import MetrixValueType, NativeLibrary, load_library
from .commands import (
    CommandResult,
    clear_history,
    close_database,
    connect_existing,
    connection_status,
    open_database,
    query_history,
    run_query,
)
from .decoder import ResultDecoder, decode_properties
from .driver import Database
from .errors import (
    ErrorCode,
    MetrixError,
    InvalidInputError,
    NoConnectionError,
    OpenFailureError,
    ExecutionFailureError,
    SystemFailureError,
    LockFailureError,
    DecodeFailureError,
    NativeLibraryError,
    last_native_error,
)
from .events import DriverEvent, EventKind, EventSink, log_event
from .history import HistoryItem, QueryHistory
from .models import EntityRef, GraphEdge, GraphNode, QueryResult, Value, format_cell_value
from .state import AppState, ConnectionGuard, get_app_state

__version__ = "0.1.0"

__all__ = [
    "Database",
    "QueryResult",
    "GraphNode",
    "GraphEdge",
    "EntityRef",
    "Value",
    "ResultDecoder",
    "decode_properties",
    "format_cell_value",
    "MetrixValueType",
    "NativeLibrary",
    "load_library",
    "ConnectionGuard",
    "AppState",
    "get_app_state",
    "QueryHistory",
    "HistoryItem",
    "DriverEvent",
    "EventKind",
    "EventSink",
    "log_event",
    # Boundary commands
    "CommandResult",
    "open_database",
    "connect_existing",
    "run_query",
    "close_database",
    "connection_status",
    "query_history",
    "clear_history",
    # Error types
    "ErrorCode",
    "MetrixError",
    "InvalidInputError",
    "NoConnectionError",
    "OpenFailureError",
    "ExecutionFailureError",
    "SystemFailureError",
    "LockFailureError",
    "DecodeFailureError",
    "NativeLibraryError",
    "last_native_error",
    "__version__",
]
