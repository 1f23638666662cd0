"""Structured driver events and the default logging sink."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from typing_extensions import TypedDict

LOG = logging.getLogger("metrix.driver")


class EventKind:
    DATABASE_OPENED = "database_opened"
    DATABASE_CLOSED = "database_closed"
    QUERY_STARTED = "query_started"
    QUERY_FAILED = "query_failed"
    SCAN_COMPLETE = "scan_complete"
    NODE_EXTRACTION_FAILED = "node_extraction_failed"
    EDGE_EXTRACTION_FAILED = "edge_extraction_failed"


class DriverEvent(TypedDict, total=False):
    kind: str
    path: str
    query: str
    code: str
    message: str
    row: int
    column: int
    rows: int
    nodes: int
    edges: int


EventSink = Callable[[DriverEvent], None]


_LEVELS: Dict[str, int] = {
    EventKind.DATABASE_OPENED: logging.INFO,
    EventKind.DATABASE_CLOSED: logging.INFO,
    EventKind.QUERY_STARTED: logging.INFO,
    EventKind.QUERY_FAILED: logging.ERROR,
    EventKind.SCAN_COMPLETE: logging.DEBUG,
    EventKind.NODE_EXTRACTION_FAILED: logging.WARNING,
    EventKind.EDGE_EXTRACTION_FAILED: logging.WARNING,
}


def _describe(event: DriverEvent) -> str:
    kind = event.get("kind")
    if kind == EventKind.DATABASE_OPENED:
        return "Database opened at %s" % event.get("path")
    if kind == EventKind.DATABASE_CLOSED:
        return "Database closed at %s" % event.get("path")
    if kind == EventKind.QUERY_STARTED:
        return "Executing Cypher: %s" % event.get("query")
    if kind == EventKind.QUERY_FAILED:
        return "Query failed (%s): %s" % (event.get("code"), event.get("message"))
    if kind == EventKind.SCAN_COMPLETE:
        return "Scan complete. Rows: %s, Nodes extracted: %s, Edges extracted: %s" % (
            event.get("rows"),
            event.get("nodes"),
            event.get("edges"),
        )
    if kind == EventKind.NODE_EXTRACTION_FAILED:
        return "metrix_result_get_node returned false at row %s col %s" % (
            event.get("row"),
            event.get("column"),
        )
    if kind == EventKind.EDGE_EXTRACTION_FAILED:
        return "metrix_result_get_edge returned false at row %s col %s" % (
            event.get("row"),
            event.get("column"),
        )
    return "%s: %r" % (kind, dict(event))


def log_event(event: DriverEvent) -> None:
    """Default sink: forward an event to the ``metrix.driver`` logger."""
    level = _LEVELS.get(event.get("kind", ""), logging.DEBUG)
    if LOG.isEnabledFor(level):
        LOG.log(level, _describe(event))


def resolve_sink(on_event: Optional[EventSink]) -> EventSink:
    return on_event if on_event is not None else log_event
