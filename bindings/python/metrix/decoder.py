"""Decoding of native result cursors into QueryResult envelopes."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

from ._native import MetrixValueType, NativeLibrary
from .errors import UNKNOWN_EXECUTION_ERROR_TEXT, DecodeFailureError, decode_native_text
from .events import EventKind, EventSink, resolve_sink
from .models import GraphEdge, GraphNode, QueryResult, Value, edge_ref, node_ref

DEFAULT_NODE_LABEL = "Node"
DEFAULT_EDGE_LABEL = "Edge"


class ResultCursor:
    """Owns one native result handle; closes it exactly once."""

    def __init__(self, native: NativeLibrary, handle: int):
        self._native = native
        self._handle = handle
        self._closed = False

    def __enter__(self) -> "ResultCursor":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._native.result_close(self._handle)

    @property
    def closed(self) -> bool:
        return self._closed

    def is_success(self) -> bool:
        return self._native.result_is_success(self._handle)

    def error_message(self) -> str:
        raw = self._native.result_get_error(self._handle)
        if raw is None:
            return UNKNOWN_EXECUTION_ERROR_TEXT
        return decode_native_text(raw)

    def column_count(self) -> int:
        return self._native.result_column_count(self._handle)

    def column_name(self, col: int) -> str:
        raw = self._native.result_column_name(self._handle, col)
        if raw is None:
            return f"col_{col}"
        return decode_native_text(raw)

    def next(self) -> bool:
        return self._native.result_next(self._handle)

    def value_type(self, col: int) -> MetrixValueType:
        tag = self._native.result_get_type(self._handle, col)
        try:
            return MetrixValueType(tag)
        except ValueError:
            raise DecodeFailureError(f"unsupported value type tag {tag} at column {col}") from None

    def get_string(self, col: int) -> str:
        raw = self._native.result_get_string(self._handle, col)
        return "" if raw is None else decode_native_text(raw)

    def get_int(self, col: int) -> int:
        return self._native.result_get_int(self._handle, col)

    def get_double(self, col: int) -> float:
        return self._native.result_get_double(self._handle, col)

    def get_bool(self, col: int) -> bool:
        return self._native.result_get_bool(self._handle, col)

    def get_node(self, col: int) -> Any:
        return self._native.result_get_node(self._handle, col)

    def get_edge(self, col: int) -> Any:
        return self._native.result_get_edge(self._handle, col)

    def get_properties(self, col: int) -> Dict[str, Any]:
        raw = self._native.result_get_props_json(self._handle, col)
        return decode_properties(None if raw is None else decode_native_text(raw))


def decode_properties(text: Optional[str]) -> Dict[str, Any]:
    """Parse a property document; anything but a JSON object yields ``{}``."""
    if text is None:
        return {}
    try:
        value = json.loads(text)
    except (ValueError, RecursionError):
        return {}
    if not isinstance(value, dict):
        return {}
    return value


def _label(raw: Optional[bytes], default: str) -> str:
    return default if raw is None else decode_native_text(raw)


class ResultDecoder:
    """Walks a successful cursor and assembles a QueryResult.

    The cursor is not closed here; the executor owns it and closes it on
    every path.
    """

    def __init__(self, cursor: ResultCursor, on_event: Optional[EventSink] = None):
        self._cursor = cursor
        self._emit = resolve_sink(on_event)
        self._nodes: List[GraphNode] = []
        self._edges: List[GraphEdge] = []
        self._row = 0

    def decode(self) -> QueryResult:
        cursor = self._cursor
        col_count = cursor.column_count()
        columns = [cursor.column_name(i) for i in range(col_count)]

        rows: List[List[Value]] = []
        while cursor.next():
            row: List[Value] = []
            for col in range(col_count):
                value_type = cursor.value_type(col)
                row.append(_CELL_DECODERS[value_type](self, col))
            rows.append(row)
            self._row += 1

        self._emit(
            {
                "kind": EventKind.SCAN_COMPLETE,
                "rows": len(rows),
                "nodes": len(self._nodes),
                "edges": len(self._edges),
            }
        )
        return QueryResult(columns=columns, rows=rows, nodes=self._nodes, edges=self._edges)

    def _decode_null(self, col: int) -> Value:
        return None

    def _decode_bool(self, col: int) -> Value:
        return self._cursor.get_bool(col)

    def _decode_int(self, col: int) -> Value:
        return self._cursor.get_int(col)

    def _decode_double(self, col: int) -> Value:
        return self._cursor.get_double(col)

    def _decode_string(self, col: int) -> Value:
        return self._cursor.get_string(col)

    def _decode_node(self, col: int) -> Value:
        raw = self._cursor.get_node(col)
        if raw is None:
            self._emit({"kind": EventKind.NODE_EXTRACTION_FAILED, "row": self._row, "column": col})
            return None
        node_id = int(raw.id)
        self._nodes.append(
            {
                "id": node_id,
                "label": _label(raw.label, DEFAULT_NODE_LABEL),
                "properties": self._cursor.get_properties(col),
            }
        )
        return node_ref(node_id)

    def _decode_edge(self, col: int) -> Value:
        raw = self._cursor.get_edge(col)
        if raw is None:
            self._emit({"kind": EventKind.EDGE_EXTRACTION_FAILED, "row": self._row, "column": col})
            return None
        edge_id = int(raw.id)
        self._edges.append(
            {
                "id": edge_id,
                "source": int(raw.source_id),
                "target": int(raw.target_id),
                "label": _label(raw.type, DEFAULT_EDGE_LABEL),
                "properties": self._cursor.get_properties(col),
            }
        )
        return edge_ref(edge_id)


_CELL_DECODERS: Dict[MetrixValueType, Callable[[ResultDecoder, int], Value]] = {
    MetrixValueType.NULL: ResultDecoder._decode_null,
    MetrixValueType.BOOL: ResultDecoder._decode_bool,
    MetrixValueType.INT: ResultDecoder._decode_int,
    MetrixValueType.DOUBLE: ResultDecoder._decode_double,
    MetrixValueType.STRING: ResultDecoder._decode_string,
    MetrixValueType.NODE: ResultDecoder._decode_node,
    MetrixValueType.EDGE: ResultDecoder._decode_edge,
}

_missing_decoders = set(MetrixValueType) - set(_CELL_DECODERS)
if _missing_decoders:
    raise ImportError(f"no cell decoder for {sorted(t.name for t in _missing_decoders)}")
