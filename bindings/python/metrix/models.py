"""Result types returned by query execution."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

from typing_extensions import Literal, TypedDict


class EntityRef(TypedDict):
    """Lightweight cell value pointing at an entry of ``nodes``/``edges``."""

    _type: Literal["node", "edge"]
    id: int


Value = Optional[Union[bool, int, float, str, EntityRef]]


class GraphNode(TypedDict):
    id: int
    label: str
    properties: Dict[str, Any]


class GraphEdge(TypedDict):
    id: int
    source: int
    target: int
    label: str
    properties: Dict[str, Any]


def node_ref(node_id: int) -> EntityRef:
    return {"_type": "node", "id": node_id}


def edge_ref(edge_id: int) -> EntityRef:
    return {"_type": "edge", "id": edge_id}


class QueryResult(dict):
    """Envelope returned by execute() with convenience helpers.

    Keys: ``columns``, ``rows``, ``nodes``, ``edges`` and ``duration_ms``.
    The envelope is plain JSON data and serializes with ``json.dumps``.
    """

    def __init__(
        self,
        columns: Optional[List[str]] = None,
        rows: Optional[List[List[Value]]] = None,
        nodes: Optional[List[GraphNode]] = None,
        edges: Optional[List[GraphEdge]] = None,
        duration_ms: int = 0,
    ) -> None:
        super().__init__(
            columns=list(columns or []),
            rows=list(rows or []),
            nodes=list(nodes or []),
            edges=list(edges or []),
            duration_ms=int(duration_ms),
        )

    def columns(self) -> List[str]:
        return self["columns"]

    def rows(self) -> List[List[Value]]:
        return self["rows"]

    def nodes(self) -> List[GraphNode]:
        return self["nodes"]

    def edges(self) -> List[GraphEdge]:
        return self["edges"]

    def duration_ms(self) -> int:
        return self["duration_ms"]

    def records(self) -> List[Dict[str, Value]]:
        """Rows keyed by column name. Later duplicate column names win."""
        cols = self.columns()
        return [dict(zip(cols, row)) for row in self.rows()]

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self, **kwargs)


def format_cell_value(value: Value) -> str:
    """Render a cell for a text table."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)
