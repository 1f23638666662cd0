"""In-memory stand-in for the Metrix shared library."""

from __future__ import annotations

import threading
import time
from typing import Dict, List, Optional, Sequence, Union

from metrix._native import MetrixEdge, MetrixNode, MetrixValueType


def _b(text: Optional[str]) -> Optional[bytes]:
    return None if text is None else text.encode("utf-8")


class Cell:
    def __init__(
        self,
        tag: int,
        value: object = None,
        *,
        label: Optional[bytes] = None,
        source: int = 0,
        target: int = 0,
        props: Optional[bytes] = None,
        extract_ok: bool = True,
    ) -> None:
        self.tag = tag
        self.value = value
        self.label = label
        self.source = source
        self.target = target
        self.props = props
        self.extract_ok = extract_ok


def null() -> Cell:
    return Cell(MetrixValueType.NULL)


def boolean(value: bool) -> Cell:
    return Cell(MetrixValueType.BOOL, value)


def integer(value: int) -> Cell:
    return Cell(MetrixValueType.INT, value)


def double(value: float) -> Cell:
    return Cell(MetrixValueType.DOUBLE, value)


def string(value: Union[str, bytes, None]) -> Cell:
    raw = value.encode("utf-8") if isinstance(value, str) else value
    return Cell(MetrixValueType.STRING, raw)


def node(
    node_id: int,
    label: Optional[str] = "Person",
    props: Optional[str] = None,
    *,
    ok: bool = True,
) -> Cell:
    return Cell(MetrixValueType.NODE, node_id, label=_b(label), props=_b(props), extract_ok=ok)


def edge(
    edge_id: int,
    source: int,
    target: int,
    label: Optional[str] = "KNOWS",
    props: Optional[str] = None,
    *,
    ok: bool = True,
) -> Cell:
    return Cell(
        MetrixValueType.EDGE,
        edge_id,
        label=_b(label),
        source=source,
        target=target,
        props=_b(props),
        extract_ok=ok,
    )


def raw_tag(tag: int) -> Cell:
    return Cell(tag)


class FakeResult:
    """Scripted outcome of one query."""

    def __init__(
        self,
        columns: Sequence[Optional[str]] = (),
        rows: Sequence[Sequence[Cell]] = (),
        *,
        success: bool = True,
        error: Optional[str] = None,
    ) -> None:
        self.columns = [_b(name) for name in columns]
        self.rows = [list(row) for row in rows]
        self.success = success
        self.error = _b(error)

    @classmethod
    def failed(cls, error: Optional[str]) -> "FakeResult":
        return cls(success=False, error=error)


class _CursorState:
    def __init__(self, result: FakeResult) -> None:
        self.result = result
        self.pos = -1

    def cell(self, col: int) -> Cell:
        return self.result.rows[self.pos][col]


class FakeNative:
    """Implements the NativeLibrary method set and tracks every acquisition.

    Queries not scripted with ``script`` fail at the logic level with
    ``Syntax error: <query>``. Scripting ``None`` makes execute return NULL.
    """

    def __init__(self, existing: Sequence[str] = ()) -> None:
        self.existing = set(existing)
        self.last_error_text: Optional[bytes] = None
        self.fail_open = False
        self.responses: Dict[str, Optional[FakeResult]] = {}
        self.opened: List[int] = []
        self.closed: List[int] = []
        self.cursors_opened: List[int] = []
        self.cursors_closed: List[int] = []
        self.open_calls = 0
        self.execute_calls = 0
        self.executed: List[str] = []
        self.execute_delay = 0.0
        self._active_executes = 0
        self.max_concurrent_executes = 0
        self._next_id = 100
        self._db_paths: Dict[int, str] = {}
        self._cursors: Dict[int, _CursorState] = {}
        self._lock = threading.Lock()

    # -- scripting -----------------------------------------------------

    def script(self, query: str, result: Optional[FakeResult]) -> None:
        self.responses[query] = result

    def set_last_error(self, text: Union[str, bytes, None]) -> None:
        self.last_error_text = text.encode("utf-8") if isinstance(text, str) else text

    @property
    def live_handles(self) -> List[int]:
        return [h for h in self.opened if h not in self.closed]

    @property
    def live_cursors(self) -> List[int]:
        return [c for c in self.cursors_opened if c not in self.cursors_closed]

    def _new_id(self) -> int:
        with self._lock:
            self._next_id += 1
            return self._next_id

    # -- database lifecycle --------------------------------------------

    def open(self, path: bytes) -> Optional[int]:
        self.open_calls += 1
        if self.fail_open:
            return None
        self.existing.add(path.decode("utf-8"))
        return self._register(path)

    def open_if_exists(self, path: bytes) -> Optional[int]:
        self.open_calls += 1
        if self.fail_open or path.decode("utf-8") not in self.existing:
            return None
        return self._register(path)

    def _register(self, path: bytes) -> int:
        handle = self._new_id()
        self.opened.append(handle)
        self._db_paths[handle] = path.decode("utf-8")
        return handle

    def close(self, handle: int) -> None:
        self.closed.append(handle)

    def last_error(self) -> Optional[bytes]:
        return self.last_error_text

    # -- execution -----------------------------------------------------

    def execute(self, handle: int, query: bytes) -> Optional[int]:
        assert handle in self.live_handles, "execute on a released handle"
        with self._lock:
            self.execute_calls += 1
            self._active_executes += 1
            self.max_concurrent_executes = max(self.max_concurrent_executes, self._active_executes)
        try:
            if self.execute_delay:
                time.sleep(self.execute_delay)
            text = query.decode("utf-8")
            self.executed.append(text)
            if text in self.responses:
                result = self.responses[text]
            else:
                result = FakeResult.failed(f"Syntax error: {text}")
            if result is None:
                return None
            res = self._new_id()
            self._cursors[res] = _CursorState(result)
            self.cursors_opened.append(res)
            return res
        finally:
            with self._lock:
                self._active_executes -= 1

    def result_is_success(self, res: int) -> bool:
        return self._cursors[res].result.success

    def result_get_error(self, res: int) -> Optional[bytes]:
        return self._cursors[res].result.error

    def result_close(self, res: int) -> None:
        self.cursors_closed.append(res)

    def result_column_count(self, res: int) -> int:
        return len(self._cursors[res].result.columns)

    def result_column_name(self, res: int, col: int) -> Optional[bytes]:
        return self._cursors[res].result.columns[col]

    def result_next(self, res: int) -> bool:
        state = self._cursors[res]
        state.pos += 1
        return state.pos < len(state.result.rows)

    def result_get_type(self, res: int, col: int) -> int:
        return int(self._cursors[res].cell(col).tag)

    def result_get_string(self, res: int, col: int) -> Optional[bytes]:
        return self._cursors[res].cell(col).value  # type: ignore[return-value]

    def result_get_int(self, res: int, col: int) -> int:
        return int(self._cursors[res].cell(col).value)  # type: ignore[arg-type]

    def result_get_double(self, res: int, col: int) -> float:
        return float(self._cursors[res].cell(col).value)  # type: ignore[arg-type]

    def result_get_bool(self, res: int, col: int) -> bool:
        return bool(self._cursors[res].cell(col).value)

    def result_get_node(self, res: int, col: int) -> Optional[MetrixNode]:
        cell = self._cursors[res].cell(col)
        if not cell.extract_ok:
            return None
        return MetrixNode(int(cell.value), cell.label)  # type: ignore[arg-type]

    def result_get_edge(self, res: int, col: int) -> Optional[MetrixEdge]:
        cell = self._cursors[res].cell(col)
        if not cell.extract_ok:
            return None
        return MetrixEdge(int(cell.value), cell.source, cell.target, cell.label)  # type: ignore[arg-type]

    def result_get_props_json(self, res: int, col: int) -> Optional[bytes]:
        return self._cursors[res].cell(col).props
