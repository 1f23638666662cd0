"""In-memory record of executed queries, newest first."""

from __future__ import annotations

import threading
import time
import uuid
from collections import deque
from typing import Deque, List

from typing_extensions import Literal, TypedDict

DEFAULT_HISTORY_LIMIT = 500


class HistoryItem(TypedDict):
    id: str
    query: str
    timestamp: int
    status: Literal["success", "error"]
    duration: int
    result_count: int


class QueryHistory:
    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if not isinstance(limit, int) or limit <= 0:
            raise ValueError("history limit must be a positive integer")
        self._items: Deque[HistoryItem] = deque(maxlen=limit)
        self._lock = threading.Lock()

    def record(
        self,
        query: str,
        status: Literal["success", "error"],
        duration_ms: int,
        result_count: int = 0,
    ) -> HistoryItem:
        item: HistoryItem = {
            "id": uuid.uuid4().hex,
            "query": query,
            "timestamp": int(time.time() * 1000),
            "status": status,
            "duration": int(duration_ms),
            "result_count": int(result_count),
        }
        with self._lock:
            self._items.appendleft(item)
        return item

    def items(self) -> List[HistoryItem]:
        with self._lock:
            return [dict(item) for item in self._items]  # type: ignore[misc]

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
