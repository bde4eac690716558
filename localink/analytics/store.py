from __future__ import annotations

import threading
import time
from typing import Any


class EventLog:
    """Append-only in-memory event log."""

    def __init__(self) -> None:
        self._events: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def record_event(self, event_type: str, data: dict[str, Any]) -> None:
        with self._lock:
            self._events.append({
                "type": event_type,
                "timestamp": time.time(),
                **data,
            })

    def get_events(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._events)

    def clear_events(self) -> None:
        with self._lock:
            self._events.clear()
