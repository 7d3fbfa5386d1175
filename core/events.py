#!/usr/bin/env python3
"""Lightweight callback broadcaster shared by the panel proxy and the core."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List

logger = logging.getLogger("cwspanel.events")

Listener = Callable[[str, Any], None]


class EventBus:
    """Publish/subscribe helper with typed callbacks per event type."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: str, callback: Listener) -> None:
        with self._lock:
            listeners = self._listeners.setdefault(event_type, [])
            if callback not in listeners:
                listeners.append(callback)

    def unsubscribe(self, event_type: str, callback: Listener) -> None:
        with self._lock:
            listeners = self._listeners.get(event_type)
            if listeners and callback in listeners:
                listeners.remove(callback)

    def listener_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._listeners.get(event_type, ()))

    def publish(self, event_type: str, payload: Any) -> None:
        with self._lock:
            listeners = list(self._listeners.get(event_type, ()))
        for listener in listeners:
            try:
                listener(event_type, payload)
            except Exception as exc:
                # A failing subscriber must not starve the others.
                logger.error({"evt": "listener_error", "type": event_type, "error": str(exc)})


event_bus = EventBus()
