#!/usr/bin/env python3
"""In-process proxy for the touch panel's boolean, analog and serial joins."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from core.events import EventBus

logger = logging.getLogger("cwspanel.panel")

USHORT_MAX = 65535
SIG_CHANGE_EVENT = "sig_change"


class SigType(str, Enum):
    BOOL = "bool"
    USHORT = "ushort"
    STRING = "string"


@dataclass(frozen=True)
class SigChange:
    """A signal change delivered by the panel side (a press, a slider move...)."""

    sig_type: SigType
    join: int
    value: Any


SigCallback = Callable[[SigChange], None]


def to_percentage(value: int) -> int:
    """Scale a 16-bit analog value to 0-100, truncating."""
    return int(value) * 100 // USHORT_MAX


def _coerce_ushort(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Analog join value must be an integer, got {value!r}")
    if value < 0 or value > USHORT_MAX:
        raise ValueError(f"Analog join value {value} outside 0-{USHORT_MAX}")
    return value


_DEFAULTS = {SigType.BOOL: False, SigType.USHORT: 0, SigType.STRING: ""}


class PanelState:
    """Owns the join feedback values and fans out panel-side signal changes.

    Reads and writes are guarded by an internal lock so that request threads
    and signal-change callbacks can share one instance.
    """

    def __init__(self, *, event_bus: Optional[EventBus] = None) -> None:
        self._lock = threading.RLock()
        self._slots: Dict[SigType, Dict[int, Any]] = {sig_type: {} for sig_type in SigType}
        self._bus = event_bus or EventBus()
        self._callbacks: Dict[SigCallback, Callable[[str, Any], None]] = {}

    # Feedback joins ------------------------------------------------------
    def _get(self, sig_type: SigType, join: int):
        with self._lock:
            return self._slots[sig_type].get(int(join), _DEFAULTS[sig_type])

    def _set(self, sig_type: SigType, join: int, value) -> None:
        with self._lock:
            self._slots[sig_type][int(join)] = value
        logger.debug({"evt": "join_set", "type": sig_type.value, "join": join, "value": value})

    def get_boolean(self, join: int) -> bool:
        return self._get(SigType.BOOL, join)

    def set_boolean(self, join: int, value: bool) -> None:
        self._set(SigType.BOOL, join, bool(value))

    def get_ushort(self, join: int) -> int:
        return self._get(SigType.USHORT, join)

    def set_ushort(self, join: int, value: int) -> None:
        self._set(SigType.USHORT, join, _coerce_ushort(value))

    def get_string(self, join: int) -> str:
        return self._get(SigType.STRING, join)

    def set_string(self, join: int, value: str) -> None:
        self._set(SigType.STRING, join, "" if value is None else str(value))

    def snapshot(self) -> Dict[str, Dict[int, Any]]:
        with self._lock:
            return {sig_type.value: dict(values) for sig_type, values in self._slots.items()}

    # Panel-side input ----------------------------------------------------
    def subscribe(self, callback: SigCallback) -> None:
        """Register a callback invoked with every `SigChange`."""

        def _relay(_event_type: str, change: SigChange) -> None:
            callback(change)

        with self._lock:
            if callback in self._callbacks:
                return
            self._callbacks[callback] = _relay
        self._bus.subscribe(SIG_CHANGE_EVENT, _relay)

    def unsubscribe(self, callback: SigCallback) -> None:
        with self._lock:
            relay = self._callbacks.pop(callback, None)
        if relay is not None:
            self._bus.unsubscribe(SIG_CHANGE_EVENT, relay)

    def sig_change(self, sig_type, join: int, value) -> SigChange:
        """Deliver a signal change coming from the panel to all subscribers."""
        sig_type = SigType(sig_type)
        if sig_type is SigType.USHORT:
            value = _coerce_ushort(value)
        elif sig_type is SigType.BOOL:
            value = bool(value)
        change = SigChange(sig_type=sig_type, join=int(join), value=value)
        logger.debug({"evt": "sig_change", "type": sig_type.value, "join": change.join, "value": value})
        self._bus.publish(SIG_CHANGE_EVENT, change)
        return change


__all__ = [
    "PanelState",
    "SigChange",
    "SigType",
    "USHORT_MAX",
    "to_percentage",
]
