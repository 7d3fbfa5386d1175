#!/usr/bin/env python3
"""Panel-side reactions to button presses and slider moves."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from core.core import CommandHandler

from .base import BaseModule
from .panel import PanelState, SigChange, SigType, to_percentage

logger = logging.getLogger("cwspanel.panel_logic")

HELLO_BUTTON = 12
HELLO_TEXT = 11
TOGGLE_BUTTON = 21
GREETING_TEXT = 21
INTERLOCK_BUTTONS = (22, 23, 24)
INTERLOCK_CLEAR = 25
ONLINE_FEEDBACK = 11
SLIDER = 31
SLIDER_PERCENT = 32
SLIDER_LEVEL = 33

GREETINGS = {
    22: "Hello World!",
    23: "Hallo Wereld!",
    24: "Hola Mundo!",
}


def slider_level(percentage: int) -> int:
    """Bucket a 0-100 percentage into the four-step bar graph value."""
    if percentage <= 0:
        return 0
    if percentage <= 33:
        return 1
    if percentage <= 66:
        return 2
    return 3


class PanelLogicModule(BaseModule):
    """Subscribes to a `PanelState` and drives its feedback joins."""

    name = "panel_logic"
    command_prefix = "panel"

    def __init__(self, panel: PanelState) -> None:
        super().__init__()
        self.panel = panel

    def start(self) -> None:
        self.panel.subscribe(self.on_sig_change)

    def stop(self) -> None:
        self.panel.unsubscribe(self.on_sig_change)

    def build_command_map(self) -> Dict[str, CommandHandler]:
        return {
            "sig": self._cmd_sig,
            "snapshot": self._cmd_snapshot,
        }

    def _cmd_sig(self, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = payload or {}
        change = self.panel.sig_change(payload["type"], payload["join"], payload.get("value"))
        return {"type": change.sig_type.value, "join": change.join, "value": change.value}

    def _cmd_snapshot(self, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Dict[int, Any]]:
        return self.panel.snapshot()

    def set_online(self, online: bool) -> None:
        self.panel.set_boolean(ONLINE_FEEDBACK, online)
        logger.info({"evt": "panel_online", "online": bool(online)})

    # Signal handling -----------------------------------------------------
    def on_sig_change(self, change: SigChange) -> None:
        if change.sig_type is SigType.BOOL:
            self._on_bool(change.join, change.value)
        elif change.sig_type is SigType.USHORT:
            self._on_ushort(change.join, change.value)

    def _on_bool(self, join: int, pressed: bool) -> None:
        panel = self.panel
        if join == HELLO_BUTTON:
            panel.set_string(HELLO_TEXT, "Hello World!" if pressed else "")
            return
        if not pressed:
            return
        if join == TOGGLE_BUTTON:
            state = not panel.get_boolean(TOGGLE_BUTTON)
            panel.set_boolean(TOGGLE_BUTTON, state)
            panel.set_string(GREETING_TEXT, "Hello World!" if state else "")
        elif join in INTERLOCK_BUTTONS:
            for button in INTERLOCK_BUTTONS:
                panel.set_boolean(button, button == join)
            panel.set_string(GREETING_TEXT, GREETINGS[join])
        elif join == INTERLOCK_CLEAR:
            for button in INTERLOCK_BUTTONS:
                panel.set_boolean(button, False)
            panel.set_string(GREETING_TEXT, "")

    def _on_ushort(self, join: int, value: int) -> None:
        if join != SLIDER:
            return
        percentage = to_percentage(value)
        self.panel.set_ushort(SLIDER_PERCENT, percentage)
        self.panel.set_ushort(SLIDER, value)
        self.panel.set_ushort(SLIDER_LEVEL, slider_level(percentage))
        self.publish("slider", {"value": value, "percentage": percentage})
