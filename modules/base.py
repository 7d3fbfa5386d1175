"""Base classes for domain modules."""

from __future__ import annotations

from typing import Any, Dict, Optional

from core.core import CommandHandler, CommandResult, Core


class BaseModule:
    """Default module: lifecycle hooks plus commands namespaced by prefix.

    Subclasses return short command names from `build_command_map`; they are
    exposed on the core as ``"<command_prefix>.<name>"``.
    """

    name = "base"
    command_prefix: Optional[str] = None

    def __init__(self) -> None:
        self.core: Optional[Core] = None
        self._command_map: Dict[str, CommandHandler] = {}

    # Lifecycle -----------------------------------------------------------
    def attach(self, core: Core) -> None:
        self.core = core
        self._command_map = {}
        for command, handler in (self.build_command_map() or {}).items():
            self.register_command(command, handler)

    def start(self) -> None:  # pragma: no cover - default no-op
        pass

    def stop(self) -> None:  # pragma: no cover - default no-op
        pass

    # Command registration ------------------------------------------------
    def qualify(self, command: str) -> str:
        prefix = self.command_prefix or self.name
        return f"{prefix}.{command}"

    def register_command(self, name: str, handler: CommandHandler) -> None:
        qualified = self.qualify(name)
        if qualified in self._command_map:
            raise ValueError(f"Command '{qualified}' already registered in module '{self.name}'")
        self._command_map[qualified] = handler

    def build_command_map(self) -> Dict[str, CommandHandler]:
        """Modules override to declare short command names -> handlers."""
        return {}

    def get_command_map(self) -> Dict[str, CommandHandler]:
        return dict(self._command_map)

    # Utilities -----------------------------------------------------------
    def dispatch(self, command: str, payload: Optional[Dict[str, Any]] = None) -> CommandResult:
        if self.core is None:
            raise RuntimeError("Module is not attached to a core")
        return self.core.dispatch(command, payload or {})

    def publish(self, event_type: str, payload: Dict[str, Any]) -> None:
        """Broadcast on the core bus; skipped while detached."""
        if self.core is None:
            return
        self.core.broadcast(event_type, payload)
