"""Central coordinator that wires the panel logic and the CWS server together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol

from .events import EventBus, event_bus as global_event_bus

logger = logging.getLogger("cwspanel.core")


class CommandHandler(Protocol):
    """Typed callable for command handlers."""

    def __call__(self, payload: Optional[Dict[str, Any]] = None) -> Any: ...


class Module(Protocol):
    """What the core expects from a module."""

    name: str

    def attach(self, core: "Core") -> None: ...

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def get_command_map(self) -> Dict[str, CommandHandler]: ...


@dataclass
class CommandResult:
    """Envelope returned by `Core.dispatch`; `handled` is False for unknown commands."""

    command: str
    handled: bool
    payload: Optional[Any] = None


class Core:
    """Owns the started modules and the command table they contribute.

    Modules start in registration order and stop in reverse order.
    """

    def __init__(
        self,
        modules: Optional[Iterable[Module]] = None,
        *,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.event_bus = event_bus or global_event_bus
        self._modules: Dict[str, Module] = {}
        self._commands: Dict[str, CommandHandler] = {}
        for module in modules or ():
            self.register_module(module)

    @property
    def modules(self) -> Dict[str, Module]:
        return dict(self._modules)

    @property
    def commands(self) -> List[str]:
        return sorted(self._commands)

    def register_module(self, module: Module) -> None:
        if module.name in self._modules:
            raise ValueError(f"Module '{module.name}' already registered")
        module.attach(self)
        command_map = module.get_command_map()
        clashes = sorted(set(command_map) & set(self._commands))
        if clashes:
            raise ValueError(f"Commands already bound: {', '.join(clashes)}")
        self._commands.update(command_map)
        self._modules[module.name] = module
        logger.info({"evt": "module_start", "module": module.name, "commands": sorted(command_map)})
        module.start()

    def unregister_module(self, name: str) -> None:
        module = self._modules.pop(name, None)
        if module is None:
            return
        for command in module.get_command_map():
            self._commands.pop(command, None)
        logger.info({"evt": "module_stop", "module": name})
        module.stop()

    def shutdown(self) -> None:
        for name in reversed(list(self._modules)):
            self.unregister_module(name)

    def dispatch(self, command: str, payload: Optional[Dict[str, Any]] = None) -> CommandResult:
        handler = self._commands.get(command)
        if handler is None:
            logger.debug({"evt": "command_unknown", "command": command})
            return CommandResult(command=command, handled=False)
        return CommandResult(command=command, handled=True, payload=handler(payload or {}))

    def broadcast(self, event_type: str, payload: Dict[str, Any]) -> None:
        self.event_bus.publish(event_type, payload)


__all__ = ["Core", "CommandResult", "Module"]
