"""Core package exposing the central coordinator and the event bus."""

from .core import CommandResult, Core
from .events import EventBus, event_bus

__all__ = ["CommandResult", "Core", "EventBus", "event_bus"]
