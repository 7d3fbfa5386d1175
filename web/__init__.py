"""HTTP surface: route table, payloads, listener and the CWS controller."""

from .controller import Controller, HandlerResult, ServerState

__all__ = ["Controller", "HandlerResult", "ServerState"]
