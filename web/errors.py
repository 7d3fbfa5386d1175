"""Exceptions raised by the CWS controller."""

from __future__ import annotations

import traceback


class LifecycleError(RuntimeError):
    """Invalid server start/stop transition. Logged, never fatal."""


class AlreadyRunningError(LifecycleError):
    def __init__(self, message: str = "CWS API Server is already running") -> None:
        super().__init__(message)


class NotRunningError(LifecycleError):
    def __init__(self, message: str = "CWS API Server was not running") -> None:
        super().__init__(message)


class DispatchError(Exception):
    """Wraps any failure raised while handling a routed request."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(str(cause))
        self.cause = cause
        self.message = str(cause)
        self.trace = "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))

    def as_lines(self) -> list[str]:
        return [f"Message: {self.message}", f"Trace: {self.trace}"]


__all__ = ["AlreadyRunningError", "DispatchError", "LifecycleError", "NotRunningError"]
