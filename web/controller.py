#!/usr/bin/env python3
"""CWS controller: owns the HTTP listener and answers the panel's web UI."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from core.core import CommandHandler
from modules.base import BaseModule
from modules.log_store import LogStore
from modules.panel import PanelState, to_percentage

from .app import HttpListener, create_app
from .context import HTML_CONTENT_TYPE, JSON_CONTENT_TYPE, TEXT_CONTENT_TYPE, RequestContext
from .errors import AlreadyRunningError, DispatchError, LifecycleError, NotRunningError
from .payloads import ApiResponse, ButtonStatus, InterlockResponse, Request, SliderRequest
from .routes import find_route, help_lines

logger = logging.getLogger("cwspanel")

CWS_PATH = os.getenv("CWS_PATH", "")
CWS_HOST = os.getenv("CWS_HOST", "0.0.0.0")
CWS_PORT = int(os.getenv("CWS_PORT", "5000"))

HELLO_TEXT_JOIN = 11
BUTTON_JOIN = 21
INTERLOCK_JOINS = (22, 23, 24)
SLIDER_JOIN = 31


class ServerState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass
class HandlerResult:
    """Outcome of one dispatch: whether a handler ran, and its failure if any."""

    handled: bool
    error: Optional[DispatchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


Handler = Callable[[RequestContext], None]


class Controller(BaseModule):
    """Routes CWS requests to panel joins and the log file.

    Starting and stopping the listener is serialized by a lifecycle lock;
    request handling never takes that lock.
    """

    name = "cws"

    def __init__(
        self,
        panel: PanelState,
        cws_path: str = CWS_PATH,
        *,
        log_store: Optional[LogStore] = None,
        host: str = CWS_HOST,
        port: int = CWS_PORT,
        listener_factory: Callable[..., Any] = HttpListener,
    ) -> None:
        super().__init__()
        self.panel = panel
        self.cws_path = cws_path or ""
        self.log_store = log_store or LogStore()
        self.host = host
        self.port = port
        self._listener_factory = listener_factory
        self._lock = threading.Lock()
        self._listener = None
        self._state = ServerState.STOPPED
        self.last_error: Optional[LifecycleError] = None
        self._handlers: Dict[Tuple[str, str], Handler] = self.build_handler_table()

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def listener(self):
        return self._listener

    # Module lifecycle ----------------------------------------------------
    def start(self) -> None:
        self.start_server()

    def stop(self) -> None:
        self._stop(report_idle=False)

    def build_command_map(self) -> Dict[str, CommandHandler]:
        return {
            "start": lambda payload=None: self.start_server(),
            "stop": lambda payload=None: self.stop_server(),
            "status": lambda payload=None: self.status(),
        }

    def status(self) -> Dict[str, Any]:
        listener = self._listener
        return {
            "state": self._state.value,
            "path": self.cws_path,
            "host": self.host,
            "port": getattr(listener, "bound_port", self.port) if listener else self.port,
        }

    # Server lifecycle ----------------------------------------------------
    def start_server(self) -> bool:
        logger.info({"evt": "cws_start", "path": self.cws_path})
        with self._lock:
            try:
                if self._state is ServerState.RUNNING:
                    raise AlreadyRunningError()
                app = create_app(self.cws_path, self.on_request)
                listener = self._listener_factory(app, self.host, self.port)
                listener.register()
            except Exception as exc:
                self.last_error = exc if isinstance(exc, LifecycleError) else LifecycleError(str(exc))
                logger.error({"evt": "cws_start_error", "error": str(exc)})
                return False
            self._listener = listener
            self._state = ServerState.RUNNING
            self.last_error = None
        logger.info({"evt": "cws_started", "path": self.cws_path})
        self.publish("cws_server", self.status())
        return True

    def stop_server(self) -> bool:
        return self._stop(report_idle=True)

    def _stop(self, *, report_idle: bool) -> bool:
        logger.info({"evt": "cws_stop"})
        with self._lock:
            if self._state is not ServerState.RUNNING:
                if report_idle:
                    self.last_error = NotRunningError()
                    logger.error({"evt": "cws_stop_error", "error": str(self.last_error)})
                return False
            self._listener.unregister()
            self._listener = None
            self._state = ServerState.STOPPED
            self.last_error = None
        logger.info({"evt": "cws_stopped"})
        self.publish("cws_server", self.status())
        return True

    # Request dispatch ----------------------------------------------------
    def build_handler_table(self) -> Dict[Tuple[str, str], Handler]:
        return {
            ("GET", "HELLOWORLD"): self._get_hello_world,
            ("GET", "INTERLOCKSTATUS"): self._get_interlock_status,
            ("GET", "GETSLIDER"): self._get_slider,
            ("GET", "LOG"): self._get_log,
            ("POST", "HOLAMUNDO"): self._post_hola_mundo,
            ("POST", "POSTSLIDER"): self._post_slider,
        }

    def on_request(self, ctx: RequestContext) -> HandlerResult:
        """Entry point for every request the listener receives."""
        logger.debug({"evt": "cws_request", "method": ctx.method, "route": ctx.route_name, "path": ctx.path})
        result = self._dispatch(ctx)
        if result.error is not None:
            logger.error({"evt": "cws_request_error", "route": ctx.route_name, "error": result.error.message})
            ctx.response.clear()
            ctx.response.status_code = 401
            ctx.response.content_type = JSON_CONTENT_TYPE
            ctx.response.write(ApiResponse(status="Error", message=result.error.as_lines()).to_json())
        return result

    def _dispatch(self, ctx: RequestContext) -> HandlerResult:
        try:
            if ctx.route_name is None:
                ctx.response.status_code = 200
                ctx.response.content_type = HTML_CONTENT_TYPE
                ctx.response.write(ApiResponse(status="Error", message=help_lines(self.cws_path)).to_json())
                return HandlerResult(handled=False)

            ctx.response.status_code = 200
            ctx.response.content_type = JSON_CONTENT_TYPE
            route = find_route(ctx.route_name)
            handler = self._handlers.get((ctx.method.upper(), route.key)) if route else None
            if handler is None:
                logger.debug({"evt": "cws_unhandled", "method": ctx.method, "route": ctx.route_name})
                return HandlerResult(handled=False)
            handler(ctx)
            return HandlerResult(handled=True)
        except Exception as exc:
            return HandlerResult(handled=True, error=DispatchError(exc))

    # Handlers ------------------------------------------------------------
    def _get_hello_world(self, ctx: RequestContext) -> None:
        data = ctx.values["data"]
        self.panel.set_string(HELLO_TEXT_JOIN, data)
        self.log_store.append(data)
        ctx.response.content_type = TEXT_CONTENT_TYPE
        ctx.response.write("Hello Atlanta!")

    def _get_interlock_status(self, ctx: RequestContext) -> None:
        response = InterlockResponse(
            status=[ButtonStatus(button=self.panel.get_boolean(join)) for join in INTERLOCK_JOINS]
        )
        body = response.to_json()
        logger.info({"evt": "interlock_status", "body": body})
        ctx.response.write(body)

    def _get_slider(self, ctx: RequestContext) -> None:
        percentage = to_percentage(self.panel.get_ushort(SLIDER_JOIN))
        # Not valid JSON: the percent sign is part of the wire format.
        ctx.response.write(f'{{"value": {percentage}%}}')

    def _get_log(self, ctx: RequestContext) -> None:
        contents = self.log_store.read_all()
        ctx.response.write(f'{{"log:": "{contents}"}}')

    def _post_hola_mundo(self, ctx: RequestContext) -> None:
        payload = Request.from_json(ctx.read_body())
        self.log_store.append(payload.text)
        ctx.response.write(ButtonStatus(button=self.panel.get_boolean(BUTTON_JOIN)).to_json())

    def _post_slider(self, ctx: RequestContext) -> None:
        payload = SliderRequest.from_json(ctx.read_body())
        self.log_store.append(payload.value)
        self.panel.set_ushort(SLIDER_JOIN, to_percentage(payload.value))
        ctx.response.write(f'{{"statusvalue": "{payload.value}"}}')


__all__ = ["Controller", "HandlerResult", "ServerState"]
