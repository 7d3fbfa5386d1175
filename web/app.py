#!/usr/bin/env python
"""Flask app and threaded listener that carry CWS requests to the controller."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Iterable, Optional

from flask import Flask, Response, request
from flask_cors import CORS
from werkzeug.exceptions import MethodNotAllowed, NotFound
from werkzeug.serving import make_server

from .context import RequestContext
from .routes import LISTENER_METHODS, ROUTES, Route

logger = logging.getLogger("cwspanel.web")

RequestHandler = Callable[[RequestContext], object]


def _respond(on_request: RequestHandler, route_name: Optional[str], values: Optional[Dict[str, str]] = None) -> Response:
    ctx = RequestContext(
        method=request.method,
        route_name=route_name,
        path=request.path,
        values=dict(values or {}),
        body=request.get_data(),
    )
    on_request(ctx)
    sink = ctx.response
    return Response(sink.body, status=sink.status_code, content_type=sink.content_type)


def create_app(base_path: str, on_request: RequestHandler, routes: Iterable[Route] = ROUTES) -> Flask:
    """Build a Flask app exposing the route table under `base_path`.

    Every request, matched or not, ends up in `on_request` with a fresh
    `RequestContext`; unmatched paths arrive with ``route_name=None``, and
    any verb on a known path arrives with that route's name. Duplicate
    route names or paths raise `ValueError`.
    """
    app = Flask(__name__, static_folder=None)
    CORS(app, supports_credentials=True)

    def routed(**values):
        return _respond(on_request, request.url_rule.endpoint, values)

    seen_keys = set()
    seen_rules = set()
    for route in routes:
        rule = route.rule(base_path)
        if route.key in seen_keys:
            raise ValueError(f"Route name '{route.name}' is already registered")
        if rule in seen_rules:
            raise ValueError(f"Route path '{rule}' is already registered")
        seen_keys.add(route.key)
        seen_rules.add(rule)
        app.add_url_rule(
            rule,
            endpoint=route.name,
            view_func=routed,
            methods=list(LISTENER_METHODS),
        )

    def unmatched(_exc: NotFound):
        return _respond(on_request, None)

    def wrong_method(_exc: MethodNotAllowed):
        adapter = app.url_map.bind_to_environ(request.environ)
        endpoint, values = adapter.match(method=LISTENER_METHODS[0])
        return _respond(on_request, endpoint, values)

    app.register_error_handler(NotFound, unmatched)
    app.register_error_handler(MethodNotAllowed, wrong_method)
    return app


class HttpListener:
    """Serves a WSGI app on a background thread, one thread per request."""

    def __init__(self, app: Flask, host: str, port: int) -> None:
        self.app = app
        self.host = host
        self.port = port
        self._server = None
        self._thread: Optional[threading.Thread] = None

    @property
    def registered(self) -> bool:
        return self._server is not None

    @property
    def bound_port(self) -> Optional[int]:
        if self._server is None:
            return None
        return self._server.server_address[1]

    def register(self) -> None:
        if self._server is not None:
            raise RuntimeError("Listener is already registered")
        self._server = make_server(self.host, self.port, self.app, threaded=True)
        self._thread = threading.Thread(target=self._server.serve_forever, name="cws-listener", daemon=True)
        self._thread.start()
        logger.info({"evt": "listener_registered", "host": self.host, "port": self.bound_port})

    def unregister(self) -> None:
        server, thread = self._server, self._thread
        if server is None:
            return
        self._server = None
        self._thread = None
        server.shutdown()
        server.server_close()
        if thread is not None:
            thread.join(timeout=5)
        logger.info({"evt": "listener_unregistered", "host": self.host, "port": self.port})


__all__ = ["HttpListener", "create_app"]
