"""The fixed CWS route table and helpers to mount it on a Flask app."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Tuple

# Verbs every route accepts at the listener; dispatch decides what is handled.
LISTENER_METHODS: Tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE")

_PATH_VARIABLE = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass(frozen=True)
class Route:
    name: str
    pattern: str
    methods: FrozenSet[str]

    @property
    def key(self) -> str:
        """Case-insensitive identity of the route."""
        return self.name.upper()

    @property
    def variables(self) -> List[str]:
        return _PATH_VARIABLE.findall(self.pattern)

    def rule(self, base_path: str = "") -> str:
        """Werkzeug rule string, e.g. ``/cws/helloworld/<data>``."""
        return join_path(base_path, _PATH_VARIABLE.sub(r"<\1>", self.pattern))


def _route(name: str, pattern: str, *methods: str) -> Route:
    route = Route(name=name, pattern=pattern, methods=frozenset(methods))
    if len(route.variables) > 1:
        raise ValueError(f"Route '{name}' may bind at most one path variable")
    return route


ROUTES: Tuple[Route, ...] = (
    _route("HELLOWORLD", "helloworld/{data}", "GET"),
    _route("holamundo", "holamundo", "POST"),
    _route("interlockstatus", "interlockstatus", "GET"),
    _route("getslider", "getslider", "GET"),
    _route("postslider", "postslider", "POST"),
    _route("log", "log", "GET"),
)


def join_path(base_path: str, path: str) -> str:
    parts = [part.strip("/") for part in (base_path or "", path) if part and part.strip("/")]
    return "/" + "/".join(parts)


def find_route(name: Optional[str], routes: Iterable[Route] = ROUTES) -> Optional[Route]:
    if not name:
        return None
    key = name.upper()
    for route in routes:
        if route.key == key:
            return route
    return None


def help_lines(base_path: str = "", routes: Iterable[Route] = ROUTES) -> List[str]:
    """One line per route and method, used as the fallback response body."""
    lines = []
    for route in routes:
        for method in sorted(route.methods):
            lines.append(f"[{method}] {join_path(base_path, route.pattern)}")
    return lines


__all__ = ["LISTENER_METHODS", "ROUTES", "Route", "find_route", "help_lines", "join_path"]
