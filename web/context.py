"""Per-request state handed from the listener to the controller."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

JSON_CONTENT_TYPE = "application/json"
HTML_CONTENT_TYPE = "text/html"
TEXT_CONTENT_TYPE = "text/plain"


@dataclass
class ResponseSink:
    status_code: int = 200
    content_type: str = HTML_CONTENT_TYPE
    _chunks: List[str] = field(default_factory=list)

    def write(self, text: str) -> None:
        self._chunks.append(text)

    def clear(self) -> None:
        self._chunks.clear()

    @property
    def body(self) -> str:
        return "".join(self._chunks)


@dataclass
class RequestContext:
    method: str
    route_name: Optional[str] = None
    path: str = "/"
    values: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    response: ResponseSink = field(default_factory=ResponseSink)

    def read_body(self) -> str:
        return self.body.decode("utf-8")


__all__ = [
    "HTML_CONTENT_TYPE",
    "JSON_CONTENT_TYPE",
    "TEXT_CONTENT_TYPE",
    "RequestContext",
    "ResponseSink",
]
