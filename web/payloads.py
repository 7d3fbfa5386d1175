"""Wire payloads exchanged with the panel's companion web UI."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Union

from modules.panel import USHORT_MAX

Body = Union[str, bytes, bytearray]


def _load_object(body: Body) -> Dict[str, Any]:
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8")
    data = json.loads(body)
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def dumps_compact(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"))


@dataclass
class Request:
    text: str = ""

    @classmethod
    def from_json(cls, body: Body) -> "Request":
        text = _load_object(body).get("text")
        return cls(text="" if text is None else str(text))


@dataclass
class SliderRequest:
    value: int = 0

    @classmethod
    def from_json(cls, body: Body) -> "SliderRequest":
        value = _load_object(body).get("value", 0)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Slider value must be an integer, got {value!r}")
        if not 0 <= value <= USHORT_MAX:
            raise ValueError(f"Slider value {value} outside 0-{USHORT_MAX}")
        return cls(value=value)


@dataclass
class ButtonStatus:
    button: bool

    def to_json(self) -> str:
        return dumps_compact(asdict(self))


@dataclass
class InterlockResponse:
    status: List[ButtonStatus] = field(default_factory=list)

    def to_json(self) -> str:
        return dumps_compact(asdict(self))


@dataclass
class ApiResponse:
    """Envelope used for the help fallback and for handler errors."""

    status: str
    message: List[str] = field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)


__all__ = [
    "ApiResponse",
    "ButtonStatus",
    "InterlockResponse",
    "Request",
    "SliderRequest",
    "dumps_compact",
]
