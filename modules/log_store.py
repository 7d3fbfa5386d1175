#!/usr/bin/env python3
"""Append-only text log kept under the application's User directory."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger("cwspanel.log_store")

APP_ROOT = os.getenv("PANEL_APP_ROOT", os.getcwd())
LOG_FILE = os.path.join(APP_ROOT, "User", "logfile.txt")

PathLike = Union[str, "os.PathLike[str]"]


def write_with_append(data: str, path: PathLike) -> None:
    """Append `data` as one line, creating the file if it doesn't exist."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "a", encoding="utf-8") as handle:
        handle.write(f"{'' if data is None else data}\n")


def read_file(path: PathLike) -> str:
    """Return the whole file, or an empty string when it is missing."""
    target = Path(path)
    if not target.is_file():
        logger.error({"evt": "log_file_missing", "path": str(target)})
        return ""
    with open(target, "r", encoding="utf-8") as handle:
        return handle.read()


class LogStore:
    """Binds the append/read helpers to one log file path."""

    def __init__(self, path: Optional[PathLike] = None) -> None:
        self.path = Path(path or LOG_FILE)

    def append(self, text) -> None:
        logger.info({"evt": "log_append", "path": str(self.path), "text": text})
        write_with_append(text, self.path)

    def read_all(self) -> str:
        return read_file(self.path)


__all__ = ["APP_ROOT", "LOG_FILE", "LogStore", "read_file", "write_with_append"]
