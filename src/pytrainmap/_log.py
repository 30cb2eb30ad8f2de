"""Helpers for debug logging of feed traffic.

Feed messages can be large (full station catalogs, every train's
schedule).  :func:`truncate_for_log` shrinks them before they reach DEBUG
logs, and :class:`DebugBuffer` keeps the most recent records in memory for
inspection from a running process.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Mapping, Sequence
from typing import Any


def truncate_for_log(value: Any, *, max_string: int = 512, max_items: int = 20, _depth: int = 0) -> Any:
    """Return a shortened copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        return {
            str(k): truncate_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1)
            for k, v in value.items()
        }

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        items = [
            truncate_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1)
            for v in value[:max_items]
        ]
        if len(value) > max_items:
            items.append(f"<+{len(value) - max_items} more>")
        return items

    return repr(value)


class DebugBuffer(logging.Handler):
    """Logging handler keeping the last *capacity* records as ``(created_ms, message)``."""

    def __init__(self, capacity: int = 100, level: int = logging.DEBUG) -> None:
        super().__init__(level)
        self._entries: deque[tuple[int, str]] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._entries.append((int(record.created * 1000), self.format(record)))
        except Exception:
            self.handleError(record)

    @property
    def entries(self) -> list[tuple[int, str]]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
