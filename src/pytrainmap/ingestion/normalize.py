"""Normalization helpers.

Centralizes defensive parsing of loosely-typed feed values.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any

_LOCAL_DATETIME_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})[ T](\d{2}):(\d{2})(?::(\d{2}))?")
_ISO_DATE_ONLY_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def is_truthy(value: Any) -> bool:
    """Truthiness as the feed producers understand it.

    ``0``, ``""``, ``None`` and ``False`` are falsy; empty containers are
    truthy, NaN is falsy.
    """

    if value is None or value is False:
        return False
    if isinstance(value, (int, float)):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value != ""
    return True


def get_field(record: Any, key: str | int) -> Any:
    """Read *key* from a mapping, or an index from a list-shaped record."""
    if isinstance(record, Mapping):
        return record.get(key) if isinstance(key, str) else None
    if isinstance(record, list) and isinstance(key, int):
        return record[key] if -len(record) <= key < len(record) else None
    return None


def first_truthy(record: Any, keys: Iterable[str | int], default: Any = None) -> Any:
    """Return the first truthy value among *keys*, else *default*."""
    for key in keys:
        value = get_field(record, key)
        if is_truthy(value):
            return value
    return default


def coord_pair(value: Any) -> tuple[float, float] | None:
    """Coerce a ``[lat, lon]`` list into a numeric pair, or ``None``."""
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        return None
    lat = safe_float(value[0])
    lon = safe_float(value[1])
    if lat is None or lon is None:
        return None
    return lat, lon


def position_timestamp_ms(record: Any, observed_at_ms: int) -> int:
    """Timestamp of a position record in epoch milliseconds.

    Compatibility rule kept from the feed producers: a timestamp carried
    in ``ts``/``timestamp``/``time`` is in **seconds**, while the observation
    time used when none is carried is already in milliseconds.
    """

    explicit = first_truthy(record, ("ts", "timestamp", "time"))
    if explicit is None:
        return observed_at_ms
    seconds = safe_float(explicit)
    if seconds is None:
        return observed_at_ms
    return int(round(seconds * 1000))


def _local_epoch_ms(dt: datetime) -> int:
    # Naive datetimes are interpreted in the local zone by .timestamp().
    return int(round(dt.timestamp() * 1000))


def parse_departure(value: Any) -> int | None:
    """Parse a schedule departure/arrival into epoch milliseconds.

    ``YYYY-MM-DD[ T]HH:MM[:SS]`` is matched first and read as **local**
    wall-clock time.  Anything else goes through ISO-8601 and RFC 2822
    parsing; a bare ``YYYY-MM-DD`` is UTC midnight, other values without
    an offset are local.  Returns ``None`` when nothing matches.
    """

    if not is_truthy(value):
        return None
    text = str(value).strip()

    match = _LOCAL_DATETIME_RE.search(text)
    if match:
        year, month, day, hour, minute, second = match.groups()
        try:
            return _local_epoch_ms(
                datetime(int(year), int(month), int(day), int(hour), int(minute), int(second or 0))
            )
        except (ValueError, OverflowError):
            pass

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    else:
        # Bare ISO dates are UTC midnight, ISO date-times without offset are local.
        if _ISO_DATE_ONLY_RE.fullmatch(text):
            parsed = parsed.replace(tzinfo=UTC)
        return _local_epoch_ms(parsed)
    try:
        return _local_epoch_ms(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError):
        return None
