"""Named field-extraction rules.

Every field the feed may spell several ways is described by an ordered
tuple of :class:`ExtractionRule`.  A rule is a pure function of the raw
record returning the value or ``None``; :func:`extract` returns the first
non-``None`` result.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from pytrainmap.ingestion.normalize import coord_pair, get_field


@dataclass(frozen=True, slots=True)
class ExtractionRule:
    name: str
    read: Callable[[Any], Any]

    def __call__(self, record: Any) -> Any:
        return self.read(record)


def key(name: str) -> ExtractionRule:
    return ExtractionRule(name, lambda record: get_field(record, name))


def index(position: int) -> ExtractionRule:
    """Positional fallback for list-shaped records."""
    return ExtractionRule(
        f"[{position}]",
        lambda record: get_field(record, position) if isinstance(record, list) else None,
    )


def nested(*path: str) -> ExtractionRule:
    def read(record: Any) -> Any:
        value = record
        for part in path:
            value = get_field(value, part)
            if value is None:
                return None
        return value

    return ExtractionRule(".".join(path), read)


def coord(field: str, position: int) -> ExtractionRule:
    def read(record: Any) -> Any:
        pair = get_field(record, field)
        if isinstance(pair, list) and len(pair) > position:
            return pair[position]
        return None

    return ExtractionRule(f"{field}[{position}]", read)


def extract(record: Any, rules: Sequence[ExtractionRule]) -> Any:
    for rule in rules:
        value = rule(record)
        if value is not None:
            return value
    return None


# -- station catalog ---------------------------------------------------------

STATION_ID_RULES = tuple(key(k) for k in ("id", "pvID", "gps_id", "_id", "i", "stopIndex", "routes_id"))
STATION_NAME_RULES = tuple(key(k) for k in ("title", "name", "adress", "address"))
STATION_LAT_RULES = (coord("coords", 0), coord("animatedCoord", 0))
STATION_LON_RULES = (coord("coords", 1), coord("animatedCoord", 1))

# -- schedules ---------------------------------------------------------------

SCHEDULE_VEHICLE_ID_RULES = (
    nested("returnValue", "train"),
    key("train"),
    key("trainId"),
    key("id"),
    key("tid"),
)
# Stop arrays are picked by truthiness, see messages._first_truthy_rule.
SCHEDULE_STOPS_RULES = (
    nested("returnValue", "stopObjArray"),
    key("stopObjArray"),
    key("stops"),
    key("data"),
)


def _stringified_id(record: Any) -> Any:
    fallback = extract(record, (key("id"), key("gps_id"), key("routes_id")))
    return "" if fallback is None else str(fallback)


STOP_MATCH_KEY_RULES = (key("pvID"), ExtractionRule("str(id|gps_id|routes_id)", _stringified_id))
STOP_ALTERNATE_ID_RULES = (key("id"), key("_id"), key("pvID"))
STOP_TITLE_RULES = (key("title"), key("name"))
STOP_DEPARTURE_RULES = (key("departure"), key("arrival"))


def _pair_rule(field: str) -> ExtractionRule:
    return ExtractionRule(field, lambda record: coord_pair(get_field(record, field)))


STOP_COORDS_RULES = (_pair_rule("coords"), _pair_rule("animatedCoord"))

# -- positions ---------------------------------------------------------------

POSITION_ID_RULES = tuple(key(k) for k in ("id", "trainId", "tid", "name", "uid"))
POSITION_LAT_RULES = (key("lat"), key("latitude"), key("y"), index(1))
POSITION_LON_RULES = (key("lon"), key("longitude"), key("x"), index(0))
