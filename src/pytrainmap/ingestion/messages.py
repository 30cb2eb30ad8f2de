"""Message normalizer.

Classifies a decoded feed message and extracts canonical records:

- ``active-stops`` messages carry the full station catalog,
- ``back-end`` messages carry per-vehicle stop schedules,
- position updates come in several shapes and are probed independently
  of the two tagged categories.

Malformed elements are dropped one by one; the rest of the message is
still used.  Unknown shapes yield an empty :class:`NormalizedMessage`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pytrainmap.ingestion.normalize import first_truthy, is_truthy, parse_departure, position_timestamp_ms, safe_float
from pytrainmap.ingestion.rules import (
    POSITION_ID_RULES,
    POSITION_LAT_RULES,
    POSITION_LON_RULES,
    SCHEDULE_STOPS_RULES,
    SCHEDULE_VEHICLE_ID_RULES,
    STATION_ID_RULES,
    STATION_LAT_RULES,
    STATION_LON_RULES,
    STATION_NAME_RULES,
    STOP_ALTERNATE_ID_RULES,
    STOP_COORDS_RULES,
    STOP_DEPARTURE_RULES,
    STOP_MATCH_KEY_RULES,
    STOP_TITLE_RULES,
    extract,
)
from pytrainmap.models.message import MessageKind, NormalizedMessage
from pytrainmap.models.position import PositionSample, PositionUpdate
from pytrainmap.models.schedule import ScheduledStop, ScheduleUpdate
from pytrainmap.models.station import Station, StationCatalogUpdate

_logger = logging.getLogger(__name__)

ACTIVE_STOPS_KEY = "active-stops"


def has_tag(message: Any, tag: str) -> bool:
    """Whether the message carries ``type`` or ``event`` equal to *tag*."""
    if not isinstance(message, Mapping):
        return False
    return message.get("type") == tag or message.get("event") == tag


# ---------------------------------------------------------------------------
# Station catalog
# ---------------------------------------------------------------------------


def is_station_catalog(message: Any) -> bool:
    return has_tag(message, MessageKind.STATION_CATALOG) or (
        isinstance(message, Mapping) and ACTIVE_STOPS_KEY in message
    )


def normalize_station(raw: Any) -> Station | None:
    if not isinstance(raw, Mapping):
        return None
    station_id = extract(raw, STATION_ID_RULES)
    lat = safe_float(extract(raw, STATION_LAT_RULES))
    lon = safe_float(extract(raw, STATION_LON_RULES))
    if not is_truthy(station_id) or lat is None or lon is None:
        return None
    key = str(station_id)
    name = extract(raw, STATION_NAME_RULES)
    return Station(id=key, name=key if name is None else name, lat=lat, lon=lon)


def normalize_station_catalog(message: Any) -> StationCatalogUpdate | None:
    """Extract the station array; ``None`` when no array can be located."""
    items = first_truthy(message, ("data", "stops", ACTIVE_STOPS_KEY), default=message)
    if not isinstance(items, list):
        return None

    stations: dict[str, Station] = {}
    for raw in items:
        station = normalize_station(raw)
        if station is None:
            continue
        # First occurrence of an id wins.
        stations.setdefault(station.id, station)
    return StationCatalogUpdate(stations=list(stations.values()))


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------


def is_schedule_update(message: Any) -> bool:
    return has_tag(message, MessageKind.SCHEDULE)


def normalize_stop(raw: Any) -> ScheduledStop | None:
    """Normalize one raw stop; ``None`` if it cannot support ranking."""
    if not isinstance(raw, Mapping):
        return None
    title = extract(raw, STOP_TITLE_RULES)
    departure = extract(raw, STOP_DEPARTURE_RULES)
    if not is_truthy(title) or not is_truthy(departure):
        return None
    instant = parse_departure(departure)
    if instant is None:
        return None

    match_key = extract(raw, STOP_MATCH_KEY_RULES)
    alternate_id = extract(raw, STOP_ALTERNATE_ID_RULES)
    return ScheduledStop(
        match_key="" if match_key is None else str(match_key),
        alternate_id="" if alternate_id is None else str(alternate_id),
        title=str(title),
        scheduled_instant=instant,
        coords=extract(raw, STOP_COORDS_RULES),
    )


def _first_truthy_rule(record: Any) -> Any:
    for rule in SCHEDULE_STOPS_RULES:
        value = rule(record)
        if is_truthy(value):
            return value
    return []


def normalize_vehicle_schedule(item: Any) -> ScheduleUpdate | None:
    if not isinstance(item, Mapping):
        return None
    vehicle_id = extract(item, SCHEDULE_VEHICLE_ID_RULES)
    raw_stops = _first_truthy_rule(item)
    if not is_truthy(vehicle_id) or not isinstance(raw_stops, list):
        return None
    stops = [stop for stop in (normalize_stop(raw) for raw in raw_stops) if stop is not None]
    return ScheduleUpdate(vehicle_id=str(vehicle_id), stops=stops)


def normalize_schedules(message: Any) -> list[ScheduleUpdate] | None:
    """Extract per-vehicle schedules; ``None`` when no array can be located."""
    items = first_truthy(message, ("data", "trains", "returnValue"), default=[])
    if not isinstance(items, list):
        return None
    return [update for update in (normalize_vehicle_schedule(item) for item in items) if update is not None]


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------


def position_records(message: Any) -> list[Any]:
    """Locate position records using the known message shapes, in order."""
    if isinstance(message, list):
        return message
    if not isinstance(message, Mapping):
        return []
    if is_truthy(message.get("trains")):
        trains = message["trains"]
        return trains if isinstance(trains, list) else []
    if is_truthy(message.get("train")):
        return [message["train"]]
    if message.get("type") == MessageKind.POSITION and is_truthy(message.get("data")):
        return [message["data"]]
    if is_truthy(message.get("id")) and any(is_truthy(message.get(k)) for k in ("lat", "latitude", "y")):
        return [message]
    return []


def normalize_position(record: Any, observed_at_ms: int) -> PositionUpdate | None:
    vehicle_id = extract(record, POSITION_ID_RULES)
    lat = safe_float(extract(record, POSITION_LAT_RULES))
    lon = safe_float(extract(record, POSITION_LON_RULES))
    if not is_truthy(vehicle_id) or lat is None or lon is None:
        return None
    return PositionUpdate(
        vehicle_id=str(vehicle_id),
        sample=PositionSample(lat=lat, lon=lon, t=position_timestamp_ms(record, observed_at_ms)),
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def normalize_message(message: Any, *, observed_at_ms: int) -> NormalizedMessage:
    """Classify *message* and extract every record it carries.

    Parameters
    ----------
    message
        A decoded feed message: usually a dict, sometimes a list of position
        records, or a raw string when JSON decoding failed upstream.
    observed_at_ms
        Receive time in epoch milliseconds, used for positions that carry
        no timestamp of their own.
    """

    kinds: set[MessageKind] = set()
    catalog: StationCatalogUpdate | None = None
    schedules: list[ScheduleUpdate] = []

    if is_station_catalog(message):
        catalog = normalize_station_catalog(message)
        if catalog is not None:
            kinds.add(MessageKind.STATION_CATALOG)

    if is_schedule_update(message):
        found = normalize_schedules(message)
        if found is not None:
            kinds.add(MessageKind.SCHEDULE)
            schedules = found

    records = position_records(message)
    positions: list[PositionUpdate] = []
    if records:
        kinds.add(MessageKind.POSITION)
        for record in records:
            update = normalize_position(record, observed_at_ms)
            if update is not None:
                positions.append(update)

    if not kinds:
        _logger.debug("Unrecognized message shape type=%s", type(message).__name__)

    return NormalizedMessage(
        kinds=frozenset(kinds),
        catalog=catalog,
        schedules=schedules,
        positions=positions,
    )
