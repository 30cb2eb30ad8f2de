"""Next-arrival ranking for the selected station."""

from __future__ import annotations

import math

from pytrainmap.models.prediction import ArrivalCandidate
from pytrainmap.state.schedules import ScheduleStore
from pytrainmap.state.stations import StationDirectory

DEFAULT_MAX_ARRIVALS = 3


def seconds_until(instant_ms: int, now_ms: int) -> int:
    """Whole seconds from *now_ms* to *instant_ms*, rounding halves up."""
    return math.floor((instant_ms - now_ms) / 1000 + 0.5)


def predict(
    stations: StationDirectory,
    schedules: ScheduleStore,
    selected_station_id: str | None,
    now_ms: int,
    *,
    limit: int = DEFAULT_MAX_ARRIVALS,
) -> list[ArrivalCandidate]:
    """Rank the next arrivals at *selected_station_id*.

    A stop matches when its match key or alternate id equals the station
    id, or its title equals the station's name.  Stops that are not at
    least one (rounded) second in the future are skipped.  Candidates are
    ordered by scheduled instant; the sort is stable so equal instants
    keep schedule order.
    """

    if selected_station_id is None:
        return []
    station_id = str(selected_station_id)
    station = stations.find(station_id)
    station_name = station.name if station is not None else None

    candidates: list[ArrivalCandidate] = []
    for schedule in schedules:
        for stop in schedule.stops:
            if stop.scheduled_instant is None or not stop.matches(station_id, station_name):
                continue
            remaining = seconds_until(stop.scheduled_instant, now_ms)
            if remaining <= 0:
                continue
            candidates.append(
                ArrivalCandidate(
                    vehicle_id=schedule.vehicle_id,
                    title=stop.title,
                    scheduled_instant=stop.scheduled_instant,
                    seconds_until=remaining,
                )
            )

    candidates.sort(key=lambda candidate: candidate.scheduled_instant)
    return candidates[:limit]


def format_eta(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds}s"
    minutes, rest = divmod(seconds, 60)
    return f"{minutes}m {rest}s"
