"""Schedule models."""

from __future__ import annotations

from pydantic import Field

from pytrainmap.models._base import FeedRecord


class ScheduledStop(FeedRecord):
    """A scheduled visit of one vehicle to one station.

    Parameters
    ----------
    match_key : str
        Preferred station identifier (``pvID`` on the wire).
    alternate_id : str
        Secondary identifier tried when ``match_key`` does not match.
    title : str
        Station title; matched against the selected station's name.
    scheduled_instant : int or None
        Departure (or arrival) instant in epoch milliseconds.
    coords : tuple of float or None
        ``(lat, lon)`` of the stop when the feed carries it.
    """

    match_key: str = ""
    alternate_id: str = ""
    title: str
    scheduled_instant: int | None = None
    coords: tuple[float, float] | None = None

    def matches(self, station_id: str, station_name: str | None) -> bool:
        if self.match_key == station_id or self.alternate_id == station_id:
            return True
        return bool(station_name) and bool(self.title) and self.title == station_name


class ScheduleUpdate(FeedRecord):
    """Full replacement of one vehicle's stop sequence."""

    vehicle_id: str
    stops: list[ScheduledStop] = Field(default_factory=list)


VehicleSchedule = ScheduleUpdate
"""A stored schedule has the same shape as the update that produced it."""
