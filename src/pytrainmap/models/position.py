"""Vehicle position and kinematics models."""

from __future__ import annotations

from pytrainmap.models._base import FeedRecord, MutableState


class PositionSample(FeedRecord):
    """A single position fix; ``t`` is epoch milliseconds."""

    lat: float
    lon: float
    t: int

    @property
    def point(self) -> tuple[float, float]:
        return self.lat, self.lon


class PositionUpdate(FeedRecord):
    vehicle_id: str
    sample: PositionSample


class VehicleKinematics(MutableState):
    """Rolling two-sample window for one vehicle.

    ``speed_meters_per_second`` and ``heading_degrees`` stay ``None`` until
    two samples with increasing timestamps have been seen, and keep their
    last value when a later sample does not advance time.
    """

    previous: PositionSample | None = None
    current: PositionSample | None = None
    speed_meters_per_second: float | None = None
    heading_degrees: float | None = None
    turn_degrees: float | None = None
