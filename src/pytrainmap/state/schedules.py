"""Per-vehicle schedule store."""

from __future__ import annotations

from collections.abc import Iterator

from pytrainmap.models.schedule import ScheduleUpdate, VehicleSchedule


class ScheduleStore:
    """Latest known stop sequence per vehicle.

    An update replaces the vehicle's whole sequence.  Iteration follows
    first-seen vehicle order, which makes candidate ranking stable.
    """

    def __init__(self) -> None:
        self._schedules: dict[str, VehicleSchedule] = {}

    def apply(self, update: ScheduleUpdate) -> None:
        self._schedules[str(update.vehicle_id)] = update

    def get(self, vehicle_id: str) -> VehicleSchedule | None:
        return self._schedules.get(str(vehicle_id))

    def __iter__(self) -> Iterator[VehicleSchedule]:
        return iter(list(self._schedules.values()))

    def __len__(self) -> int:
        return len(self._schedules)
