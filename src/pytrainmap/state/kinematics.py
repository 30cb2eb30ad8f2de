"""Per-vehicle position window and derived kinematics."""

from __future__ import annotations

from pytrainmap._geo import angular_difference, distance_meters, initial_bearing_degrees
from pytrainmap.models.position import PositionSample, PositionUpdate, VehicleKinematics


class VehicleKinematicsStore:
    """Keeps the last two position samples per vehicle.

    Records are never removed; the tracked vehicle population is small.
    """

    def __init__(self) -> None:
        self._vehicles: dict[str, VehicleKinematics] = {}

    def _vehicle(self, vehicle_id: str) -> VehicleKinematics:
        record = self._vehicles.get(vehicle_id)
        if record is None:
            record = VehicleKinematics()
            self._vehicles[vehicle_id] = record
        return record

    def apply(self, vehicle_id: str, sample: PositionSample) -> VehicleKinematics:
        """Shift in a new sample and recompute speed/heading when time advanced."""
        record = self._vehicle(str(vehicle_id))
        if record.current is not None:
            record.previous = record.current
        record.current = sample

        previous = record.previous
        if previous is None or sample.t <= previous.t:
            # Duplicate or out-of-order delivery: keep the last derived values.
            return record

        elapsed_s = (sample.t - previous.t) / 1000.0
        record.speed_meters_per_second = distance_meters(previous.point, sample.point) / elapsed_s
        heading = initial_bearing_degrees(previous.point, sample.point)
        if record.heading_degrees is not None:
            record.turn_degrees = angular_difference(record.heading_degrees, heading)
        record.heading_degrees = heading
        return record

    def apply_update(self, update: PositionUpdate) -> VehicleKinematics:
        return self.apply(update.vehicle_id, update.sample)

    def get(self, vehicle_id: str) -> VehicleKinematics | None:
        return self._vehicles.get(str(vehicle_id))

    def vehicle_ids(self) -> list[str]:
        return list(self._vehicles)

    def __len__(self) -> int:
        return len(self._vehicles)
