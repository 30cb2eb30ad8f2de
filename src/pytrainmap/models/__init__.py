"""Normalized data models."""

from pytrainmap.models.message import MessageKind, NormalizedMessage
from pytrainmap.models.position import PositionSample, PositionUpdate, VehicleKinematics
from pytrainmap.models.prediction import ArrivalCandidate
from pytrainmap.models.schedule import ScheduledStop, ScheduleUpdate, VehicleSchedule
from pytrainmap.models.station import Station, StationCatalogUpdate

__all__ = [
    "ArrivalCandidate",
    "MessageKind",
    "NormalizedMessage",
    "PositionSample",
    "PositionUpdate",
    "ScheduleUpdate",
    "ScheduledStop",
    "Station",
    "StationCatalogUpdate",
    "VehicleKinematics",
    "VehicleSchedule",
]
