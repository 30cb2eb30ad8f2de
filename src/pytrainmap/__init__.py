"""pytrainmap - Realtime train feed normalization and next-arrival prediction."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pytrainmap")
except PackageNotFoundError:
    __version__ = "0+local"
from pytrainmap._geo import angular_difference, distance_meters, initial_bearing_degrees
from pytrainmap.config import TrainmapConfig
from pytrainmap.engine import NullRenderer, Renderer, TrainmapEngine
from pytrainmap.exceptions import TrainmapConfigError, TrainmapError, TrainmapFeedError
from pytrainmap.ingestion.messages import normalize_message
from pytrainmap.models import (
    ArrivalCandidate,
    MessageKind,
    NormalizedMessage,
    PositionSample,
    PositionUpdate,
    ScheduledStop,
    ScheduleUpdate,
    Station,
    StationCatalogUpdate,
    VehicleKinematics,
    VehicleSchedule,
)
from pytrainmap.prediction import format_eta, predict
from pytrainmap.storage import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "__version__",
    "ArrivalCandidate",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "MessageKind",
    "NormalizedMessage",
    "NullRenderer",
    "PositionSample",
    "PositionUpdate",
    "Renderer",
    "ScheduleUpdate",
    "ScheduledStop",
    "Station",
    "StationCatalogUpdate",
    "TrainmapConfig",
    "TrainmapConfigError",
    "TrainmapEngine",
    "TrainmapError",
    "TrainmapFeedError",
    "VehicleKinematics",
    "VehicleSchedule",
    "angular_difference",
    "distance_meters",
    "format_eta",
    "initial_bearing_degrees",
    "normalize_message",
    "predict",
]
