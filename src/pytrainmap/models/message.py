"""Normalized feed message."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from pytrainmap.models._base import FeedRecord
from pytrainmap.models.position import PositionUpdate
from pytrainmap.models.schedule import ScheduleUpdate
from pytrainmap.models.station import StationCatalogUpdate


class MessageKind(StrEnum):
    STATION_CATALOG = "active-stops"
    SCHEDULE = "back-end"
    POSITION = "position"


class NormalizedMessage(FeedRecord):
    """Everything one decoded message contributed.

    A single message can carry several kinds at once (e.g. a ``back-end``
    schedule message whose ``trains`` array also holds positions).
    """

    kinds: frozenset[MessageKind] = frozenset()
    catalog: StationCatalogUpdate | None = None
    schedules: list[ScheduleUpdate] = Field(default_factory=list)
    positions: list[PositionUpdate] = Field(default_factory=list)

    @property
    def is_recognized(self) -> bool:
        return bool(self.kinds)
