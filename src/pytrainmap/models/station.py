"""Station model."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from pytrainmap.models._base import FeedRecord


class Station(FeedRecord):
    """A stop in the active catalog.

    ``id`` is always a string so numeric and string ids from the wire
    compare equal.
    """

    id: str
    name: str
    lat: float
    lon: float

    @field_validator("id", "name", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return str(value)

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump()


class StationCatalogUpdate(FeedRecord):
    """Full replacement snapshot of the station directory."""

    stations: list[Station] = Field(default_factory=list)
