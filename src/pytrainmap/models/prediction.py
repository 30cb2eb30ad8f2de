"""Arrival prediction model."""

from __future__ import annotations

from datetime import datetime

from pytrainmap.models._base import FeedRecord


class ArrivalCandidate(FeedRecord):
    """A future stop of some vehicle at the selected station."""

    vehicle_id: str
    title: str
    scheduled_instant: int
    seconds_until: int

    @property
    def scheduled_at(self) -> datetime:
        """Scheduled instant as an aware datetime in the local zone."""
        return datetime.fromtimestamp(self.scheduled_instant / 1000).astimezone()
