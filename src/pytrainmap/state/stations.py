"""Station directory with deferred replacement while locked."""

from __future__ import annotations

import logging

from pytrainmap.models.station import Station
from pytrainmap.state.policy import resolve_selection

_logger = logging.getLogger(__name__)


class StationDirectory:
    """Current station catalog and the user's selection.

    While :attr:`locked` (the user is interacting with the selector),
    replacements are parked as a single pending snapshot; the newest one
    wins and is installed by :meth:`unlock`.
    """

    def __init__(self) -> None:
        self._stations: list[Station] = []
        self._selected: Station | None = None
        self._locked = False
        self._pending: list[Station] | None = None
        self.updated_at_ms: int | None = None

    @property
    def stations(self) -> list[Station]:
        return list(self._stations)

    @property
    def selected(self) -> Station | None:
        return self._selected

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def pending(self) -> list[Station] | None:
        return None if self._pending is None else list(self._pending)

    def find(self, station_id: str | None) -> Station | None:
        if station_id is None:
            return None
        wanted = str(station_id)
        for station in self._stations:
            if station.id == wanted:
                return station
        return None

    def select(self, station_id: str | None) -> Station | None:
        """Select a station of the current catalog; unknown ids clear the selection."""
        self._selected = self.find(station_id)
        return self._selected

    def replace(
        self,
        stations: list[Station],
        *,
        selector_value: str | None,
        stored_id: str | None,
        now_ms: int,
    ) -> bool:
        """Install a new catalog, or park it when locked.

        Returns ``True`` when the catalog was installed.
        """
        if self._locked:
            self._pending = list(stations)
            _logger.info("Station catalog deferred while locked count=%d", len(stations))
            return False
        self._install(stations, selector_value=selector_value, stored_id=stored_id, now_ms=now_ms)
        return True

    def restore(self, stations: list[Station], *, stored_id: str | None, now_ms: int) -> None:
        """Install a cached catalog at startup, bypassing the lock."""
        self._stations = list(stations)
        self._selected = self.find(stored_id) or (self._stations[0] if self._stations else None)
        self.updated_at_ms = now_ms

    def lock(self) -> None:
        self._locked = True

    def unlock(
        self,
        *,
        selector_value: str | None,
        stored_id: str | None,
        now_ms: int,
    ) -> bool:
        """Release the lock and install the pending snapshot, if any.

        Returns ``True`` when a pending catalog was installed.
        """
        self._locked = False
        pending = self._pending
        self._pending = None
        if pending is None:
            return False
        self._install(pending, selector_value=selector_value, stored_id=stored_id, now_ms=now_ms)
        return True

    def _install(
        self,
        stations: list[Station],
        *,
        selector_value: str | None,
        stored_id: str | None,
        now_ms: int,
    ) -> None:
        self._stations = list(stations)
        self._selected = resolve_selection(
            self._stations,
            selector_value=selector_value,
            previous=self._selected,
            stored_id=stored_id,
        )
        self.updated_at_ms = now_ms
        _logger.info(
            "Station catalog replaced count=%d selected=%s",
            len(self._stations),
            self._selected.id if self._selected else None,
        )
