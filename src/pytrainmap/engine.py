"""Top-level coordinator.

:class:`TrainmapEngine` owns the station directory, the schedule store and
the kinematics store, feeds normalized messages into them and pushes the
resulting station list, ranked arrivals, countdown and status text to a
:class:`Renderer`.

Usage::

    async with TrainmapEngine(config, renderer=my_renderer) as engine:
        engine.restore_from_storage()
        await engine.run()
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

import aiohttp
from pydantic import ValidationError

from pytrainmap._feed import StationFeed
from pytrainmap._log import DebugBuffer, truncate_for_log
from pytrainmap.config import TrainmapConfig
from pytrainmap.countdown import CountdownScheduler
from pytrainmap.ingestion.messages import normalize_message
from pytrainmap.models.message import MessageKind, NormalizedMessage
from pytrainmap.models.prediction import ArrivalCandidate
from pytrainmap.models.station import Station, StationCatalogUpdate
from pytrainmap.prediction import predict
from pytrainmap.state.kinematics import VehicleKinematicsStore
from pytrainmap.state.schedules import ScheduleStore
from pytrainmap.state.stations import StationDirectory
from pytrainmap.storage import SELECTED_STATION_KEY, STATIONS_KEY, JsonFileStore, KeyValueStore, MemoryStore

_logger = logging.getLogger(__name__)

STATUS_PENDING = "Stations update pending, dropdown open"
STATUS_STATIONS_UPDATED = "Stations updated from WS (active-stops)"
STATUS_NO_STATION = "no station selected"
STATUS_NO_ARRIVALS = "no upcoming trains"


def _now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class Renderer(Protocol):
    def render_stations(self, stations: list[Station], selected_id: str | None, updated_at_ms: int | None) -> None:
        ...

    def render_arrivals(self, arrivals: list[ArrivalCandidate]) -> None:
        ...

    def render_countdown(self, text: str) -> None:
        ...

    def render_status(self, text: str) -> None:
        ...


class NullRenderer:
    def render_stations(self, stations: list[Station], selected_id: str | None, updated_at_ms: int | None) -> None:
        pass

    def render_arrivals(self, arrivals: list[ArrivalCandidate]) -> None:
        pass

    def render_countdown(self, text: str) -> None:
        pass

    def render_status(self, text: str) -> None:
        pass


class TrainmapEngine:
    """Realtime next-arrival engine for one selected station."""

    def __init__(
        self,
        config: TrainmapConfig | None = None,
        *,
        renderer: Renderer | None = None,
        storage: KeyValueStore | None = None,
        clock: Callable[[], int] = _now_ms,
        loop: asyncio.AbstractEventLoop | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config or TrainmapConfig()
        self._renderer: Renderer = renderer or NullRenderer()
        if storage is None:
            path = self._config.storage_path
            storage = JsonFileStore(path) if path else MemoryStore()
        self._storage = storage
        self._clock = clock
        self._http_session = session

        self.stations = StationDirectory()
        self.schedules = ScheduleStore()
        self.kinematics = VehicleKinematicsStore()
        self.debug_buffer = DebugBuffer(self._config.debug_buffer_size)
        self._saved_log_level = logging.NOTSET

        self._selector_value: str | None = None
        self._next_arrivals: list[ArrivalCandidate] = []
        self._status = ""
        self._feed: StationFeed | None = None
        self._countdown = CountdownScheduler(
            clock=clock,
            on_render=self._renderer.render_countdown,
            on_elapsed=self.refresh,
            interval=self._config.countdown_interval,
            loop=loop,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TrainmapEngine:
        logger = logging.getLogger("pytrainmap")
        self._saved_log_level = logger.level
        # debug_buffer sees DEBUG records while the engine is open.
        if not logger.isEnabledFor(logging.DEBUG):
            logger.setLevel(logging.DEBUG)
        logger.addHandler(self.debug_buffer)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        logger = logging.getLogger("pytrainmap")
        logger.removeHandler(self.debug_buffer)
        logger.setLevel(self._saved_log_level)

    async def run(self) -> None:
        """Consume the realtime feed until :meth:`stop` is called."""
        self._feed = StationFeed(
            self._config,
            self.handle_message,
            on_status=self._set_status,
            session=self._http_session,
        )
        await self._feed.run()

    async def stop(self) -> None:
        feed = self._feed
        self._feed = None
        if feed is not None:
            await feed.stop()
        self._countdown.cancel()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def config(self) -> TrainmapConfig:
        return self._config

    @property
    def next_arrivals(self) -> list[ArrivalCandidate]:
        return list(self._next_arrivals)

    @property
    def status(self) -> str:
        return self._status

    @property
    def countdown(self) -> CountdownScheduler:
        return self._countdown

    @property
    def selector_value(self) -> str | None:
        """Value currently shown by the station selector."""
        return self._selector_value

    @selector_value.setter
    def selector_value(self, value: str | None) -> None:
        self._selector_value = None if value is None else str(value)

    # ------------------------------------------------------------------
    # Feed input
    # ------------------------------------------------------------------

    def handle_message(self, message: Any) -> NormalizedMessage:
        """Apply one decoded feed message. Never raises."""
        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug("Feed message %s", truncate_for_log(message))
        try:
            normalized = normalize_message(message, observed_at_ms=self._clock())
        except Exception:
            _logger.debug("Message normalization failed", exc_info=True)
            return NormalizedMessage()

        changed = False
        if normalized.catalog is not None:
            try:
                changed = self._apply_catalog(normalized.catalog)
            except Exception:
                _logger.debug("active-stops handling failed", exc_info=True)

        if MessageKind.SCHEDULE in normalized.kinds:
            for schedule in normalized.schedules:
                self.schedules.apply(schedule)
            _logger.debug("Schedules updated vehicles=%d", len(self.schedules))
            changed = True

        if MessageKind.POSITION in normalized.kinds:
            for position in normalized.positions:
                self.kinematics.apply_update(position)
            changed = True

        # A catalog parked by the lock changes nothing visible yet.
        if changed:
            self.refresh()
        return normalized

    def _apply_catalog(self, update: StationCatalogUpdate) -> bool:
        self._storage_set(STATIONS_KEY, json.dumps([station.to_storage() for station in update.stations]))
        installed = self.stations.replace(
            update.stations,
            selector_value=self._selector_value,
            stored_id=self._storage_get(SELECTED_STATION_KEY),
            now_ms=self._clock(),
        )
        if not installed:
            self._set_status(STATUS_PENDING)
            return False
        self._stations_installed()
        self._set_status(STATUS_STATIONS_UPDATED)
        return True

    def _stations_installed(self) -> None:
        selected = self.stations.selected
        self._selector_value = selected.id if selected else None
        self._renderer.render_stations(self.stations.stations, self._selector_value, self.stations.updated_at_ms)

    # ------------------------------------------------------------------
    # Selector control surface
    # ------------------------------------------------------------------

    def select(self, station_id: str | None) -> list[ArrivalCandidate]:
        station = self.stations.select(station_id)
        if station is not None:
            self._selector_value = station.id
            self._storage_set(SELECTED_STATION_KEY, station.id)
        elif station_id is not None and not self.stations.stations:
            # No catalog yet: remember the request for the first replacement.
            self._selector_value = str(station_id)
            self._storage_set(SELECTED_STATION_KEY, str(station_id))
        else:
            self._selector_value = None
        return self.refresh()

    def lock(self) -> None:
        self.stations.lock()

    def unlock(self) -> list[ArrivalCandidate]:
        installed = self.stations.unlock(
            selector_value=self._selector_value,
            stored_id=self._storage_get(SELECTED_STATION_KEY),
            now_ms=self._clock(),
        )
        if not installed:
            return self.next_arrivals
        self._stations_installed()
        self._set_status(STATUS_STATIONS_UPDATED)
        return self.refresh()

    def restore_from_storage(self) -> bool:
        """Seed the directory from the cached catalog before the feed delivers one."""
        raw = self._storage_get(STATIONS_KEY)
        if not raw:
            return False
        try:
            parsed = json.loads(raw)
        except ValueError:
            _logger.debug("Cached station catalog is not JSON")
            return False
        if not isinstance(parsed, list):
            return False

        stations: list[Station] = []
        for item in parsed:
            try:
                stations.append(Station.model_validate(item))
            except ValidationError:
                continue
        if not stations:
            return False

        self.stations.restore(stations, stored_id=self._storage_get(SELECTED_STATION_KEY), now_ms=self._clock())
        self._stations_installed()
        self.refresh()
        return True

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def refresh(self) -> list[ArrivalCandidate]:
        """Re-rank arrivals for the current selection and restart the countdown."""
        selected = self.stations.selected
        if selected is None:
            arrivals: list[ArrivalCandidate] = []
            outcome: str | None = STATUS_NO_STATION
        else:
            arrivals = predict(
                self.stations,
                self.schedules,
                selected.id,
                self._clock(),
                limit=self._config.max_arrivals,
            )
            outcome = None if arrivals else STATUS_NO_ARRIVALS

        self._next_arrivals = arrivals
        self._renderer.render_arrivals(list(arrivals))
        if outcome is not None and outcome != self._status:
            self._set_status(outcome)
        self._countdown.start(arrivals)
        return list(arrivals)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _set_status(self, text: str) -> None:
        self._status = text
        self._renderer.render_status(text)

    def _storage_get(self, key: str) -> str | None:
        try:
            return self._storage.get(key)
        except Exception:
            _logger.debug("Storage read failed key=%s", key, exc_info=True)
            return None

    def _storage_set(self, key: str, value: str) -> None:
        try:
            self._storage.set(key, value)
        except Exception:
            _logger.debug("Storage write failed key=%s", key, exc_info=True)
