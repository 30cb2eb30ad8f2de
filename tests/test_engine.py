from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

import pytest
from _fakes import BrokenStore, FakeClock, FakeLoop, RecordingRenderer

from pytrainmap.config import TrainmapConfig
from pytrainmap.engine import (
    STATUS_NO_ARRIVALS,
    STATUS_NO_STATION,
    STATUS_PENDING,
    STATUS_STATIONS_UPDATED,
    TrainmapEngine,
)
from pytrainmap.storage import SELECTED_STATION_KEY, STATIONS_KEY, KeyValueStore, MemoryStore


def _local_ms(*args: int) -> int:
    return int(datetime(*args).timestamp() * 1000)


def _catalog(*stations: tuple[Any, str]) -> dict[str, Any]:
    return {
        "type": "active-stops",
        "data": [{"id": sid, "title": name, "coords": [56.9, 24.1]} for sid, name in stations],
    }


def _schedule(vehicle_id: str, *stops: tuple[str, str, str]) -> dict[str, Any]:
    return {
        "type": "back-end",
        "data": [
            {
                "returnValue": {
                    "train": vehicle_id,
                    "stopObjArray": [
                        {"pvID": pv_id, "title": title, "departure": departure} for pv_id, title, departure in stops
                    ],
                }
            }
        ],
    }


def _engine(
    *,
    clock: FakeClock | None = None,
    storage: KeyValueStore | None = None,
) -> tuple[TrainmapEngine, RecordingRenderer, FakeLoop, FakeClock]:
    renderer = RecordingRenderer()
    loop = FakeLoop()
    clock = clock or FakeClock(_local_ms(2024, 1, 1, 9, 59, 30))
    engine = TrainmapEngine(
        TrainmapConfig(),
        renderer=renderer,
        storage=storage if storage is not None else MemoryStore(),
        clock=clock,
        loop=loop,  # type: ignore[arg-type]
    )
    return engine, renderer, loop, clock


def test_catalog_message_installs_stations_and_persists_snapshot() -> None:
    storage = MemoryStore()
    engine, renderer, _loop, _clock = _engine(storage=storage)

    engine.handle_message(_catalog((1, "Central"), (2, "North")))

    assert [s.id for s in engine.stations.stations] == ["1", "2"]
    assert engine.stations.selected is not None and engine.stations.selected.id == "1"
    assert engine.selector_value == "1"
    assert renderer.stations[-1][1] == "1"
    assert STATUS_STATIONS_UPDATED in renderer.statuses
    cached = json.loads(storage.get(STATIONS_KEY) or "[]")
    assert cached[0] == {"id": "1", "name": "Central", "lat": 56.9, "lon": 24.1}


def test_schedule_then_predict_for_selected_station() -> None:
    engine, renderer, loop, _clock = _engine()
    engine.handle_message(_catalog(("1", "Central")))

    engine.handle_message(_schedule("T7", ("1", "Central", "2024-01-01 10:00:00")))

    arrivals = engine.next_arrivals
    assert [(a.vehicle_id, a.seconds_until) for a in arrivals] == [("T7", 30)]
    assert renderer.arrivals[-1] == arrivals
    assert renderer.countdowns[-1] == "30s"
    assert len(loop.pending) == 1


def test_no_upcoming_trains_status() -> None:
    engine, renderer, _loop, _clock = _engine()

    engine.handle_message(_catalog(("1", "Central")))

    assert engine.status == STATUS_NO_ARRIVALS
    assert renderer.countdowns[-1] == "-"


def test_countdown_reranks_when_top_arrival_elapses() -> None:
    engine, _renderer, loop, clock = _engine()
    engine.handle_message(_catalog(("1", "Central")))
    engine.handle_message(
        _schedule(
            "T7",
            ("1", "Central", "2024-01-01 10:00:00"),
        )
    )
    engine.handle_message(_schedule("T9", ("1", "Central", "2024-01-01 10:05:00")))
    assert [a.vehicle_id for a in engine.next_arrivals] == ["T7", "T9"]

    clock.now_ms = _local_ms(2024, 1, 1, 10, 0, 0)
    loop.fire()

    assert [a.vehicle_id for a in engine.next_arrivals] == ["T9"]
    assert len(loop.pending) == 1


def test_catalog_is_deferred_while_locked_and_applied_on_unlock() -> None:
    engine, renderer, _loop, _clock = _engine()
    engine.handle_message(_catalog(("1", "Central"), ("2", "North")))
    engine.select("2")

    engine.lock()
    engine.handle_message(_catalog(("3", "South"), ("2", "North")))

    assert engine.status == STATUS_PENDING
    assert [s.id for s in engine.stations.stations] == ["1", "2"]

    engine.unlock()

    assert [s.id for s in engine.stations.stations] == ["3", "2"]
    assert engine.stations.selected is not None and engine.stations.selected.id == "2"
    assert renderer.stations[-1][1] == "2"


def test_selection_falls_back_to_name_when_ids_change() -> None:
    engine, _renderer, _loop, _clock = _engine()
    engine.handle_message(_catalog(("1", "Central"), ("2", "North")))
    engine.select("2")

    engine.handle_message(_catalog(("10", "Central"), ("20", "North")))

    assert engine.stations.selected is not None and engine.stations.selected.id == "20"


def test_persisted_selection_is_used_when_previous_disappears() -> None:
    storage = MemoryStore({SELECTED_STATION_KEY: "3"})
    engine, _renderer, _loop, _clock = _engine(storage=storage)
    engine.handle_message(_catalog(("1", "Central")))

    engine.handle_message(_catalog(("2", "North"), ("3", "South")))

    assert engine.stations.selected is not None and engine.stations.selected.id == "3"


def test_select_persists_and_unknown_id_clears_selection() -> None:
    storage = MemoryStore()
    engine, _renderer, _loop, _clock = _engine(storage=storage)
    engine.handle_message(_catalog(("1", "Central"), ("2", "North")))

    engine.select("2")
    assert storage.get(SELECTED_STATION_KEY) == "2"

    assert engine.select("404") == []
    assert engine.status == STATUS_NO_STATION
    assert storage.get(SELECTED_STATION_KEY) == "2"


def test_restore_from_storage_seeds_directory() -> None:
    cached = [{"id": "1", "name": "Central", "lat": 56.9, "lon": 24.1}, {"id": "2", "name": "North", "lat": 57, "lon": 24}]
    storage = MemoryStore({STATIONS_KEY: json.dumps(cached), SELECTED_STATION_KEY: "2"})
    engine, renderer, _loop, _clock = _engine(storage=storage)

    assert engine.restore_from_storage()

    assert engine.stations.selected is not None and engine.stations.selected.id == "2"
    assert renderer.stations[-1][1] == "2"


@pytest.mark.parametrize("raw", [None, "", "not json", "{}", "[]", '[{"id": "1"}]'])
def test_restore_from_storage_ignores_unusable_cache(raw: str | None) -> None:
    initial = {} if raw is None else {STATIONS_KEY: raw}
    engine, _renderer, _loop, _clock = _engine(storage=MemoryStore(initial))

    assert not engine.restore_from_storage()
    assert engine.stations.stations == []


def test_storage_failures_are_swallowed() -> None:
    engine, _renderer, _loop, _clock = _engine(storage=BrokenStore())

    engine.handle_message(_catalog(("1", "Central")))
    engine.select("1")

    assert engine.stations.selected is not None
    assert not engine.restore_from_storage()


def test_unrecognized_and_non_json_messages_are_ignored() -> None:
    engine, renderer, _loop, _clock = _engine()

    for message in ("<html>", {"type": "ping"}, None):
        assert not engine.handle_message(message).is_recognized

    assert renderer.arrivals == []
    assert engine.stations.stations == []


def test_positions_update_kinematics() -> None:
    engine, _renderer, _loop, _clock = _engine()

    engine.handle_message({"trains": [{"id": "5", "lat": 0, "lon": 0, "ts": 1}]})
    engine.handle_message({"trains": [{"id": "5", "lat": 0, "lon": 0.01, "ts": 2}]})

    record = engine.kinematics.get("5")
    assert record is not None
    assert record.heading_degrees == pytest.approx(90.0)


@pytest.mark.asyncio
async def test_context_manager_attaches_debug_buffer() -> None:
    engine, _renderer, _loop, _clock = _engine()
    package_logger = logging.getLogger("pytrainmap")
    level_before = package_logger.level

    async with engine:
        assert engine.debug_buffer in package_logger.handlers
        engine.handle_message(_catalog(("1", "Central")))

    assert engine.debug_buffer not in package_logger.handlers
    assert package_logger.level == level_before

    messages = [message for _created, message in engine.debug_buffer.entries]
    assert any(message.startswith("Feed message") for message in messages)
    assert any(message.startswith("Station catalog replaced") for message in messages)


def test_select_before_first_catalog_is_kept_for_it() -> None:
    storage = MemoryStore()
    engine, _renderer, _loop, _clock = _engine(storage=storage)

    engine.select("2")
    assert engine.selector_value == "2"
    assert storage.get(SELECTED_STATION_KEY) == "2"

    engine.handle_message(_catalog(("1", "Central"), ("2", "North")))

    assert engine.stations.selected is not None
    assert engine.stations.selected.id == "2"
