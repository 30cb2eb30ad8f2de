#!/usr/bin/env python3
"""Watch the next arrivals at one station from the realtime feed.

Prints the station list once per catalog update, the ranked arrivals on
every re-rank and the countdown of the first arrival each second.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pytrainmap import ArrivalCandidate, Station, TrainmapConfig, TrainmapEngine, TrainmapError  # noqa: E402
from pytrainmap.prediction import format_eta  # noqa: E402

_LOG = logging.getLogger("watch_station")


class PrintRenderer:
    def __init__(self) -> None:
        self._last_countdown = ""

    def render_stations(self, stations: list[Station], selected_id: str | None, updated_at_ms: int | None) -> None:
        updated = datetime.fromtimestamp(updated_at_ms / 1000).strftime("%Y-%m-%d %H:%M:%S") if updated_at_ms else "-"
        print(f"[watch] stations={len(stations)} selected={selected_id} updated={updated}")

    def render_arrivals(self, arrivals: list[ArrivalCandidate]) -> None:
        if not arrivals:
            print("[watch] (no upcoming trains)")
            return
        for arrival in arrivals:
            when = arrival.scheduled_at.strftime("%Y-%m-%d %H:%M:%S")
            print(f"[watch]   {arrival.vehicle_id}: {format_eta(arrival.seconds_until)} ({when})")

    def render_countdown(self, text: str) -> None:
        if text != self._last_countdown:
            self._last_countdown = text
            _LOG.debug("countdown %s", text)

    def render_status(self, text: str) -> None:
        print(f"[watch] status: {text}")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Watch next train arrivals at a station.",
    )
    parser.add_argument(
        "--station",
        default=None,
        help="Station id to select (defaults to the cached or first station).",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Feed websocket URL (overrides TRAINMAP_WS_URL).",
    )
    parser.add_argument(
        "--storage",
        default=None,
        help="JSON file caching the station list and selection.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


async def _watch(config: TrainmapConfig, station_id: str | None) -> None:
    async with TrainmapEngine(config, renderer=PrintRenderer()) as engine:
        engine.restore_from_storage()
        if station_id:
            engine.select(station_id)
        await engine.run()


def _main() -> int:
    args = _parse_args()
    level = logging.DEBUG if args.verbose else logging.INFO
    # The engine lowers the pytrainmap logger to DEBUG; the console keeps its own level.
    console = logging.StreamHandler()
    console.setLevel(level)
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        handlers=[console],
    )

    overrides: dict[str, str] = {}
    if args.url:
        overrides["ws_url"] = args.url
    if args.storage:
        overrides["storage_path"] = args.storage

    try:
        config = TrainmapConfig.from_env(**overrides)
        asyncio.run(_watch(config, args.station))
    except KeyboardInterrupt:
        pass
    except TrainmapError as exc:
        print(f"[watch] {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
