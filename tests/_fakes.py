"""Deterministic stand-ins for the event loop, clock, renderer and storage."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pytrainmap.models import ArrivalCandidate, Station


@dataclass
class FakeHandle:
    delay: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeLoop:
    handles: list[FakeHandle] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], None], *args: Any) -> FakeHandle:
        handle = FakeHandle(delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[FakeHandle]:
        return [h for h in self.handles if not h.cancelled]

    def fire(self) -> None:
        """Run the single live timer, as the real loop would after its delay."""
        (handle,) = self.pending
        handle.cancelled = True
        handle.callback()


@dataclass
class FakeClock:
    now_ms: int = 0

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


@dataclass
class RecordingRenderer:
    stations: list[tuple[list[Station], str | None]] = field(default_factory=list)
    arrivals: list[list[ArrivalCandidate]] = field(default_factory=list)
    countdowns: list[str] = field(default_factory=list)
    statuses: list[str] = field(default_factory=list)

    def render_stations(self, stations: list[Station], selected_id: str | None, updated_at_ms: int | None) -> None:
        self.stations.append((stations, selected_id))

    def render_arrivals(self, arrivals: list[ArrivalCandidate]) -> None:
        self.arrivals.append(arrivals)

    def render_countdown(self, text: str) -> None:
        self.countdowns.append(text)

    def render_status(self, text: str) -> None:
        self.statuses.append(text)


class BrokenStore:
    def get(self, key: str) -> str | None:
        raise OSError("storage unavailable")

    def set(self, key: str, value: str) -> None:
        raise OSError("storage unavailable")
