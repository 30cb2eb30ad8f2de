from __future__ import annotations

from _fakes import FakeClock, FakeLoop

from pytrainmap.countdown import PLACEHOLDER, CountdownScheduler
from pytrainmap.models import ArrivalCandidate


def _arrival(instant_ms: int, vehicle_id: str = "T7") -> ArrivalCandidate:
    return ArrivalCandidate(vehicle_id=vehicle_id, title="Central", scheduled_instant=instant_ms, seconds_until=1)


def _scheduler(clock: FakeClock, loop: FakeLoop, rendered: list[str], elapsed: list[int]) -> CountdownScheduler:
    return CountdownScheduler(
        clock=clock,
        on_render=rendered.append,
        on_elapsed=lambda: elapsed.append(clock()),
        interval=1.0,
        loop=loop,  # type: ignore[arg-type]
    )


def test_empty_ranking_shows_placeholder_without_timer() -> None:
    clock, loop, rendered, elapsed = FakeClock(), FakeLoop(), [], []
    scheduler = _scheduler(clock, loop, rendered, elapsed)

    scheduler.start([])

    assert rendered == [PLACEHOLDER]
    assert loop.pending == []
    assert not scheduler.active


def test_start_renders_immediately_and_schedules_one_tick() -> None:
    clock, loop, rendered, elapsed = FakeClock(), FakeLoop(), [], []
    scheduler = _scheduler(clock, loop, rendered, elapsed)

    scheduler.start([_arrival(90_000)])

    assert rendered == ["1m 30s"]
    assert [h.delay for h in loop.pending] == [1.0]


def test_restart_cancels_previous_timer() -> None:
    clock, loop, rendered, elapsed = FakeClock(), FakeLoop(), [], []
    scheduler = _scheduler(clock, loop, rendered, elapsed)

    scheduler.start([_arrival(90_000)])
    scheduler.start([_arrival(45_000)])

    assert len(loop.handles) == 2
    assert loop.handles[0].cancelled
    assert len(loop.pending) == 1
    assert rendered[-1] == "45s"


def test_ticks_count_down_and_report_elapsed_arrival() -> None:
    clock, loop, rendered, elapsed = FakeClock(), FakeLoop(), [], []
    scheduler = _scheduler(clock, loop, rendered, elapsed)
    scheduler.start([_arrival(2_000)])

    clock.advance(1)
    loop.fire()
    assert rendered[-1] == "1s"
    assert elapsed == []

    clock.advance(1)
    loop.fire()
    assert rendered[-1] == "0s"
    assert elapsed == [2_000]


def test_cancel_stops_ticking() -> None:
    clock, loop, rendered, elapsed = FakeClock(), FakeLoop(), [], []
    scheduler = _scheduler(clock, loop, rendered, elapsed)
    scheduler.start([_arrival(10_000)])

    scheduler.cancel()

    assert loop.pending == []
    assert not scheduler.active


def test_tick_without_arrivals_renders_placeholder() -> None:
    clock, loop, rendered, elapsed = FakeClock(), FakeLoop(), [], []
    scheduler = _scheduler(clock, loop, rendered, elapsed)

    scheduler.tick()

    assert rendered == [PLACEHOLDER]
    assert elapsed == []
