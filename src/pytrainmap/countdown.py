"""Countdown timer for the top arrival."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from pytrainmap.models.prediction import ArrivalCandidate
from pytrainmap.prediction import format_eta, seconds_until

_logger = logging.getLogger(__name__)

PLACEHOLDER = "-"


class CountdownScheduler:
    """Ticks the countdown of the first ranked arrival.

    At most one timer is alive: :meth:`start` cancels the previous one.
    When the top arrival reaches zero, ``on_elapsed`` is invoked so the
    owner can re-rank; that normally calls :meth:`start` again.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], int],
        on_render: Callable[[str], None],
        on_elapsed: Callable[[], None],
        interval: float = 1.0,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._clock = clock
        self._on_render = on_render
        self._on_elapsed = on_elapsed
        self._interval = interval
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._arrivals: list[ArrivalCandidate] = []
        self._generation = 0

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(self, arrivals: Sequence[ArrivalCandidate]) -> None:
        self.cancel()
        self._generation += 1
        generation = self._generation
        self._arrivals = list(arrivals)
        if not self._arrivals:
            self._on_render(PLACEHOLDER)
            return
        self.tick()
        if generation == self._generation:
            self._schedule()

    def cancel(self) -> None:
        handle = self._handle
        self._handle = None
        if handle is not None:
            handle.cancel()

    def tick(self) -> None:
        if not self._arrivals:
            self._on_render(PLACEHOLDER)
            return
        remaining = max(0, seconds_until(self._arrivals[0].scheduled_instant, self._clock()))
        self._on_render(format_eta(remaining))
        if remaining <= 0:
            self._on_elapsed()

    def _run(self) -> None:
        self._handle = None
        generation = self._generation
        self.tick()
        if generation == self._generation:
            self._schedule()

    def _schedule(self) -> None:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                _logger.debug("No running event loop; countdown shown once")
                return
        self._handle = loop.call_later(self._interval, self._run)
