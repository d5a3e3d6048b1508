from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from proposer_indexer.app.domain.errors import ProposerIndexerError


logger = logging.getLogger(__name__)

CycleFn = Callable[[], Awaitable[Any]]


class DriverState(enum.Enum):
    IDLE = "idle"
    INDEXING = "indexing"


class PeriodicDriver:
    """
    Runs one cycle per tick, never two at once.

    The first tick fires immediately; following ticks are due `interval_seconds`
    after the previous tick started. A cycle that overruns the interval delays
    the next tick until it finishes (missed ticks are not replayed).

    A failing cycle is logged and the driver goes back to IDLE; only
    cancellation stops the loop early.
    """

    def __init__(self, *, cycle: CycleFn, interval_seconds: float) -> None:
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be non-negative")
        self._cycle = cycle
        self._interval = interval_seconds
        self._state = DriverState.IDLE
        self._completed = 0
        self._failed = 0

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def completed_cycles(self) -> int:
        return self._completed

    @property
    def failed_cycles(self) -> int:
        return self._failed

    async def run(self, *, max_cycles: int | None = None) -> None:
        """
        Tick until cancelled, or until `max_cycles` cycles have run.
        """
        if max_cycles is not None and max_cycles <= 0:
            raise ValueError("max_cycles must be positive when provided")

        loop = asyncio.get_running_loop()
        ran = 0

        while max_cycles is None or ran < max_cycles:
            tick_started = loop.time()

            await self._run_cycle()
            ran += 1

            if max_cycles is not None and ran >= max_cycles:
                break

            next_tick = tick_started + self._interval
            await asyncio.sleep(max(0.0, next_tick - loop.time()))

    async def _run_cycle(self) -> None:
        self._state = DriverState.INDEXING
        try:
            await self._cycle()
        except ProposerIndexerError as exc:
            self._failed += 1
            logger.error("Indexing error: %s", exc)
        except Exception:
            self._failed += 1
            logger.exception("Unexpected indexing error")
        else:
            self._completed += 1
        finally:
            self._state = DriverState.IDLE
