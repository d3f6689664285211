"""Scheduler — drives the drift scanner on a repeating timer with cooperative stop."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

import structlog

from protodiff.engines.drift_scanner.scanner import DriftScanner

logger = structlog.get_logger(__name__)

DEFAULT_STOP_GRACE = 2.0


class EngineLoop:
    """Single engine scheduling loop with trigger/timeout wake mechanism.

    Runs are fixed-rate: the next run is due ``interval`` seconds after the
    previous one *started*. A run that overruns the interval is followed
    immediately by the next one; runs never overlap.
    """

    def __init__(
        self,
        name: str,
        run_fn: Callable[[], Awaitable[int]],
        interval: float,
        stopped: asyncio.Event | None = None,
    ) -> None:
        self.name = name
        self.run_fn = run_fn
        self.interval = interval
        self.trigger = asyncio.Event()
        self.stopped = stopped or asyncio.Event()
        self._due: float | None = None

    def request_stop(self) -> None:
        """Signal cancellation; wakes the loop if it is waiting."""
        self.stopped.set()
        self.trigger.set()

    def _time_until_due(self) -> float:
        if self._due is None:
            return self.interval
        return max(0.0, self._due - time.monotonic())

    async def loop(self) -> None:
        """Run the engine until stopped, waking on trigger or timeout."""
        while not self.stopped.is_set():
            try:
                await asyncio.wait_for(self.trigger.wait(), timeout=self._time_until_due())
            except asyncio.TimeoutError:
                pass
            self.trigger.clear()
            if self.stopped.is_set():
                break

            self._due = time.monotonic() + self.interval
            try:
                processed = await self.run_fn()
                logger.info("engine.cycle", engine=self.name, processed=processed)
            except Exception:
                logger.exception("engine.error", engine=self.name)
        logger.info("engine.stopped", engine=self.name)


class Scheduler:
    """Manages lifecycle of EngineLoop tasks."""

    def __init__(self, loops: list[EngineLoop]) -> None:
        self._loops = loops
        self._tasks: list[asyncio.Task[None]] = []

    async def start(self) -> None:
        """Start all engine loops as asyncio tasks and run each once immediately."""
        self._tasks = [
            asyncio.create_task(loop.loop(), name=f"engine-{loop.name}") for loop in self._loops
        ]
        for loop in self._loops:
            loop.trigger.set()
        logger.info("scheduler.started", engines=[loop.name for loop in self._loops])

    async def stop(self, grace: float = DEFAULT_STOP_GRACE) -> None:
        """Signal every loop to stop, wait up to *grace* seconds, then cancel."""
        for loop in self._loops:
            loop.request_stop()
        if self._tasks:
            _, pending = await asyncio.wait(self._tasks, timeout=grace)
            for task in pending:
                task.cancel()
            await asyncio.gather(*self._tasks, return_exceptions=True)
            if pending:
                logger.warning("scheduler.cancelled_after_grace", engines=len(pending))
        self._tasks.clear()
        logger.info("scheduler.stopped")


def create_scheduler(scanner: DriftScanner, *, interval: float) -> Scheduler:
    """Build a Scheduler running *scanner* every *interval* seconds."""
    stopped = asyncio.Event()

    async def _run_scan() -> int:
        return await scanner.run_cycle(stop=stopped)

    scan_loop = EngineLoop("drift_scanner", _run_scan, interval, stopped=stopped)
    return Scheduler([scan_loop])
