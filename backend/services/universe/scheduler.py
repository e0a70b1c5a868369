"""
Periodic driver for the three universe cycles.

  fast-refresh       refresh_tracked_universe()            DEX_FAST_REFRESH_MS
  candidate-refresh  refresh_candidate_pool() + rebalance  DEX_CANDIDATE_REFRESH_MS
  rebalance          rebalance_universe()                  DEX_REBALANCE_MS

Each kind has its own timer task, and every tick runs as a separate task so a
slow cycle never delays the next tick of its timer.  A tick that fires while
the previous run of the same kind is still in flight is skipped.  Different
kinds may run concurrently.  Errors are caught and logged per cycle and never
stop the timers.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from config import Settings, settings as default_settings
from services.universe.manager import UniverseManager, universe_manager
from utils.clock import iso_from_ms
from utils.logger import scheduler_logger as logger

FAST_REFRESH = "fast-refresh"
CANDIDATE_REFRESH = "candidate-refresh"
REBALANCE = "rebalance"


@dataclass
class CycleStats:
    name: str
    interval_ms: int
    runs: int = 0
    skips: int = 0
    failures: int = 0
    in_flight: bool = False
    last_started_at: Optional[float] = None
    last_finished_at: Optional[float] = None
    last_error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "intervalMs": self.interval_ms,
            "runs": self.runs,
            "skips": self.skips,
            "failures": self.failures,
            "inFlight": self.in_flight,
            "lastStartedAt": iso_from_ms(self.last_started_at) if self.last_started_at else None,
            "lastFinishedAt": iso_from_ms(self.last_finished_at) if self.last_finished_at else None,
            "lastError": self.last_error,
        }


class UniverseScheduler:
    def __init__(self, manager: Optional[UniverseManager] = None, settings: Optional[Settings] = None):
        self.manager = manager or universe_manager
        self.settings = settings or default_settings
        self._running = False
        self._timers: list[asyncio.Task] = []
        self._in_flight: dict[str, asyncio.Task] = {}
        self._cycles: dict[str, Callable[[], Awaitable[Any]]] = {
            FAST_REFRESH: self._fast_refresh,
            CANDIDATE_REFRESH: self._candidate_refresh,
            REBALANCE: self._rebalance,
        }
        self._stats: dict[str, CycleStats] = {
            FAST_REFRESH: CycleStats(FAST_REFRESH, self.settings.DEX_FAST_REFRESH_MS),
            CANDIDATE_REFRESH: CycleStats(CANDIDATE_REFRESH, self.settings.DEX_CANDIDATE_REFRESH_MS),
            REBALANCE: CycleStats(REBALANCE, self.settings.DEX_REBALANCE_MS),
        }

    @property
    def running(self) -> bool:
        return self._running

    async def _fast_refresh(self) -> None:
        await self.manager.refresh_tracked_universe()

    async def _candidate_refresh(self) -> None:
        await self.manager.refresh_candidate_pool()
        await self.manager.rebalance_universe(force=False)

    async def _rebalance(self) -> None:
        await self.manager.rebalance_universe(force=False)

    async def start(self) -> None:
        """Start the three cycle timers (idempotent)."""
        if self._running:
            return
        self._running = True
        self._timers = [
            asyncio.create_task(self._timer_loop(name, stats.interval_ms / 1000.0), name=f"{name}-timer")
            for name, stats in self._stats.items()
        ]
        logger.info(
            "Universe scheduler started",
            fast_refresh_ms=self.settings.DEX_FAST_REFRESH_MS,
            candidate_refresh_ms=self.settings.DEX_CANDIDATE_REFRESH_MS,
            rebalance_ms=self.settings.DEX_REBALANCE_MS,
        )

    async def stop(self) -> None:
        """Cancel timers and any cycle still in flight (idempotent)."""
        if not self._running and not self._timers and not self._in_flight:
            return
        self._running = False
        tasks = [*self._timers, *self._in_flight.values()]
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._timers = []
        self._in_flight = {}
        for stats in self._stats.values():
            stats.in_flight = False
        logger.info("Universe scheduler stopped")

    async def _timer_loop(self, name: str, interval_seconds: float) -> None:
        while self._running:
            await asyncio.sleep(interval_seconds)
            if not self._running:
                break
            self.trigger(name)

    def trigger(self, name: str) -> Optional[asyncio.Task]:
        """Launch one run of a cycle, or skip it if the previous run is still going."""
        stats = self._stats[name]
        if stats.in_flight:
            stats.skips += 1
            logger.warning("Cycle still in flight, skipping tick", cycle=name, skips=stats.skips)
            return None
        stats.in_flight = True
        task = asyncio.create_task(self._run_cycle(name), name=name)
        self._in_flight[name] = task
        return task

    async def run_once(self, name: str) -> bool:
        """Run a cycle to completion now; returns False if it was skipped."""
        task = self.trigger(name)
        if task is None:
            return False
        await task
        return True

    async def _run_cycle(self, name: str) -> None:
        stats = self._stats[name]
        stats.runs += 1
        stats.last_started_at = self.manager.clock.now_ms()
        try:
            await self._cycles[name]()
            stats.last_error = None
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            stats.failures += 1
            stats.last_error = str(exc) or type(exc).__name__
            logger.exception("Universe cycle failed", cycle=name, error=stats.last_error)
        finally:
            stats.in_flight = False
            stats.last_finished_at = self.manager.clock.now_ms()
            self._in_flight.pop(name, None)

    def get_status(self) -> dict[str, Any]:
        return {
            "running": self._running,
            "cycles": {name: stats.to_dict() for name, stats in self._stats.items()},
        }


universe_scheduler = UniverseScheduler()
