import asyncio
import enum
import logging
import math
from typing import List, Optional

from contracts.endpoint import EndpointDescriptor
from contracts.probe_outcome import ProbeOutcome
from core.availability_ledger import AvailabilityLedger
from core.formatting import format_latency
from core.metrics_manager import MetricsManager
from core.probe_executor import ProbeExecutor
from core.reporter import Reporter

logger = logging.getLogger(__name__)


class SchedulerState(enum.Enum):
    IDLE = "idle"
    RUNNING_CYCLE = "running_cycle"
    STOPPED = "stopped"


class CycleScheduler:
    """
    Runs probe cycles on a fixed interval.

    A cycle probes every endpoint concurrently, waits for all of them, then
    reports once. The first cycle starts immediately. Ticks that fall due
    while a cycle is still running collapse into one pending tick, so a slow
    cycle delays the next one but never doubles it up.
    """

    def __init__(
        self,
        endpoints: List[EndpointDescriptor],
        executor: ProbeExecutor,
        ledger: AvailabilityLedger,
        reporter: Reporter,
        interval: float = 15.0,
        metrics_manager: Optional[MetricsManager] = None,
    ):
        self.endpoints = endpoints
        self.executor = executor
        self.ledger = ledger
        self.reporter = reporter
        self.interval = interval
        self.metrics_manager = metrics_manager
        self.state = SchedulerState.IDLE
        self.cycles_completed = 0
        self._stop_event = asyncio.Event()

    async def _probe_and_record(self, endpoint: EndpointDescriptor) -> ProbeOutcome:
        outcome = await self.executor.probe(endpoint)
        await self.ledger.record_outcome(outcome)
        if self.metrics_manager:
            self.metrics_manager.observe_probe(outcome)
        return outcome

    async def run_cycle(self) -> List[ProbeOutcome]:
        """
        Probe every endpoint once, concurrently, then report.

        Returns:
            List[ProbeOutcome]: Outcomes in endpoint order.
        """
        loop = asyncio.get_running_loop()
        started = loop.time()
        self.state = SchedulerState.RUNNING_CYCLE
        try:
            outcomes = await asyncio.gather(
                *(self._probe_and_record(endpoint) for endpoint in self.endpoints)
            )
            await self.reporter.report()
        finally:
            if self.state is SchedulerState.RUNNING_CYCLE:
                self.state = SchedulerState.IDLE
        self.cycles_completed += 1
        down = sum(1 for outcome in outcomes if not outcome.success)
        logger.debug(
            f"Cycle {self.cycles_completed} finished in {format_latency(loop.time() - started)}: "
            f"{len(outcomes) - down} up, {down} down"
        )
        return list(outcomes)

    async def _wait_until(self, deadline: float) -> bool:
        """
        Sleep until ``deadline`` on the loop clock or until stopped.

        Returns:
            bool: True if the deadline was reached, False if stopped.
        """
        delay = deadline - asyncio.get_running_loop().time()
        if delay <= 0:
            return not self._stop_event.is_set()
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return True
        return False

    def _next_tick(self, tick: float, now: float) -> float:
        # First tick strictly after ``now`` on the tick grid; missed ticks are dropped.
        if now < tick:
            return tick + self.interval
        missed = math.floor((now - tick) / self.interval) + 1
        return tick + missed * self.interval

    async def run(self):
        loop = asyncio.get_running_loop()
        tick = loop.time() + self.interval

        logger.info("Starting initial health check...")
        await self.run_cycle()

        while not self._stop_event.is_set():
            if not await self._wait_until(tick):
                break
            tick = self._next_tick(tick, loop.time())
            logger.info("Starting new health check cycle...")
            await self.run_cycle()

        self.state = SchedulerState.STOPPED
        logger.info(f"Scheduler stopped after {self.cycles_completed} cycles")

    def stop(self):
        self._stop_event.set()
        self.state = SchedulerState.STOPPED
