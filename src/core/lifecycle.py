import asyncio
import logging
import signal
from typing import Optional

from core.cycle_scheduler import CycleScheduler

logger = logging.getLogger(__name__)

TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class LifecycleController:
    """
    Owns the scheduler task and stops it when a termination signal arrives.

    Handlers can be installed before the scheduler exists, so a signal during
    startup ends the process the same way as one during a cycle. A signal
    cancels the running task right away: in-flight probes are abandoned and
    no final report is written.
    """

    def __init__(self, scheduler: Optional[CycleScheduler] = None):
        self.scheduler = scheduler
        self.received_signal: Optional[signal.Signals] = None
        self._task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def install_handlers(self):
        if self._loop is not None:
            return
        loop = asyncio.get_running_loop()
        for sig in TERMINATION_SIGNALS:
            try:
                loop.add_signal_handler(sig, self.handle_signal, sig)
            except NotImplementedError:
                # Windows event loops have no add_signal_handler.
                signal.signal(
                    sig,
                    lambda signum, frame: loop.call_soon_threadsafe(
                        self.handle_signal, signal.Signals(signum)
                    ),
                )
        self._loop = loop

    def remove_handlers(self):
        if self._loop is None:
            return
        for sig in TERMINATION_SIGNALS:
            try:
                self._loop.remove_signal_handler(sig)
            except NotImplementedError:
                default = signal.default_int_handler if sig == signal.SIGINT else signal.SIG_DFL
                signal.signal(sig, default)
        self._loop = None

    def handle_signal(self, sig: signal.Signals):
        if self.received_signal is not None:
            return
        self.received_signal = sig
        logger.info(f"Received signal {sig.name}. Exiting program.")
        if self.scheduler is not None:
            self.scheduler.stop()
        if self._task and not self._task.done():
            self._task.cancel()

    async def run(self, scheduler: Optional[CycleScheduler] = None) -> int:
        """
        Run the scheduler until it is stopped by a signal.

        Returns immediately when a signal already arrived during startup.

        Returns:
            int: Process exit code (0 on signal-driven shutdown).
        """
        if scheduler is not None:
            self.scheduler = scheduler
        self.install_handlers()
        try:
            if self.received_signal is None:
                self._task = asyncio.create_task(self.scheduler.run())
                await self._task
        except asyncio.CancelledError:
            if self.received_signal is None:
                raise
        finally:
            self.remove_handlers()
        return 0
