import asyncio
import os
import signal
import sys
import unittest
from unittest.mock import MagicMock

from core.lifecycle import LifecycleController


class TestLifecycleController(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.scheduler = MagicMock()
        self.scheduler_started = asyncio.Event()
        self.scheduler_cancelled = False

        async def run_forever():
            self.scheduler_started.set()
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.scheduler_cancelled = True
                raise

        self.scheduler.run = run_forever
        self.controller = LifecycleController(self.scheduler)

    async def test_signal_stops_scheduler_and_exits_zero(self):
        task = asyncio.create_task(self.controller.run())
        await asyncio.wait_for(self.scheduler_started.wait(), timeout=1)
        with self.assertLogs("core.lifecycle", level="INFO") as logs:
            self.controller.handle_signal(signal.SIGTERM)
        code = await asyncio.wait_for(task, timeout=1)
        self.assertEqual(code, 0)
        self.assertTrue(self.scheduler_cancelled)
        self.scheduler.stop.assert_called_once()
        self.assertEqual(self.controller.received_signal, signal.SIGTERM)
        self.assertIn("Received signal SIGTERM. Exiting program.", logs.output[0])

    async def test_repeated_signals_are_ignored(self):
        task = asyncio.create_task(self.controller.run())
        await asyncio.wait_for(self.scheduler_started.wait(), timeout=1)
        self.controller.handle_signal(signal.SIGINT)
        self.controller.handle_signal(signal.SIGTERM)
        await asyncio.wait_for(task, timeout=1)
        self.scheduler.stop.assert_called_once()
        self.assertEqual(self.controller.received_signal, signal.SIGINT)

    @unittest.skipIf(sys.platform == "win32", "POSIX signals only")
    async def test_real_signal_is_handled(self):
        task = asyncio.create_task(self.controller.run())
        await asyncio.wait_for(self.scheduler_started.wait(), timeout=1)
        os.kill(os.getpid(), signal.SIGINT)
        code = await asyncio.wait_for(task, timeout=1)
        self.assertEqual(code, 0)
        self.assertEqual(self.controller.received_signal, signal.SIGINT)

    async def test_signal_before_run_skips_scheduler(self):
        controller = LifecycleController()
        controller.install_handlers()
        controller.handle_signal(signal.SIGINT)
        code = await controller.run(self.scheduler)
        self.assertEqual(code, 0)
        self.assertFalse(self.scheduler_started.is_set())
        self.scheduler.stop.assert_not_called()

    @unittest.skipIf(sys.platform == "win32", "POSIX signals only")
    async def test_handlers_installed_before_scheduler_exists(self):
        controller = LifecycleController()
        controller.install_handlers()
        os.kill(os.getpid(), signal.SIGTERM)
        await asyncio.sleep(0.05)
        self.assertEqual(controller.received_signal, signal.SIGTERM)
        code = await controller.run(self.scheduler)
        self.assertEqual(code, 0)
        self.assertFalse(self.scheduler_started.is_set())

    async def test_outside_cancellation_propagates(self):
        task = asyncio.create_task(self.controller.run())
        await asyncio.wait_for(self.scheduler_started.wait(), timeout=1)
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task
        self.scheduler.stop.assert_not_called()


if __name__ == "__main__":
    unittest.main()
