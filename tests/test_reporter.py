import unittest

from contracts.endpoint import EndpointDescriptor
from contracts.probe_outcome import ProbeOutcome
from core.availability_ledger import AvailabilityLedger
from core.formatting import format_latency
from core.metrics_manager import MetricsManager
from core.reporter import Reporter


def _outcome(url, success, latency=0.1):
    return ProbeOutcome(url=url, name="n", success=success, latency=latency)


class TestFormatLatency(unittest.TestCase):
    def test_units(self):
        self.assertEqual(format_latency(0.0005), "500.000µs")
        self.assertEqual(format_latency(0.1), "100.000ms")
        self.assertEqual(format_latency(1.25), "1.250s")


class TestReporter(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.endpoints = [
            EndpointDescriptor(name="index", url="https://example.com/"),
            EndpointDescriptor(name="careers", url="https://example.com/careers"),
        ]
        self.ledger = AvailabilityLedger(self.endpoints)
        self.reporter = Reporter(self.endpoints, self.ledger)

    async def test_no_data_yet(self):
        text = await self.reporter.render()
        self.assertEqual(
            text,
            "index (https://example.com/) has no availability data yet.\n"
            "careers (https://example.com/careers) has no availability data yet.\n",
        )

    async def test_full_block(self):
        await self.ledger.record_outcome(_outcome("https://example.com/", True, 0.1))
        await self.ledger.record_outcome(_outcome("https://example.com/", True, 0.3))
        await self.ledger.record_outcome(_outcome("https://example.com/", False, 0.9))
        text = await self.reporter.render()
        self.assertIn(
            "index (https://example.com/) has 67% availability percentage\n"
            "   Total Checks: 3\n"
            "   Successful Checks: 2\n"
            "   Failed Checks: 1\n"
            "   Average Latency: 200.000ms\n"
            "   Minimum Latency: 100.000ms\n"
            "   Maximum Latency: 300.000ms\n",
            text,
        )

    async def test_only_failures(self):
        await self.ledger.record_outcome(_outcome("https://example.com/careers", False))
        text = await self.reporter.render()
        self.assertIn("careers (https://example.com/careers) has 0% availability percentage", text)
        self.assertIn("   Average Latency: N/A", text)
        self.assertNotIn("Minimum Latency", text)
        self.assertNotIn("Maximum Latency", text)

    async def test_rounding(self):
        await self.ledger.record_outcome(_outcome("https://example.com/", True))
        await self.ledger.record_outcome(_outcome("https://example.com/", False))
        await self.ledger.record_outcome(_outcome("https://example.com/", False))
        text = await self.reporter.render()
        self.assertIn("has 33% availability percentage", text)

    async def test_reporting_is_idempotent(self):
        await self.ledger.record_outcome(_outcome("https://example.com/", True))
        first = await self.reporter.report()
        second = await self.reporter.report()
        self.assertEqual(first, second)

    async def test_configured_order_and_shared_url(self):
        endpoints = [
            EndpointDescriptor(name="zeta", url="https://shared.example.com/"),
            EndpointDescriptor(name="alpha", url="https://other.example.com/"),
            EndpointDescriptor(name="beta", url="https://shared.example.com/"),
        ]
        ledger = AvailabilityLedger(endpoints)
        await ledger.record_outcome(_outcome("https://shared.example.com/", True))
        await ledger.record_outcome(_outcome("https://shared.example.com/", False))
        text = await Reporter(endpoints, ledger).render()

        headers = [line for line in text.splitlines() if not line.startswith("   ")]
        self.assertEqual(
            headers,
            [
                "zeta (https://shared.example.com/) has 50% availability percentage",
                "alpha (https://other.example.com/) has no availability data yet.",
                "beta (https://shared.example.com/) has 50% availability percentage",
            ],
        )
        self.assertEqual(text.count("   Total Checks: 2"), 2)

    async def test_report_goes_to_report_logger(self):
        await self.ledger.record_outcome(_outcome("https://example.com/", True))
        with self.assertLogs("core.reporter", level="INFO") as logs:
            text = await self.reporter.report()
        self.assertEqual(logs.records[0].getMessage(), text)

    async def test_report_updates_availability_gauge(self):
        metrics = MetricsManager()
        reporter = Reporter(self.endpoints, self.ledger, metrics_manager=metrics)
        await self.ledger.record_outcome(_outcome("https://example.com/", True))
        await self.ledger.record_outcome(_outcome("https://example.com/", False))
        await reporter.report()
        value = metrics.get_sample(
            "healthcheck_availability_percent",
            {"endpoint": "index", "url": "https://example.com/"},
        )
        self.assertEqual(value, 50.0)
        self.assertIsNone(
            metrics.get_sample(
                "healthcheck_availability_percent",
                {"endpoint": "careers", "url": "https://example.com/careers"},
            )
        )


if __name__ == "__main__":
    unittest.main()
