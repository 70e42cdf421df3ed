import logging
from typing import List, Optional

from contracts.endpoint import EndpointDescriptor
from core.availability_ledger import AvailabilityLedger
from core.formatting import format_latency
from core.metrics_manager import MetricsManager

logger = logging.getLogger(__name__)


class Reporter:
    """
    Renders cumulative availability per endpoint, in configured order.
    """

    def __init__(
        self,
        endpoints: List[EndpointDescriptor],
        ledger: AvailabilityLedger,
        metrics_manager: Optional[MetricsManager] = None,
    ):
        self.endpoints = endpoints
        self.ledger = ledger
        self.metrics_manager = metrics_manager

    async def render(self) -> str:
        lines = []
        for endpoint in self.endpoints:
            stats = await self.ledger.get(endpoint.url)
            percent = stats.availability_percent()
            if percent is None:
                lines.append(f"{endpoint.name} ({endpoint.url}) has no availability data yet.")
                continue

            lines.append(
                f"{endpoint.name} ({endpoint.url}) has {percent}% availability percentage"
            )
            lines.append(f"   Total Checks: {stats.total}")
            lines.append(f"   Successful Checks: {stats.success_count}")
            lines.append(f"   Failed Checks: {stats.failure_count}")
            if stats.average_latency is not None:
                lines.append(f"   Average Latency: {format_latency(stats.average_latency)}")
            else:
                lines.append("   Average Latency: N/A")
            if stats.min_latency is not None:
                lines.append(f"   Minimum Latency: {format_latency(stats.min_latency)}")
            if stats.max_latency is not None:
                lines.append(f"   Maximum Latency: {format_latency(stats.max_latency)}")
        return "\n".join(lines) + "\n"

    async def report(self) -> str:
        """
        Render the report, emit it on the report logger and update metrics.

        Returns:
            str: The rendered report block.
        """
        text = await self.render()
        logger.info(text)
        if self.metrics_manager:
            for endpoint in self.endpoints:
                percent = (await self.ledger.get(endpoint.url)).availability_percent()
                if percent is not None:
                    self.metrics_manager.set_availability(endpoint.name, endpoint.url, percent)
        return text
