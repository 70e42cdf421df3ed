import asyncio
import logging
from typing import Dict, Iterable, List

from contracts.availability import AvailabilityRecord
from contracts.endpoint import EndpointDescriptor
from contracts.probe_outcome import ProbeOutcome

logger = logging.getLogger(__name__)


class AvailabilityLedger:
    """
    Cumulative availability statistics keyed by endpoint URL.

    Every record has its own lock, so probes for different URLs never wait
    on each other while updates to one record stay atomic.
    """

    def __init__(self, endpoints: Iterable[EndpointDescriptor] = ()):
        """
        Initialize the ledger with one empty record per distinct URL.

        Args:
            endpoints (Iterable[EndpointDescriptor]): Endpoints to pre-allocate.
        """
        self._records: Dict[str, AvailabilityRecord] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        for endpoint in endpoints:
            self._ensure(endpoint.url)
        logger.info(f"AvailabilityLedger initialized with {len(self._records)} URLs")

    def _ensure(self, url: str) -> asyncio.Lock:
        # No await between lookup and insert, so this cannot race.
        if url not in self._records:
            self._records[url] = AvailabilityRecord()
            self._locks[url] = asyncio.Lock()
        return self._locks[url]

    @property
    def urls(self) -> List[str]:
        return list(self._records)

    async def record_outcome(self, outcome: ProbeOutcome):
        """
        Fold one probe outcome into the record for its URL.

        Failed probes only bump ``failure_count``; successful ones also feed
        the latency sum and extrema.
        """
        async with self._ensure(outcome.url):
            record = self._records[outcome.url]
            if outcome.success:
                record.success_count += 1
                record.total_latency += outcome.latency
                if record.min_latency is None or outcome.latency < record.min_latency:
                    record.min_latency = outcome.latency
                if record.max_latency is None or outcome.latency > record.max_latency:
                    record.max_latency = outcome.latency
            else:
                record.failure_count += 1
            logger.debug(
                f"Recorded {'success' if outcome.success else 'failure'} for {outcome.url}: "
                f"{record.success_count} up / {record.failure_count} down"
            )

    async def get(self, url: str) -> AvailabilityRecord:
        """
        Return a copy of the record for ``url``.

        Raises:
            KeyError: If the URL was never registered or probed.
        """
        if url not in self._records:
            raise KeyError(url)
        async with self._locks[url]:
            return self._records[url].model_copy()
