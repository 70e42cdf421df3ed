import asyncio
import logging
import time

import httpx

from contracts.endpoint import EndpointDescriptor
from contracts.probe_outcome import ProbeOutcome
from core.formatting import format_latency

logger = logging.getLogger(__name__)


class ProbeExecutor:
    """
    Sends one HTTP request per endpoint and classifies it as UP or DOWN.

    A probe is UP when a response arrives with a 2xx status faster than
    ``latency_threshold``. Anything else, including transport errors and
    timeouts, is DOWN.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        latency_threshold: float = 0.5,
        request_timeout: float = 1.0,
    ):
        """
        Args:
            client (httpx.AsyncClient): Shared client used for every probe.
            latency_threshold (float): Seconds; responses at or above it are DOWN.
            request_timeout (float): Deadline in seconds for the whole request,
                from dispatch until the response headers arrive.
        """
        self.client = client
        self.latency_threshold = latency_threshold
        self.request_timeout = request_timeout

    def classify(self, status_code: int, latency: float) -> bool:
        return 200 <= status_code < 300 and latency < self.latency_threshold

    async def _send(self, endpoint: EndpointDescriptor) -> httpx.Response:
        request = self.client.build_request(
            endpoint.method,
            endpoint.url,
            headers=endpoint.headers,
            timeout=self.request_timeout,
        )
        # Returns once the headers are in; the body is never read.
        return await self.client.send(request, stream=True)

    async def probe(self, endpoint: EndpointDescriptor) -> ProbeOutcome:
        start = time.perf_counter()
        try:
            # httpx timeouts apply per phase, so the whole exchange gets one deadline
            resp = await asyncio.wait_for(self._send(endpoint), self.request_timeout)
        except Exception as e:
            latency = time.perf_counter() - start
            if isinstance(e, asyncio.TimeoutError):
                error = f"Timeout: no response within {format_latency(self.request_timeout)}"
            else:
                error = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            logger.warning(
                f"DOWN: {endpoint.name} ({endpoint.url}) - Error: {error}, "
                f"Latency: {format_latency(latency)}"
            )
            return ProbeOutcome(
                url=endpoint.url,
                name=endpoint.name,
                success=False,
                latency=latency,
                error=error,
            )
        latency = time.perf_counter() - start
        try:
            await resp.aclose()
        except httpx.HTTPError as e:
            logger.debug(f"Error closing response from {endpoint.url}: {e}")

        success = self.classify(resp.status_code, latency)
        message = (
            f"{endpoint.name} ({endpoint.url}) - Status: {resp.status_code}, "
            f"Latency: {format_latency(latency)}"
        )
        if success:
            logger.info(f"UP: {message}")
        else:
            logger.warning(f"DOWN: {message}")
        return ProbeOutcome(
            url=endpoint.url,
            name=endpoint.name,
            success=success,
            latency=latency,
            status_code=resp.status_code,
        )
