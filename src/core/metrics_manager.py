import logging
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, start_http_server

from contracts.probe_outcome import ProbeOutcome

logger = logging.getLogger(__name__)


class MetricsManager:
    """
    Prometheus collectors for probe results and reported availability.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize the MetricsManager and set up Prometheus metrics.

        Args:
            registry: Collector registry to register into. A private one is
                created when omitted so several managers can coexist.
        """
        self.registry = registry or CollectorRegistry()
        self.PROBES = Counter(
            "healthcheck_probes_total",
            "Probes completed, by outcome",
            ["endpoint", "url", "outcome"],
            registry=self.registry,
        )
        self.PROBE_LATENCY = Histogram(
            "healthcheck_probe_latency_seconds",
            "Latency of successful probes in seconds",
            ["url"],
            registry=self.registry,
        )
        self.AVAILABILITY = Gauge(
            "healthcheck_availability_percent",
            "Cumulative availability percentage as last reported",
            ["endpoint", "url"],
            registry=self.registry,
        )
        logger.info("MetricsManager initialized.")

    def observe_probe(self, outcome: ProbeOutcome):
        label = "up" if outcome.success else "down"
        self.PROBES.labels(endpoint=outcome.name, url=outcome.url, outcome=label).inc()
        if outcome.success:
            self.PROBE_LATENCY.labels(url=outcome.url).observe(outcome.latency)

    def set_availability(self, name: str, url: str, percent: int):
        self.AVAILABILITY.labels(endpoint=name, url=url).set(percent)

    def get_sample(self, name: str, labels: dict) -> Optional[float]:
        return self.registry.get_sample_value(name, labels)

    def serve(self, port: int):
        """
        Expose the collectors over HTTP on ``port``.
        """
        start_http_server(port, registry=self.registry)
        logger.info(f"Serving Prometheus metrics on port {port}")
