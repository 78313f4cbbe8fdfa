"""
Prometheus metrics for the valuation and refresh pipeline.

Defines and exposes metrics for:
- Market data requests and latency
- Refresh outcomes per holding
- Token verification failures

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import Counter, Histogram, start_http_server

from dividend_tracker.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class MetricsCollector:
    """
    Prometheus metrics collector for the dividend tracker.

    Usage:
        metrics = get_metrics()
        metrics.record_market_data_request("quote", "success", 0.21)
        metrics.record_refresh_outcome("updated")
    """

    def __init__(self) -> None:
        self.market_data_requests = Counter(
            "dividend_tracker_market_data_requests_total",
            "Total requests to the market data provider",
            ["endpoint", "outcome"],  # outcome: success, fallback, error
        )

        self.market_data_latency = Histogram(
            "dividend_tracker_market_data_latency_seconds",
            "Time to complete a market data request",
            ["endpoint"],
            buckets=LATENCY_BUCKETS,
        )

        self.refresh_outcomes = Counter(
            "dividend_tracker_refresh_outcomes_total",
            "Holdings evaluated by batch refresh",
            ["outcome"],  # updated, unchanged, failed
        )

        self.refresh_duration = Histogram(
            "dividend_tracker_refresh_duration_seconds",
            "Duration of a full refresh pass",
            buckets=(1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0),
        )

        self.auth_failures = Counter(
            "dividend_tracker_auth_failures_total",
            "Bearer tokens rejected by the verifier",
            ["reason"],
        )

    def start_server(self, port: int | None = None) -> None:
        """Start the Prometheus HTTP exposition server."""
        port = port or get_settings().metrics_port
        start_http_server(port)
        logger.info(f"Metrics server started on port {port}")

    def record_market_data_request(
        self, endpoint: str, outcome: str, latency: float | None = None
    ) -> None:
        """Record one market data call."""
        self.market_data_requests.labels(endpoint=endpoint, outcome=outcome).inc()
        if latency is not None:
            self.market_data_latency.labels(endpoint=endpoint).observe(latency)

    def record_refresh_outcome(self, outcome: str) -> None:
        """Record the outcome for one holding in a refresh pass."""
        self.refresh_outcomes.labels(outcome=outcome).inc()

    def record_refresh_duration(self, seconds: float) -> None:
        self.refresh_duration.observe(seconds)

    def record_auth_failure(self, reason: str) -> None:
        self.auth_failures.labels(reason=reason).inc()


_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
