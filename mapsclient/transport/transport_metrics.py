"""
Per-call metrics reporting.

The client reports the endpoint name, wall-clock latency and outcome of
every call to a MetricsReporter. Outcomes are "OK" or "ZERO_RESULTS" for
successes, otherwise the outcome label of the raised error.
"""

from abc import ABC, abstractmethod

from ..config.logger_module import log_info


class MetricsReporter(ABC):
    """Sink for per-call measurements."""

    @abstractmethod
    def record(self, endpoint: str, latency: float, outcome: str) -> None:
        """
        Record one completed call.

        Args:
            endpoint: Endpoint name from the catalog
            latency: Seconds from submission to result
            outcome: Success status or error outcome label
        """
        pass


class NoOpReporter(MetricsReporter):
    """Discards every measurement."""

    def record(self, endpoint: str, latency: float, outcome: str) -> None:
        return None


class LoggingReporter(MetricsReporter):
    """Writes one log line per call."""

    def record(self, endpoint: str, latency: float, outcome: str) -> None:
        log_info(f"{endpoint} completed in {latency * 1000:.1f}ms: {outcome}")
