"""Request counters for the remote webcam."""

from collections import Counter
from dataclasses import dataclass, field
from typing import ClassVar

from webcam_fetch.fetch.models import FetchErrorClass, FetchResult


@dataclass
class FetchMetrics:
    """Process-wide counters for HEAD and GET requests.

    Use ``get_instance`` to obtain the shared instance. Requests that never
    produced a response are only visible in ``failures`` and the duration
    totals. Memory use stays constant however many requests are made.
    """

    requests: Counter[str] = field(default_factory=Counter)
    statuses: Counter[int] = field(default_factory=Counter)
    failures: Counter[FetchErrorClass] = field(default_factory=Counter)
    bytes_received: int = 0
    duration_count: int = 0
    duration_ms_total: float = 0.0
    max_duration_ms: float = 0.0

    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get the shared instance, creating it on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the shared instance."""
        cls._instance = None

    def record_response(self, result: FetchResult) -> None:
        """Count a request that received a response.

        Non-2xx responses are also counted as ``HTTP_STATUS`` failures.

        Args:
            result: The completed request.
        """
        self.requests[result.method] += 1
        self.statuses[result.status_code] += 1
        self.bytes_received += result.body_size
        if not result.is_success:
            self.failures[FetchErrorClass.HTTP_STATUS] += 1

    def record_failure(self, error_class: FetchErrorClass) -> None:
        """Count a request that failed before a result was produced."""
        self.failures[error_class] += 1

    def record_duration(self, duration_ms: float) -> None:
        self.duration_count += 1
        self.duration_ms_total += duration_ms
        self.max_duration_ms = max(self.max_duration_ms, duration_ms)

    @property
    def total_requests(self) -> int:
        """Number of requests that received a response."""
        return sum(self.requests.values())

    @property
    def avg_duration_ms(self) -> float:
        """Mean wall time per request, failed ones included."""
        if not self.duration_count:
            return 0.0
        return self.duration_ms_total / self.duration_count

    def snapshot(self) -> dict[str, int | float | dict[str, int]]:
        """Flatten the counters for a log event.

        Returns:
            JSON-friendly mapping with string keys throughout.
        """
        return {
            "requests": dict(self.requests),
            "statuses": {str(code): count for code, count in self.statuses.items()},
            "failures": {error.value: count for error, count in self.failures.items()},
            "bytes_received": self.bytes_received,
            "avg_duration_ms": round(self.avg_duration_ms, 2),
            "max_duration_ms": round(self.max_duration_ms, 2),
        }
