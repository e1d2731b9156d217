"""Metrics collection for the executor."""

from dataclasses import dataclass, field
from typing import ClassVar

from httpexec.errors import ExecutionErrorClass


@dataclass
class ExecutorMetrics:
    """Metrics for executor calls.

    Singleton class that tracks request counts, retries, and failures.
    """

    http_requests_total: dict[int, int] = field(default_factory=dict)
    http_retry_total: int = 0
    http_failures_total: dict[str, int] = field(default_factory=dict)
    http_bytes_total: int = 0
    http_duration_ms_total: float = 0.0
    http_call_count: int = 0

    _instance: ClassVar["ExecutorMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "ExecutorMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_response(self, status_code: int, bytes_received: int) -> None:
        """Record a received HTTP response.

        Args:
            status_code: HTTP status code.
            bytes_received: Number of body bytes read.
        """
        self.http_requests_total[status_code] = (
            self.http_requests_total.get(status_code, 0) + 1
        )
        self.http_bytes_total += bytes_received

    def record_retry(self) -> None:
        """Record a retry attempt."""
        self.http_retry_total += 1

    def record_failure(self, error_class: ExecutionErrorClass) -> None:
        """Record a terminal failure without a response.

        Args:
            error_class: Classification of the failure.
        """
        key = error_class.value
        self.http_failures_total[key] = self.http_failures_total.get(key, 0) + 1

    def record_call(self, duration_ms: float) -> None:
        """Record a completed executor call.

        Args:
            duration_ms: Duration across all attempts in milliseconds.
        """
        self.http_call_count += 1
        self.http_duration_ms_total += duration_ms

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary."""
        return {
            "http_requests_total": dict(self.http_requests_total),
            "http_retry_total": self.http_retry_total,
            "http_failures_total": dict(self.http_failures_total),
            "http_bytes_total": self.http_bytes_total,
            "http_duration_ms_total": self.http_duration_ms_total,
            "http_call_count": self.http_call_count,
        }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average call duration."""
        if self.http_call_count == 0:
            return 0.0
        return self.http_duration_ms_total / self.http_call_count
