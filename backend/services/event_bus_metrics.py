"""
Event bus metrics for publish throughput and failure monitoring.

Simple in-memory counters; can be replaced with Prometheus later.
"""
import logging
import time
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class EventBusMetrics:
    """In-memory metrics for the event bus client."""

    published_total: int = 0
    publish_failures: int = 0
    pending: int = 0
    subscribed: bool = False
    subscribed_types: list[str] = field(default_factory=list)
    last_error: str | None = None
    last_published_at: float | None = None
    started_at: float = field(default_factory=time.monotonic)

    def record_scheduled(self) -> None:
        self.pending += 1

    def record_published(self) -> None:
        self.published_total += 1
        self.last_published_at = time.monotonic()

    def record_failed(self, error: str) -> None:
        self.publish_failures += 1
        self.last_error = error

    def record_settled(self) -> None:
        self.pending = max(0, self.pending - 1)

    def record_subscribed(self, event_types: list[str]) -> None:
        self.subscribed = True
        self.subscribed_types = list(event_types)

    def to_dict(self) -> dict:
        since_publish = None
        if self.last_published_at is not None:
            since_publish = round(time.monotonic() - self.last_published_at, 1)
        return {
            "subscribed": self.subscribed,
            "subscribed_types": self.subscribed_types,
            "published_total": self.published_total,
            "publish_failures": self.publish_failures,
            "pending": self.pending,
            "last_error": self.last_error,
            "seconds_since_last_publish": since_publish,
            "uptime_seconds": round(time.monotonic() - self.started_at, 1),
        }
