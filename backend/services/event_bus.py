"""
Event Bus client — publishes domain events and registers subscriptions.

The bus is a plain HTTP relay:
    POST {bus}/events     body {type, data}           → forwarded to subscribers
    POST {bus}/subscribe  body {eventTypes, URL}      → once, at startup

Publishing from request handlers is fire-and-forget: publish_detached()
schedules the POST as an asyncio task and returns immediately. The task's
failure is drained into the log and the metrics by a done-callback, so a slow
or dead bus never holds up a response and never rolls back a state change
that is already persisted. There are no retries here; redelivery is the
producer's job.
"""
import asyncio
import logging
from typing import Optional

import httpx

from exceptions import EventBusError, SubscriptionError
from services.event_bus_metrics import EventBusMetrics

logger = logging.getLogger(__name__)


class EventBusClient:
    """HTTP client for the central event bus."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._pending: set[asyncio.Task] = set()
        self.metrics = EventBusMetrics()

    # ── Publish ─────────────────────────────────────────────────────

    async def publish(self, event: dict) -> None:
        """
        POST one event to the bus.

        Raises:
            EventBusError if the bus is unreachable or answers with an error
        """
        try:
            response = await self._client.post(f"{self.base_url}/events", json=event)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise EventBusError(f"Publishing {event.get('type')} failed: {e}") from e

    def publish_detached(self, event: dict) -> asyncio.Task:
        """Schedule publish() in the background; errors are only logged."""
        task = asyncio.create_task(self.publish(event))
        self._pending.add(task)
        self.metrics.record_scheduled()
        task.add_done_callback(lambda t: self._on_publish_done(t, event))
        return task

    def _on_publish_done(self, task: asyncio.Task, event: dict) -> None:
        self._pending.discard(task)
        self.metrics.record_settled()
        if task.cancelled():
            logger.warning(f"Publish of {event.get('type')} cancelled")
            return
        exc = task.exception()
        if exc is not None:
            self.metrics.record_failed(str(exc))
            logger.error(f"Event bus publish failed: {exc}")
            return
        self.metrics.record_published()
        logger.debug(f"Published {event.get('type')} to event bus")

    # ── Subscribe ───────────────────────────────────────────────────

    async def subscribe(self, event_types: list[str], callback_url: str) -> None:
        """
        Register interest in `event_types`, relayed to `callback_url`.

        Raises:
            SubscriptionError if the bus rejects or cannot be reached
        """
        payload = {"eventTypes": event_types, "URL": callback_url}
        try:
            response = await self._client.post(f"{self.base_url}/subscribe", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise SubscriptionError(f"Subscribing to {event_types} failed: {e}") from e

        self.metrics.record_subscribed(event_types)
        logger.info(f"Subscribed to {', '.join(event_types)} -> {callback_url}")

    async def subscribe_with_retry(
        self,
        event_types: list[str],
        callback_url: str,
        attempts: int = 5,
        backoff_seconds: float = 2.0,
    ) -> None:
        """
        subscribe() with linear backoff, for a bus that may still be starting.

        Raises:
            SubscriptionError once every attempt has failed
        """
        attempts = max(1, attempts)
        for attempt in range(1, attempts + 1):
            try:
                await self.subscribe(event_types, callback_url)
                return
            except SubscriptionError as e:
                if attempt == attempts:
                    raise
                delay = backoff_seconds * attempt
                logger.warning(f"Subscription attempt {attempt}/{attempts} failed ({e}); retrying in {delay}s")
                await asyncio.sleep(delay)

    # ── Lifecycle ───────────────────────────────────────────────────

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self, timeout: float = 5.0) -> None:
        """Wait for in-flight publishes; cancel whatever is left after `timeout`."""
        if not self._pending:
            return
        tasks = list(self._pending)
        done, not_done = await asyncio.wait(tasks, timeout=timeout)
        for task in not_done:
            task.cancel()
        if not_done:
            await asyncio.gather(*not_done, return_exceptions=True)
            logger.warning(f"Dropped {len(not_done)} unpublished event(s) on shutdown")

    async def aclose(self, timeout: float = 5.0) -> None:
        await self.drain(timeout)
        await self._client.aclose()

    def get_status(self) -> dict:
        """Status for the /eventbus/status endpoint."""
        return {"base_url": self.base_url, **self.metrics.to_dict()}
