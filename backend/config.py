"""
Configuration management for the Deliveries service.

Loads settings from .env via pydantic-settings.

Notes:
    - The event bus subscription is required in production; a service that
      starts unsubscribed silently misses every OrderProcessed event.
    - validate_production_settings() enforces strict CORS in production.
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/deliveries.db"

    # ── Event Bus ───────────────────────────────────────────────────
    event_bus_url: str = "http://eventbus:4000"
    service_url: str = "http://deliveries:4001"  # base of our own /events callback
    event_subscriptions: str = "OrderProcessed"
    event_bus_timeout_seconds: float = 5.0
    subscribe_on_startup: bool = True
    subscribe_attempts: int = 5
    subscribe_backoff_seconds: float = 2.0

    # ── Seed Data ───────────────────────────────────────────────────
    seed_on_startup: bool = True
    restaurants_seed_file: str = "seed/restaurants.json"

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"
    port: int = 4001

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "*"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # allow unknown .env keys without crashing
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def event_subscriptions_list(self) -> List[str]:
        """Event types this service registers for on the bus."""
        return [t.strip() for t in self.event_subscriptions.split(",") if t.strip()]

    @property
    def callback_url(self) -> str:
        """URL the event bus relays subscribed events to."""
        return f"{self.service_url.rstrip('/')}/events"

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup.
        """
        if self.environment == "production":
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            if not self.subscribe_on_startup:
                raise ValueError(
                    "SUBSCRIBE_ON_STARTUP must be true in production. "
                    "Without it no OrderProcessed events are ever received."
                )
            if not self.event_subscriptions_list:
                raise ValueError("EVENT_SUBSCRIPTIONS must name at least one event type.")
            logger.info("Production settings validated")
        else:
            warnings = []
            if not self.subscribe_on_startup:
                warnings.append("SUBSCRIBE_ON_STARTUP=false (no inbound events will arrive)")
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            for w in warnings:
                logger.warning(w)


# Global settings instance
settings = Settings()
