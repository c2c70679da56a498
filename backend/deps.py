"""
Shared FastAPI dependencies.

The event bus client is created once in the app lifespan and kept on
app.state; the delivery service is assembled per request around the
request's DB session.
"""

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from services.delivery_service import DeliveryService
from services.delivery_store import DeliveryStore
from services.event_bus import EventBusClient


def get_event_bus(request: Request) -> EventBusClient:
    return request.app.state.event_bus


def get_delivery_service(
    db: AsyncSession = Depends(get_db),
    event_bus: EventBusClient = Depends(get_event_bus),
) -> DeliveryService:
    return DeliveryService(DeliveryStore(db), event_bus)
