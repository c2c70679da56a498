"""
Inbound event endpoint — the callback the event bus relays subscribed events to.
"""
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from deps import get_delivery_service, get_event_bus
from domain.constants import MSG_DELIVERY_ADDED
from models import InboundEvent
from services.delivery_service import DeliveryService
from services.event_bus import EventBusClient
from utils.validators import parse_body, read_json

logger = logging.getLogger(__name__)

router = APIRouter(tags=["events"])


@router.post("/events", status_code=status.HTTP_201_CREATED)
async def receive_event(
    request: Request,
    service: DeliveryService = Depends(get_delivery_service),
):
    """
    Consume a relayed domain event.

    OrderProcessed with status "ordered" creates a delivery (201); any other
    status is rejected as Insufficient Funds (404). Event types this service
    does not handle are acknowledged with an empty 204.
    """
    event = parse_body(InboundEvent, await read_json(request))
    delivery = await service.handle_order_event(event)
    if delivery is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"delivery": delivery.to_dict(), "message": MSG_DELIVERY_ADDED},
    )


@router.get("/eventbus/status")
async def get_event_bus_status(event_bus: EventBusClient = Depends(get_event_bus)):
    """Publisher counters and subscription state."""
    return event_bus.get_status()
