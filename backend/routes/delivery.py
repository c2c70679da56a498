"""
Delivery endpoints — create, assign a driver, complete.
"""
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from deps import get_delivery_service
from domain.constants import MSG_DELIVERY_COMPLETED, MSG_DELIVERY_CREATED, MSG_DRIVER_ASSIGNED
from models import AssignDriverRequest, CompleteDeliveryRequest, CreateDeliveryRequest, DeliveryResponse
from services.delivery_service import DeliveryService
from utils.validators import parse_body, read_json

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/delivery", tags=["delivery"])


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_delivery(
    request: Request,
    service: DeliveryService = Depends(get_delivery_service),
):
    """Relay a new order to the event bus; returns the pending delivery."""
    body = parse_body(CreateDeliveryRequest, await read_json(request))
    pending = await service.create_delivery(body)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"delivery": pending, "message": MSG_DELIVERY_CREATED},
    )


@router.put("/driver/assign", response_model=DeliveryResponse)
async def assign_driver(
    request: Request,
    service: DeliveryService = Depends(get_delivery_service),
):
    """Assign a driver; the delivery moves from ordered to in_transit."""
    body = parse_body(AssignDriverRequest, await read_json(request))
    delivery = await service.assign_driver(body)
    return {"delivery": delivery.to_dict(), "message": MSG_DRIVER_ASSIGNED}


@router.put("/complete", response_model=DeliveryResponse)
async def complete_delivery(
    request: Request,
    service: DeliveryService = Depends(get_delivery_service),
):
    """Mark a delivery as delivered."""
    body = parse_body(CompleteDeliveryRequest, await read_json(request))
    delivery = await service.complete_delivery(body)
    return {"delivery": delivery.to_dict(), "message": MSG_DELIVERY_COMPLETED}
