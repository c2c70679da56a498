"""
Pydantic models for request/response validation.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List


class DeliveryBase(BaseModel):
    """Shared base — allows construction by Python name or alias."""
    model_config = ConfigDict(populate_by_name=True)


# ── Inbound Events ──────────────────────────────────────────────────

class InboundEvent(BaseModel):
    """Envelope of every event the bus relays to /events."""
    type: str = Field(..., min_length=1, description="Domain event type, e.g. OrderProcessed")
    data: Any = Field(None, description="Event payload; its shape depends on the type")


# ── Commands ────────────────────────────────────────────────────────

class CreateDeliveryRequest(DeliveryBase):
    """Create a delivery; the order payload is relayed to the bus as OrderCreated."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    user_id: Any = Field(..., alias="userId", description="Ordering user, opaque")
    time: Any = Field(..., description="Requested delivery time, opaque")
    foods: List[Any] = Field(..., description="Ordered items, opaque")
    total_price: Any = Field(..., alias="totalPrice", description="Order total, opaque")

    @field_validator("user_id", "time", "total_price")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v

    def to_order_payload(self) -> dict:
        """The order as the rest of the system sees it (camelCase, extras kept)."""
        return self.model_dump(by_alias=True)


class AssignDriverRequest(DeliveryBase):
    """Assign a driver to an ordered delivery."""
    delivery_id: str = Field(..., alias="_id", min_length=1)
    driver_id: str = Field(..., alias="driverId", min_length=1)


class CompleteDeliveryRequest(DeliveryBase):
    """Mark a delivery as delivered."""
    delivery_id: str = Field(..., alias="_id", min_length=1)


# ── Responses ───────────────────────────────────────────────────────

class MessageResponse(BaseModel):
    message: str


class DeliveryResponse(BaseModel):
    delivery: Dict[str, Any]
    message: str

