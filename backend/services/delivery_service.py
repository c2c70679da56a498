"""
Delivery Service — orchestrates the lifecycle state machine.

Wires the pure decisions in domain.state_machine to the record store and the
event bus:

    inbound command → load record → decide → compare-and-set → publish (detached)

Outbound events:
    OrderCreated     — on create_delivery(), before anything is persisted.
                       The delivery itself is written when the bus round-trips
                       the processed order back as OrderProcessed.
    DeliveryUpdated  — after every persisted status change.

Replays are harmless: an OrderProcessed event carrying an `_id` that is already
stored returns the stored delivery, and re-completing a delivered record
returns it without a second publish.
"""
import logging
from typing import Optional

from db_models import Delivery
from domain import state_machine
from domain.constants import DELIVERY_PAYLOAD_TYPE
from domain.enums import EventType
from domain.errors import BadRequestError, InvalidTransitionError, NotFoundError
from domain.state_machine import AssignDriver, Command, CompleteDelivery
from models import AssignDriverRequest, CompleteDeliveryRequest, CreateDeliveryRequest, InboundEvent
from services.delivery_store import DeliveryStore, DuplicateDeliveryError
from services.event_bus import EventBusClient

logger = logging.getLogger(__name__)

# Compare-and-set rounds before giving up on a hotly contended delivery
MAX_UPDATE_ATTEMPTS = 3


class DeliveryService:
    """Externally visible delivery operations."""

    def __init__(self, store: DeliveryStore, event_bus: EventBusClient):
        self.store = store
        self.event_bus = event_bus

    # ── Inbound events ──────────────────────────────────────────────

    async def handle_order_event(self, event: InboundEvent) -> Optional[Delivery]:
        """
        Consume an event relayed by the bus.

        Returns:
            The created (or previously created) delivery, or None when the
            event type is not one this service reacts to.

        Raises:
            InsufficientFundsError if the order was not paid for
            BadRequestError if the order payload is incomplete or not an object
        """
        if event.type != EventType.ORDER_PROCESSED.value:
            logger.info(f"Ignoring event of type {event.type}")
            return None

        order = event.data
        if not isinstance(order, dict):
            raise BadRequestError(details={"fields": ["data"]})
        state_machine.decide_creation(order)
        values = state_machine.split_order_payload(order)

        if values["id"] is not None:
            existing = await self.store.find_by_id(values["id"])
            if existing is not None:
                logger.info(f"Duplicate OrderProcessed for delivery {existing.id}; returning stored record")
                return existing

        try:
            delivery = await self.store.insert_one(status="ordered", **values)
        except DuplicateDeliveryError as e:
            # Lost an insert race against a redelivery of the same event
            existing = await self.store.find_by_id(e.delivery_id)
            if existing is None:
                raise
            return existing

        logger.info(f"Delivery {delivery.id} created for user {delivery.user_id}")
        return delivery

    # ── Commands ────────────────────────────────────────────────────

    async def create_delivery(self, request: CreateDeliveryRequest) -> dict:
        """
        Relay a new order to the bus and return the pending record.

        Nothing is persisted here; a failed publish is logged by the bus
        client and does not fail the caller.
        """
        pending = {**request.to_order_payload(), "type": DELIVERY_PAYLOAD_TYPE}
        self.event_bus.publish_detached({"type": EventType.ORDER_CREATED.value, "data": pending})
        logger.info(f"OrderCreated relayed for user {request.user_id}")
        return pending

    async def assign_driver(self, request: AssignDriverRequest) -> Delivery:
        """
        Move an ordered delivery to in_transit with its driver.

        Raises:
            NotFoundError if no delivery has this id
            InvalidTransitionError if the delivery is past ordered
        """
        return await self._apply(request.delivery_id, AssignDriver(driver_id=request.driver_id))

    async def complete_delivery(self, request: CompleteDeliveryRequest) -> Delivery:
        """
        Mark a delivery as delivered; completing it again is a no-op.

        Raises:
            NotFoundError if no delivery has this id
        """
        return await self._apply(request.delivery_id, CompleteDelivery())

    # ── Internals ───────────────────────────────────────────────────

    async def _apply(self, delivery_id: str, command: Command) -> Delivery:
        for _ in range(MAX_UPDATE_ATTEMPTS):
            delivery = await self.store.find_by_id(delivery_id)
            if delivery is None:
                raise NotFoundError("Delivery", delivery_id)

            previous = delivery.status
            decision = state_machine.decide(previous, command, driver_id=delivery.driver_id)
            if decision.is_noop:
                logger.info(f"Delivery {delivery_id} already {previous}; nothing to do")
                return delivery

            updated = await self.store.update_if_status(delivery_id, previous, decision.changes)
            if updated is None:
                logger.info(f"Delivery {delivery_id} changed concurrently; re-reading")
                continue

            logger.info(f"Delivery {delivery_id}: {previous} -> {updated.status}")
            if decision.emits:
                self.event_bus.publish_detached(
                    {"type": EventType.DELIVERY_UPDATED.value, "data": updated.to_dict()}
                )
            return updated

        raise InvalidTransitionError(
            previous,
            decision.status.value,
            details={"id": delivery_id, "attempts": MAX_UPDATE_ATTEMPTS},
        )
