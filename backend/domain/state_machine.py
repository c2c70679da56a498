"""
Delivery lifecycle state machine.

Pure decision logic, no I/O: given the current state of a delivery and an
incoming command, decide the new state, the field changes to persist, and
whether a DeliveryUpdated event goes out. Errors are raised as DomainError
subclasses so the service can let them propagate to the HTTP layer untouched.

State Machine:
    (none) → ORDERED → IN_TRANSIT → DELIVERED
    ORDERED → DELIVERED   (complete without assignment)

Completion is accepted from ORDERED so that a missed or delayed assignment
does not strand a delivery. Replays of a command that already took effect
(complete on DELIVERED, the same driver on IN_TRANSIT) are no-op successes.
"""
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from domain.constants import REQUIRED_ORDER_FIELDS
from domain.enums import DeliveryStatus
from domain.errors import BadRequestError, InsufficientFundsError, InvalidTransitionError


VALID_TRANSITIONS = {
    DeliveryStatus.ORDERED: {DeliveryStatus.IN_TRANSIT, DeliveryStatus.DELIVERED},
    DeliveryStatus.IN_TRANSIT: {DeliveryStatus.DELIVERED},
    DeliveryStatus.DELIVERED: set(),  # terminal
}


def is_valid_transition(current: DeliveryStatus, target: DeliveryStatus) -> bool:
    return target in VALID_TRANSITIONS.get(DeliveryStatus(current), set())


# ── Commands ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AssignDriver:
    driver_id: str


@dataclass(frozen=True)
class CompleteDelivery:
    pass


Command = Union[AssignDriver, CompleteDelivery]


@dataclass(frozen=True)
class Decision:
    """Outcome of applying a command to a delivery."""
    status: DeliveryStatus
    changes: dict = field(default_factory=dict)
    emits: bool = False

    @property
    def is_noop(self) -> bool:
        return not self.changes


# ── Creation ────────────────────────────────────────────────────────

def decide_creation(order: dict) -> DeliveryStatus:
    """
    Validate an inbound order payload for creation.

    The embedded status is checked first: an order that was not paid for is a
    domain rejection regardless of what else the payload holds.
    """
    order_status = order.get("status")
    if order_status != DeliveryStatus.ORDERED.value:
        raise InsufficientFundsError(order_status)

    missing = [name for name in REQUIRED_ORDER_FIELDS if order.get(name) is None]
    if missing:
        raise BadRequestError(details={"missing": missing})

    return DeliveryStatus.ORDERED


# ── Mutations ───────────────────────────────────────────────────────

def decide(current: DeliveryStatus, command: Command, driver_id: Optional[str] = None) -> Decision:
    """
    Apply a command to a delivery in status `current`.

    `driver_id` is the driver already recorded on the delivery, if any.
    """
    current = DeliveryStatus(current)

    if isinstance(command, AssignDriver):
        return _decide_assign(current, command, driver_id)
    if isinstance(command, CompleteDelivery):
        return _decide_complete(current)
    raise TypeError(f"Unknown command: {command!r}")


def _decide_assign(current: DeliveryStatus, command: AssignDriver, driver_id: Optional[str]) -> Decision:
    if not command.driver_id:
        raise BadRequestError(details={"missing": ["driverId"]})

    if current == DeliveryStatus.IN_TRANSIT and driver_id == command.driver_id:
        return Decision(status=current)

    _assert_can_transition(current, DeliveryStatus.IN_TRANSIT)
    return Decision(
        status=DeliveryStatus.IN_TRANSIT,
        changes={"status": DeliveryStatus.IN_TRANSIT.value, "driver_id": command.driver_id},
        emits=True,
    )


def _decide_complete(current: DeliveryStatus) -> Decision:
    if current == DeliveryStatus.DELIVERED:
        return Decision(status=current)

    _assert_can_transition(current, DeliveryStatus.DELIVERED)
    return Decision(
        status=DeliveryStatus.DELIVERED,
        changes={"status": DeliveryStatus.DELIVERED.value},
        emits=True,
    )


def _assert_can_transition(current: DeliveryStatus, target: DeliveryStatus) -> None:
    if not is_valid_transition(current, target):
        raise InvalidTransitionError(current.value, target.value)


def split_order_payload(order: dict) -> dict[str, Any]:
    """Map a camelCase order payload onto Delivery columns; unknown keys go to `extra`."""
    known = {"_id", "status", "driverId", "createdAt", "updatedAt", *REQUIRED_ORDER_FIELDS}
    return {
        "id": str(order["_id"]) if order.get("_id") is not None else None,
        "user_id": order["userId"],
        "foods": order["foods"],
        "time": order["time"],
        "total_price": order["totalPrice"],
        "extra": {k: v for k, v in order.items() if k not in known},
    }
