"""
Tests for the delivery lifecycle state machine — valid and invalid transitions.

Tests: decide_creation, decide (assign / complete), is_valid_transition
"""
import pytest

from domain.enums import DeliveryStatus
from domain.errors import BadRequestError, InsufficientFundsError, InvalidTransitionError
from domain.state_machine import (
    AssignDriver,
    CompleteDelivery,
    decide,
    decide_creation,
    is_valid_transition,
    split_order_payload,
)


def _order(**overrides):
    order = {"userId": "u1", "time": "12:00", "foods": ["pizza"], "totalPrice": 15, "status": "ordered"}
    order.update(overrides)
    return order


class TestCreation:

    @pytest.mark.unit
    def test_ordered_payload_is_accepted(self):
        assert decide_creation(_order()) == DeliveryStatus.ORDERED

    @pytest.mark.unit
    @pytest.mark.parametrize("status", ["rejected", "insufficient_funds", "", None, "in_transit"])
    def test_other_status_is_insufficient_funds(self, status):
        with pytest.raises(InsufficientFundsError) as exc:
            decide_creation(_order(status=status))
        assert exc.value.status_code == 404
        assert exc.value.message == "Insufficient Funds."

    @pytest.mark.unit
    def test_status_checked_before_fields(self):
        """An unpaid order is rejected as such even when fields are missing."""
        with pytest.raises(InsufficientFundsError):
            decide_creation({"status": "rejected"})

    @pytest.mark.unit
    @pytest.mark.parametrize("field", ["userId", "time", "foods", "totalPrice"])
    def test_missing_field_is_bad_request(self, field):
        order = _order()
        order[field] = None
        with pytest.raises(BadRequestError) as exc:
            decide_creation(order)
        assert exc.value.details["missing"] == [field]


class TestAssignDriver:

    @pytest.mark.unit
    def test_ordered_to_in_transit(self):
        decision = decide(DeliveryStatus.ORDERED, AssignDriver(driver_id="d1"))
        assert decision.status == DeliveryStatus.IN_TRANSIT
        assert decision.changes == {"status": "in_transit", "driver_id": "d1"}
        assert decision.emits is True

    @pytest.mark.unit
    def test_accepts_plain_string_status(self):
        decision = decide("ordered", AssignDriver(driver_id="d1"))
        assert decision.status == DeliveryStatus.IN_TRANSIT

    @pytest.mark.unit
    def test_same_driver_replay_is_noop(self):
        decision = decide(DeliveryStatus.IN_TRANSIT, AssignDriver(driver_id="d1"), driver_id="d1")
        assert decision.is_noop
        assert decision.emits is False
        assert decision.status == DeliveryStatus.IN_TRANSIT

    @pytest.mark.unit
    def test_reassigning_different_driver_rejected(self):
        with pytest.raises(InvalidTransitionError) as exc:
            decide(DeliveryStatus.IN_TRANSIT, AssignDriver(driver_id="d2"), driver_id="d1")
        assert exc.value.status_code == 409

    @pytest.mark.unit
    def test_assign_after_delivery_rejected(self):
        with pytest.raises(InvalidTransitionError):
            decide(DeliveryStatus.DELIVERED, AssignDriver(driver_id="d1"), driver_id="d1")

    @pytest.mark.unit
    def test_empty_driver_is_bad_request(self):
        with pytest.raises(BadRequestError):
            decide(DeliveryStatus.ORDERED, AssignDriver(driver_id=""))


class TestCompleteDelivery:

    @pytest.mark.unit
    def test_in_transit_to_delivered(self):
        decision = decide(DeliveryStatus.IN_TRANSIT, CompleteDelivery())
        assert decision.status == DeliveryStatus.DELIVERED
        assert decision.changes == {"status": "delivered"}
        assert decision.emits is True

    @pytest.mark.unit
    def test_ordered_to_delivered_tolerates_missed_assignment(self):
        decision = decide(DeliveryStatus.ORDERED, CompleteDelivery())
        assert decision.status == DeliveryStatus.DELIVERED

    @pytest.mark.unit
    def test_complete_is_idempotent(self):
        decision = decide(DeliveryStatus.DELIVERED, CompleteDelivery())
        assert decision.is_noop
        assert decision.emits is False


class TestTransitionTable:

    @pytest.mark.unit
    def test_forward_moves_only(self):
        assert is_valid_transition(DeliveryStatus.ORDERED, DeliveryStatus.IN_TRANSIT)
        assert is_valid_transition(DeliveryStatus.IN_TRANSIT, DeliveryStatus.DELIVERED)
        assert not is_valid_transition(DeliveryStatus.IN_TRANSIT, DeliveryStatus.ORDERED)
        assert not is_valid_transition(DeliveryStatus.DELIVERED, DeliveryStatus.IN_TRANSIT)

    @pytest.mark.unit
    def test_delivered_is_terminal(self):
        for target in DeliveryStatus:
            assert not is_valid_transition(DeliveryStatus.DELIVERED, target)

    @pytest.mark.unit
    def test_unknown_command_raises(self):
        with pytest.raises(TypeError):
            decide(DeliveryStatus.ORDERED, object())


class TestSplitOrderPayload:

    @pytest.mark.unit
    def test_known_fields_mapped_and_extras_kept(self):
        values = split_order_payload(_order(_id="ord-1", restaurantId="r9", type="delivery"))
        assert values["id"] == "ord-1"
        assert values["user_id"] == "u1"
        assert values["total_price"] == 15
        assert values["extra"] == {"restaurantId": "r9", "type": "delivery"}

    @pytest.mark.unit
    def test_missing_id_left_for_store(self):
        assert split_order_payload(_order())["id"] is None

    @pytest.mark.unit
    def test_user_id_not_coerced(self):
        assert split_order_payload(_order(userId=7))["user_id"] == 7
