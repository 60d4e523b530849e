"""Tests for the order status state machine."""

import pytest
from ordering.errors import InvalidTransition
from ordering.order.events import OrderCancelled, OrderPaid, OrderStatusChanged
from ordering.order.order import Order, OrderStatus, PaymentStatus, allowed_transitions

_FORWARD = ["paid", "preparing", "ready", "served"]
ALL_STATUSES = [status.value for status in OrderStatus]


def _make_order(prepaid=False):
    return Order.create(
        order_number="FC-0000021A2B",
        restaurant_id="rest-1",
        lines_data=[{"menu_item_id": "item-a", "name": "Butter Chicken", "quantity": 1, "unit_price": 100.0}],
        prepaid=prepaid,
        transaction_id="txn-1" if prepaid else None,
    )


def _order_in(status):
    order = _make_order()
    if status == "cancelled":
        order.cancel()
        return order
    for step in _FORWARD:
        if order.status == status:
            break
        order.transition_to(step)
    assert order.status == status
    return order


LEGAL = {
    "pending": {"paid", "cancelled"},
    "paid": {"preparing", "cancelled"},
    "preparing": {"ready"},
    "ready": {"served"},
    "served": set(),
    "cancelled": set(),
}


class TestAllowedTransitions:
    @pytest.mark.parametrize("status", ALL_STATUSES)
    def test_table_matches_workflow(self, status):
        assert {s.value for s in allowed_transitions(status)} == LEGAL[status]

    @pytest.mark.parametrize(
        "current, target",
        [(current, target) for current in ALL_STATUSES for target in ALL_STATUSES if target in LEGAL[current]],
    )
    def test_legal_transition_succeeds(self, current, target):
        order = _order_in(current)
        order.transition_to(target)
        assert order.status == target

    @pytest.mark.parametrize(
        "current, target",
        [(current, target) for current in ALL_STATUSES for target in ALL_STATUSES if target not in LEGAL[current]],
    )
    def test_illegal_transition_is_rejected(self, current, target):
        order = _order_in(current)
        revision = order.revision
        with pytest.raises(InvalidTransition):
            order.transition_to(target)
        assert order.status == current
        assert order.revision == revision

    def test_unknown_status_is_rejected(self):
        with pytest.raises(InvalidTransition):
            _make_order().transition_to("delivered")


class TestTransitionSideEffects:
    def test_forward_transition_raises_status_changed(self):
        order = _make_order(prepaid=True)
        order._events.clear()
        order.transition_to("preparing")
        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "paid"
        assert event.status == "preparing"

    def test_every_transition_bumps_revision(self):
        order = _make_order(prepaid=True)
        order.transition_to("preparing")
        order.transition_to("ready")
        assert order.revision == 2

    def test_served_and_cancelled_are_terminal(self):
        assert _order_in("served").is_terminal
        assert _order_in("cancelled").is_terminal
        assert not _order_in("ready").is_terminal


class TestPayment:
    def test_transition_to_paid_marks_payment_paid(self):
        order = _make_order()
        order.transition_to("paid")
        assert order.payment_status == PaymentStatus.PAID.value
        assert order.payment_method == "cash"

    def test_record_payment_raises_paid_and_status_changed(self):
        order = _make_order()
        order._events.clear()
        order.record_payment("upi", transaction_id="upi-123")
        assert [type(e) for e in order._events] == [OrderPaid, OrderStatusChanged]
        assert order._events[0].transaction_id == "upi-123"
        assert order.payment_transaction_id == "upi-123"
        assert order.payment_method == "upi"

    def test_payment_cannot_be_recorded_twice(self):
        order = _make_order(prepaid=True)
        with pytest.raises(InvalidTransition):
            order.record_payment("cash")
        assert order.payment_status == PaymentStatus.PAID.value

    def test_cancelled_order_cannot_be_paid(self):
        order = _order_in("cancelled")
        with pytest.raises(InvalidTransition):
            order.record_payment("cash")
        assert order.payment_status == PaymentStatus.UNPAID.value


class TestCancellation:
    def test_staff_cancel_from_paid(self):
        order = _make_order(prepaid=True)
        order._events.clear()
        order.cancel(reason="Guest left")
        assert order.status == "cancelled"
        assert order.cancelled_by == "staff"
        event = order._events[0]
        assert isinstance(event, OrderCancelled)
        assert event.previous_status == "paid"
        assert event.reason == "Guest left"

    def test_transition_to_cancelled_is_a_staff_cancel(self):
        order = _make_order()
        order.transition_to("cancelled")
        assert order.cancelled_by == "staff"

    def test_cannot_cancel_once_preparing(self):
        order = _order_in("preparing")
        with pytest.raises(InvalidTransition):
            order.cancel()
