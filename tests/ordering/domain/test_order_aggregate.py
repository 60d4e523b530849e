"""Tests for Order creation, totals and invariants."""

import pytest
from ordering.order.events import OrderCreated
from ordering.order.order import (
    FulfillmentType,
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from protean.exceptions import ValidationError

LINES = [
    {"menu_item_id": "item-a", "name": "Butter Chicken", "quantity": 2, "unit_price": 100.0},
    {"menu_item_id": "item-a2", "name": "Garlic Naan", "quantity": 1, "unit_price": 30.0, "notes": "extra butter"},
]


def _make_order(**overrides):
    kwargs = {
        "order_number": "FC-0000011A2B",
        "restaurant_id": "rest-1",
        "lines_data": LINES,
    }
    kwargs.update(overrides)
    return Order.create(**kwargs)


class TestOrderCreation:
    def test_totals_are_computed_from_lines(self):
        order = _make_order()
        assert order.subtotal == 230.0
        assert order.service_charge == 12.0
        assert order.tax == 41.0
        assert order.grand_total == 283.0

    def test_lines_snapshot_prices(self):
        order = _make_order()
        assert len(order.lines) == 2
        naan = next(line for line in order.lines if line.menu_item_id == "item-a2")
        assert naan.unit_price == 30.0
        assert naan.notes == "extra butter"

    def test_pay_later_order_starts_pending_unpaid_cash(self):
        order = _make_order()
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.UNPAID.value
        assert order.payment_method == PaymentMethod.CASH.value

    def test_prepaid_order_starts_paid_online(self):
        order = _make_order(prepaid=True, payment_intent_id="intent-1", transaction_id="txn-1")
        assert order.status == OrderStatus.PAID.value
        assert order.payment_status == PaymentStatus.PAID.value
        assert order.payment_method == PaymentMethod.ONLINE.value
        assert order.payment_transaction_id == "txn-1"

    def test_defaults(self):
        order = _make_order()
        assert order.fulfillment_type == FulfillmentType.DINE_IN.value
        assert order.group_id is None
        assert order.revision == 0
        assert order.transfer_status is None

    def test_takeaway_with_group(self):
        order = _make_order(fulfillment_type="takeaway", group_id="GRP-ABC")
        assert order.fulfillment_type == "takeaway"
        assert order.group_id == "GRP-ABC"

    def test_raises_order_created(self):
        order = _make_order(group_id="GRP-ABC")
        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderCreated)
        assert event.order_number == "FC-0000011A2B"
        assert event.restaurant_id == "rest-1"
        assert event.group_id == "GRP-ABC"
        assert event.line_count == 2
        assert event.grand_total == 283.0

    def test_line_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            _make_order(lines_data=[{"menu_item_id": "item-a", "name": "X", "quantity": 0, "unit_price": 10.0}])

    def test_invalid_fulfillment_type(self):
        with pytest.raises(ValidationError):
            _make_order(fulfillment_type="delivery")


class TestOrderInvariants:
    def test_grand_total_must_match_charges(self):
        order = _make_order()
        with pytest.raises(ValidationError) as exc:
            order.grand_total = 999.0
        assert "grand_total" in exc.value.messages

    def test_settlement_split_must_cover_grand_total(self):
        order = _make_order(prepaid=True, transaction_id="txn-1")
        with pytest.raises(ValidationError) as exc:
            order.record_settlement(platform_commission=10.0, transfer_amount=10.0, transfer_status="success")
        assert "transfer_amount" in exc.value.messages
