"""Application tests for the order board projection and daily statistics."""

from datetime import date

import pytest
from ordering.projections.order_board import OrderBoard, stats_summary
from protean import current_domain


@pytest.fixture(autouse=True)
def _seed(food_court):
    return food_court


class TestOrderBoardProjection:
    def test_created_orders_appear_on_board(self, services, make_cart):
        result = services.checkout.materialize_unpaid(make_cart(("item-a", 2), ("item-b", 1)))
        for order in result.orders:
            record = current_domain.repository_for(OrderBoard).get(str(order.id))
            assert record.status == "pending"
            assert record.grand_total == order.grand_total
            assert record.group_id == result.group_id

    def test_board_follows_workflow(self, services, make_cart):
        order = services.checkout.materialize_unpaid(make_cart(("item-a", 2), ("item-a2", 1))).orders[0]
        services.workflow.record_payment(order.id, "cash")
        naan = next(line for line in order.lines if line.menu_item_id == "item-a2")
        services.workflow.remove_line(order.id, naan.id)
        services.workflow.transition_status(order.id, "preparing")

        record = current_domain.repository_for(OrderBoard).get(str(order.id))
        assert record.status == "preparing"
        assert record.payment_status == "paid"
        assert record.line_count == 1
        assert record.grand_total == 246.0

    def test_settlement_is_reflected(self, pay):
        result = pay(("item-a", 1))
        record = current_domain.repository_for(OrderBoard).get(str(result.orders[0].id))
        assert record.settlement_status == "completed"


class TestStatsSummary:
    def test_counts_and_revenue(self, services, make_cart, pay):
        pay(("item-a", 2), ("item-b", 1))  # two paid orders: 246 + 62
        services.checkout.materialize_unpaid(make_cart(("item-c", 1)))
        cooking = services.checkout.materialize_unpaid(make_cart(("item-b", 1))).orders[0]
        services.workflow.record_payment(cooking.id, "cash")
        services.workflow.transition_status(cooking.id, "preparing")

        summary = stats_summary()

        assert summary["total_orders"] == 4
        assert summary["pending_orders"] == 1
        assert summary["preparing_orders"] == 1
        assert summary["ready_orders"] == 0
        assert summary["total_revenue"] == 246.0 + 62.0 + 62.0

    def test_single_restaurant(self, pay):
        pay(("item-a", 2), ("item-b", 1))
        summary = stats_summary(restaurant_id="rest-2")
        assert summary["total_orders"] == 1
        assert summary["total_revenue"] == 62.0
        assert summary["restaurant_id"] == "rest-2"

    def test_other_day_is_empty(self, pay):
        pay(("item-a", 1))
        summary = stats_summary(day=date(2000, 1, 1))
        assert summary["total_orders"] == 0
        assert summary["total_revenue"] == 0

    def test_busy_day_counts_every_order(self, services, make_cart):
        for _ in range(130):
            services.checkout.materialize_unpaid(make_cart(("item-b", 1)))

        summary = stats_summary()

        assert summary["total_orders"] == 130
        assert summary["pending_orders"] == 130
        assert summary["total_revenue"] == 0
