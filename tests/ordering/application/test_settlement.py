"""Application tests for settling paid orders with restaurants."""

import pytest
from ordering.order.order import Order
from ordering.settlement.engine import SettlementEngine
from protean import current_domain


@pytest.fixture(autouse=True)
def _seed(food_court):
    return food_court


@pytest.fixture
def paid_orders(services, make_cart):
    """Pay-later orders moved to paid at the counter; nothing settled yet."""

    def _make(*entries):
        result = services.checkout.materialize_unpaid(make_cart(*entries))
        return [services.workflow.record_payment(order.id, "cash") for order in result.orders]

    return _make


def _stored(order):
    return current_domain.repository_for(Order).get(order.id)


def _transfers(gateway):
    return [call for call in gateway.calls if call["method"] == "transfer"]


class TestSettleOrder:
    def test_successful_transfer(self, services, gateway, paid_orders):
        (order,) = paid_orders(("item-a", 2))

        result = services.settlement.settle_order(order, "txn_1")

        assert result.success is True
        assert (result.platform_commission, result.transfer_amount) == (25.0, 221.0)
        stored = _stored(order)
        assert stored.transfer_status == "success"
        assert stored.settlement_status == "completed"
        assert stored.transfer_id == result.transfer_id
        call = _transfers(gateway)[0]
        assert call["destination_account"] == "acc_rest_1"
        assert call["amount"] == 221.0
        assert call["source_transaction_id"] == "txn_1"
        assert call["metadata"]["order_number"] == order.order_number

    def test_rejected_transfer_leaves_manual_settlement(self, services, gateway, paid_orders):
        (order,) = paid_orders(("item-a", 2))
        gateway.configure(should_succeed=False, failure_reason="Account suspended")

        result = services.settlement.settle_order(order, "txn_1")

        assert result.success is False
        assert result.error == "Account suspended"
        stored = _stored(order)
        assert stored.transfer_status == "failed"
        assert stored.settlement_status == "pending"
        assert stored.settlement_failure_reason == "Account suspended"
        assert stored.transfer_amount + stored.platform_commission == stored.grand_total

    def test_gateway_error_is_recorded_not_raised(self, services, gateway, paid_orders):
        (order,) = paid_orders(("item-b", 1))
        gateway.configure(should_succeed=True, raise_error=True)

        result = services.settlement.settle_order(order, "txn_1")

        assert result.transfer_status == "failed"
        assert result.error == "Payment gateway unavailable"
        assert _stored(order).settlement_status == "pending"

    def test_restaurant_without_payout_account(self, services, gateway, paid_orders):
        (order,) = paid_orders(("item-c", 1))

        result = services.settlement.settle_order(order, "txn_1")

        assert result.transfer_status == "not_attempted"
        assert not _transfers(gateway)
        stored = _stored(order)
        assert stored.settlement_status == "pending"
        assert stored.platform_commission + stored.transfer_amount == stored.grand_total


class TestSettleGroup:
    def test_one_failure_does_not_stop_siblings(self, services, gateway, paid_orders):
        orders = paid_orders(("item-a", 1), ("item-b", 1), ("item-c", 1))
        gateway.fail_transfers_to("acc_rest_1")

        report = services.settlement.settle(orders, "txn_1")

        assert [r.transfer_status for r in report.results] == ["failed", "success", "not_attempted"]
        assert report.succeeded == 1
        assert report.failed == 2
        assert report.total_transferred == report.results[1].transfer_amount
        assert report.total_commission == sum(r.platform_commission for r in report.results)

    def test_unexpected_gateway_exception_does_not_stop_siblings(self, services, gateway, paid_orders, monkeypatch):
        orders = paid_orders(("item-a", 2), ("item-b", 1))
        transfer = gateway.transfer
        attempts = []

        def flaky_transfer(**kwargs):
            attempts.append(kwargs["destination_account"])
            if len(attempts) == 1:
                raise RuntimeError("sdk blew up")
            return transfer(**kwargs)

        monkeypatch.setattr(gateway, "transfer", flaky_transfer)

        report = services.settlement.settle(orders, "txn_1")

        assert attempts == ["acc_rest_1", "acc_rest_2"]
        first, second = report.results
        assert (first.transfer_status, first.error) == ("failed", "sdk blew up")
        assert second.success is True
        assert _stored(orders[0]).settlement_status == "pending"
        assert _stored(orders[0]).settlement_failure_reason == "sdk blew up"
        assert _stored(orders[1]).settlement_status == "completed"

    def test_recording_failure_is_reported_not_raised(self, services, paid_orders, monkeypatch):
        orders = paid_orders(("item-a", 1), ("item-b", 1))
        record = services.settlement._record
        recorded = []

        def failing_record(order_id, *args):
            if not recorded:
                recorded.append(order_id)
                raise RuntimeError("database unavailable")
            return record(order_id, *args)

        monkeypatch.setattr(services.settlement, "_record", failing_record)

        report = services.settlement.settle(orders, "txn_1")

        first, second = report.results
        assert first.success is False
        assert "database unavailable" in first.error
        assert second.success is True
        assert _stored(orders[1]).settlement_status == "completed"

    def test_pauses_between_transfers(self, gateway, paid_orders):
        pauses = []
        engine = SettlementEngine(gateway, pause_seconds=0.5, sleep=pauses.append)

        engine.settle(paid_orders(("item-a", 1), ("item-b", 1)), "txn_1")

        assert pauses == [0.5]

    def test_no_pause_for_single_order(self, gateway, paid_orders):
        pauses = []
        engine = SettlementEngine(gateway, pause_seconds=0.5, sleep=pauses.append)
        engine.settle(paid_orders(("item-a", 1)), "txn_1")
        assert pauses == []


class TestTransferStatus:
    def test_includes_gateway_view(self, services, paid_orders):
        (order,) = paid_orders(("item-a", 1))
        result = services.settlement.settle_order(order, "txn_1")

        status = services.settlement.transfer_status(order.id)

        assert status["transfer_status"] == "success"
        assert status["gateway"]["id"] == result.transfer_id
        assert status["gateway"]["status"] == "processed"

    def test_unsettled_order(self, services, paid_orders):
        (order,) = paid_orders(("item-c", 1))
        status = services.settlement.transfer_status(order.id)
        assert status["transfer_id"] is None
        assert status["gateway"] is None
