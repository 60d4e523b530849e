"""Order workflow — staff actions on a single order, serialized per order.

Each action runs its command under a per-order lock, re-reads the committed
order and then notifies subscribers. Online pay-later payments are handed
to the settlement engine once recorded.
"""

import structlog
from protean.utils.globals import current_domain

from ordering.broadcast.publisher import OrderEventPublisher
from ordering.order.management import (
    CancelOrder,
    RecordOrderPayment,
    RemoveOrderLine,
    SetOrderLineQuantity,
    TransitionOrderStatus,
)
from ordering.order.order import Order, OrderStatus, PaymentMethod
from ordering.settlement.engine import SettlementEngine
from ordering.utils.locks import KeyedLock

logger = structlog.get_logger(__name__)


class OrderWorkflow:
    def __init__(
        self,
        publisher: OrderEventPublisher,
        settlement: SettlementEngine,
        locks: KeyedLock | None = None,
    ) -> None:
        self._publisher = publisher
        self._settlement = settlement
        self._locks = locks or KeyedLock()

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_order(self, order_id) -> Order:
        return current_domain.repository_for(Order).get(order_id)

    def list_orders(self, restaurant_id=None, status=None, limit=100) -> list[Order]:
        if status:
            status = OrderStatus(status).value
        return current_domain.repository_for(Order).list_orders(restaurant_id=restaurant_id, status=status, limit=limit)

    def fetch_by_group_id(self, group_id) -> list[Order]:
        return current_domain.repository_for(Order).find_by_group(group_id)

    # -------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------
    def transition_status(self, order_id, status, expected_revision=None) -> Order:
        order = self._run(
            order_id,
            TransitionOrderStatus(order_id=order_id, status=status, expected_revision=expected_revision),
        )
        if order.status == OrderStatus.CANCELLED.value:
            self._publisher.cancelled(order)
        else:
            self._publisher.status_changed(order)
        return order

    def cancel(self, order_id, reason=None, expected_revision=None) -> Order:
        order = self._run(
            order_id,
            CancelOrder(order_id=order_id, reason=reason, expected_revision=expected_revision),
        )
        self._publisher.cancelled(order)
        return order

    def record_payment(self, order_id, payment_method=PaymentMethod.CASH.value, transaction_id=None, expected_revision=None) -> Order:
        order = self._run(
            order_id,
            RecordOrderPayment(
                order_id=order_id,
                payment_method=payment_method,
                transaction_id=transaction_id,
                expected_revision=expected_revision,
            ),
        )
        self._publisher.status_changed(order)

        if order.payment_method == PaymentMethod.ONLINE.value and transaction_id:
            self._settlement.settle([order], transaction_id)
            order = self.get_order(order_id)
        return order

    def remove_line(self, order_id, line_id, expected_revision=None) -> Order:
        order = self._run(
            order_id,
            RemoveOrderLine(order_id=order_id, line_id=line_id, expected_revision=expected_revision),
        )
        if order.status == OrderStatus.CANCELLED.value:
            logger.info("order_auto_cancelled", order_id=str(order.id), reason="last line removed")
            self._publisher.cancelled(order)
        else:
            self._publisher.line_changed(order, change="removed")
        return order

    def set_line_quantity(self, order_id, line_id, quantity, expected_revision=None) -> Order:
        order = self._run(
            order_id,
            SetOrderLineQuantity(
                order_id=order_id,
                line_id=line_id,
                quantity=quantity,
                expected_revision=expected_revision,
            ),
        )
        self._publisher.line_changed(order, change="quantity_changed")
        return order

    def _run(self, order_id, command) -> Order:
        with self._locks.hold(f"order:{order_id}"):
            current_domain.process(command, asynchronous=False)
            return self.get_order(order_id)
