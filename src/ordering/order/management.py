"""Staff order management — commands and handler.

Covers status transitions, cancellation, pay-later payment capture and line
changes. Every command may carry the revision the caller last saw; a stale
revision is rejected before anything changes.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import ConcurrentModification
from ordering.order.order import Order


@ordering.command(part_of="Order")
class TransitionOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    expected_revision = Integer()


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    expected_revision = Integer()


@ordering.command(part_of="Order")
class RecordOrderPayment:
    """Collect payment for a pay-later order at the counter or online."""

    order_id = Identifier(required=True)
    payment_method = String(required=True, max_length=20)
    transaction_id = String(max_length=255)
    expected_revision = Integer()


@ordering.command(part_of="Order")
class RemoveOrderLine:
    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    expected_revision = Integer()


@ordering.command(part_of="Order")
class SetOrderLineQuantity:
    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    quantity = Integer(required=True)
    expected_revision = Integer()


def _load(command) -> Order:
    order = current_domain.repository_for(Order).get(command.order_id)
    if command.expected_revision is not None and command.expected_revision != order.revision:
        raise ConcurrentModification(
            "Order was modified by someone else",
            order_id=str(order.id),
            expected_revision=command.expected_revision,
            current_revision=order.revision,
        )
    return order


@ordering.command_handler(part_of=Order)
class ManageOrderHandler:
    @handle(TransitionOrderStatus)
    def transition_status(self, command):
        order = _load(command)
        order.transition_to(command.status)
        current_domain.repository_for(Order).add(order)

    @handle(CancelOrder)
    def cancel_order(self, command):
        order = _load(command)
        order.cancel(cancelled_by="staff", reason=command.reason)
        current_domain.repository_for(Order).add(order)

    @handle(RecordOrderPayment)
    def record_payment(self, command):
        order = _load(command)
        order.record_payment(command.payment_method, transaction_id=command.transaction_id)
        current_domain.repository_for(Order).add(order)

    @handle(RemoveOrderLine)
    def remove_line(self, command):
        order = _load(command)
        order.remove_line(command.line_id)
        current_domain.repository_for(Order).add(order)

    @handle(SetOrderLineQuantity)
    def set_line_quantity(self, command):
        order = _load(command)
        order.set_line_quantity(command.line_id, command.quantity)
        current_domain.repository_for(Order).add(order)
