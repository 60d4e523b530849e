"""Domain events for the Order aggregate.

Events feed the OrderBoard projection. Customer and staff push notifications
are published separately by the order services once the write has committed.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderCreated:
    """An order was materialized for one restaurant from a checkout."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    restaurant_id = Identifier(required=True)
    group_id = Identifier()
    status = String(required=True)
    payment_status = String(required=True)
    payment_method = String()
    fulfillment_type = String(required=True)
    line_count = Integer(required=True)
    grand_total = Float(required=True)
    created_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """Staff moved the order to the next state of its workflow."""

    __version__ = 1

    order_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderPaid:
    """Payment was collected for an order created on the pay-later path."""

    __version__ = 1

    order_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    payment_method = String(required=True)
    transaction_id = String()
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderLineChanged:
    """A line was removed or its quantity adjusted; totals were recomputed."""

    __version__ = 1

    order_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    line_id = Identifier(required=True)
    change = String(required=True)  # removed, quantity_changed
    quantity = Integer()
    subtotal = Float(required=True)
    grand_total = Float(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The order reached the cancelled terminal state."""

    __version__ = 1

    order_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    previous_status = String(required=True)
    cancelled_by = String(required=True)  # staff, system
    reason = String()
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class SettlementRecorded:
    """A settlement attempt (or its skip) was recorded on a paid order."""

    __version__ = 1

    order_id = Identifier(required=True)
    restaurant_id = Identifier(required=True)
    transfer_status = String(required=True)
    settlement_status = String(required=True)
    transfer_amount = Float(required=True)
    platform_commission = Float(required=True)
    transfer_id = String()
    failure_reason = String()
    recorded_at = DateTime(required=True)
