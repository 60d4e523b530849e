"""Order board — flat per-order view behind the staff dashboard statistics.

Keyed by order id and kept current from Order events. ``created_date`` holds
the UTC calendar day so daily summaries are a single filtered query.
"""

from datetime import UTC, datetime

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderCreated,
    OrderLineChanged,
    OrderPaid,
    OrderStatusChanged,
    SettlementRecorded,
)
from ordering.order.order import Order, OrderStatus, PaymentStatus


@ordering.projection
class OrderBoard:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(max_length=30)
    restaurant_id = Identifier(required=True)
    group_id = Identifier()
    status = String(required=True)
    payment_status = String(required=True)
    settlement_status = String()
    line_count = Integer(default=0)
    grand_total = Float(default=0.0)
    created_date = String(max_length=10)  # YYYY-MM-DD
    created_at = DateTime()
    updated_at = DateTime()


@ordering.projector(projector_for=OrderBoard, aggregates=[Order])
class OrderBoardProjector:
    @on(OrderCreated)
    def on_order_created(self, event):
        current_domain.repository_for(OrderBoard).add(
            OrderBoard(
                order_id=event.order_id,
                order_number=event.order_number,
                restaurant_id=event.restaurant_id,
                group_id=event.group_id,
                status=event.status,
                payment_status=event.payment_status,
                line_count=event.line_count,
                grand_total=event.grand_total,
                created_date=event.created_at.date().isoformat(),
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    def _update(self, order_id, updated_at, **changes):
        repo = current_domain.repository_for(OrderBoard)
        record = repo.get(order_id)
        for field_name, value in changes.items():
            setattr(record, field_name, value)
        record.updated_at = updated_at
        repo.add(record)

    @on(OrderStatusChanged)
    def on_status_changed(self, event):
        self._update(event.order_id, event.changed_at, status=event.status)

    @on(OrderPaid)
    def on_order_paid(self, event):
        self._update(event.order_id, event.paid_at, payment_status=PaymentStatus.PAID.value)

    @on(OrderLineChanged)
    def on_line_changed(self, event):
        repo = current_domain.repository_for(OrderBoard)
        record = repo.get(event.order_id)
        if event.change == "removed":
            record.line_count = max((record.line_count or 1) - 1, 1)
        record.grand_total = event.grand_total
        record.updated_at = event.changed_at
        repo.add(record)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._update(event.order_id, event.cancelled_at, status=OrderStatus.CANCELLED.value)

    @on(SettlementRecorded)
    def on_settlement_recorded(self, event):
        self._update(event.order_id, event.recorded_at, settlement_status=event.settlement_status)


def stats_summary(restaurant_id=None, day=None) -> dict:
    """Counts for one day (default: today, UTC) and revenue from paid orders."""
    day = day or datetime.now(UTC).date()
    filters = {"created_date": day.isoformat()}
    if restaurant_id:
        filters["restaurant_id"] = str(restaurant_id)
    records = current_domain.repository_for(OrderBoard)._dao.query.filter(**filters).limit(None).all().items

    def count(status):
        return sum(1 for record in records if record.status == status.value)

    return {
        "date": day.isoformat(),
        "restaurant_id": str(restaurant_id) if restaurant_id else None,
        "total_orders": len(records),
        "pending_orders": count(OrderStatus.PENDING),
        "preparing_orders": count(OrderStatus.PREPARING),
        "ready_orders": count(OrderStatus.READY),
        "total_revenue": sum(
            record.grand_total or 0.0
            for record in records
            if record.payment_status == PaymentStatus.PAID.value
        ),
    }
