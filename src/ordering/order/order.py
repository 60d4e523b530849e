"""Order aggregate — one restaurant's share of a food court checkout.

Sibling orders created from the same multi-restaurant checkout share a
``group_id``. Totals are always recomputed from the current lines, and the
settlement fields are written only by the settlement engine.

State Machine:
    PENDING → PAID → PREPARING → READY → SERVED
    CANCELLED (from PENDING or PAID)
    SERVED and CANCELLED are terminal.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from ordering.domain import ordering
from ordering.errors import InvalidQuantity, InvalidTransition, OrderNotModifiable
from ordering.order.events import (
    OrderCancelled,
    OrderCreated,
    OrderLineChanged,
    OrderPaid,
    OrderStatusChanged,
    SettlementRecorded,
)
from ordering.order.pricing import charges_for_lines


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"
    CANCELLED = "cancelled"


class FulfillmentType(Enum):
    DINE_IN = "dine_in"
    TAKEAWAY = "takeaway"


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    ONLINE = "online"


class TransferStatus(Enum):
    NOT_ATTEMPTED = "not_attempted"
    SUCCESS = "success"
    FAILED = "failed"


class SettlementStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class CancellationActor(Enum):
    STAFF = "staff"
    SYSTEM = "system"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.READY},
    OrderStatus.READY: {OrderStatus.SERVED},
    OrderStatus.SERVED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Lines may only change before the kitchen starts on the order
_MODIFIABLE_STATES = {OrderStatus.PENDING, OrderStatus.PAID}


def allowed_transitions(status) -> set[OrderStatus]:
    return set(_VALID_TRANSITIONS[OrderStatus(status)])


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLine:
    """A menu item on an order with the price it had when the order was placed.

    The unit price is a snapshot: later catalogue price changes never touch
    existing orders.
    """

    menu_item_id = Identifier(required=True)
    name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    notes = String(max_length=500)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=30, unique=True)
    group_id = Identifier()
    restaurant_id = Identifier(required=True)
    fulfillment_type = String(choices=FulfillmentType, default=FulfillmentType.DINE_IN.value)
    lines = HasMany(OrderLine)

    subtotal = Float(default=0.0)
    service_charge = Float(default=0.0)
    tax = Float(default=0.0)
    grand_total = Float(default=0.0)

    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.UNPAID.value)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CASH.value)
    payment_intent_id = String(max_length=255)
    payment_transaction_id = String(max_length=255)
    customer_email = String(max_length=254)
    customer_phone = String(max_length=20)

    transfer_id = String(max_length=255)
    transfer_amount = Float()
    platform_commission = Float()
    transfer_status = String(choices=TransferStatus)
    settlement_status = String(choices=SettlementStatus)
    settlement_failure_reason = String(max_length=500)
    settled_at = DateTime()

    cancelled_by = String(choices=CancellationActor)
    cancellation_reason = String(max_length=500)
    revision = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def grand_total_is_sum_of_charges(self):
        expected = (self.subtotal or 0.0) + (self.service_charge or 0.0) + (self.tax or 0.0)
        if abs((self.grand_total or 0.0) - expected) > 0.005:
            raise ValidationError({"grand_total": ["Grand total must equal subtotal + service charge + tax"]})

    @invariant.post
    def settlement_split_covers_grand_total(self):
        if self.transfer_status is None:
            return
        split = (self.transfer_amount or 0.0) + (self.platform_commission or 0.0)
        if abs(split - (self.grand_total or 0.0)) > 0.005:
            raise ValidationError({"transfer_amount": ["Transfer amount plus commission must equal grand total"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number,
        restaurant_id,
        lines_data,
        fulfillment_type=FulfillmentType.DINE_IN.value,
        group_id=None,
        prepaid=False,
        payment_intent_id=None,
        transaction_id=None,
        customer_email=None,
        customer_phone=None,
    ):
        """Create an order for one restaurant.

        Args:
            order_number: Unique human-readable number.
            restaurant_id: Restaurant that owns every line.
            lines_data: List of dicts with menu_item_id, name, quantity,
                        unit_price and optional notes.
            prepaid: True on the verified pre-pay path. The order starts
                     ``paid``/``online``; otherwise ``pending``/``unpaid``/``cash``.
        """
        now = datetime.now(UTC)
        lines = [OrderLine(**line) for line in lines_data]
        charges = charges_for_lines(lines)

        if prepaid:
            status, payment_status, payment_method = (
                OrderStatus.PAID.value,
                PaymentStatus.PAID.value,
                PaymentMethod.ONLINE.value,
            )
        else:
            status, payment_status, payment_method = (
                OrderStatus.PENDING.value,
                PaymentStatus.UNPAID.value,
                PaymentMethod.CASH.value,
            )

        order = cls(
            order_number=order_number,
            group_id=group_id,
            restaurant_id=restaurant_id,
            fulfillment_type=fulfillment_type,
            lines=lines,
            subtotal=charges.subtotal,
            service_charge=charges.service_charge,
            tax=charges.tax,
            grand_total=charges.grand_total,
            status=status,
            payment_status=payment_status,
            payment_method=payment_method,
            payment_intent_id=payment_intent_id,
            payment_transaction_id=transaction_id,
            customer_email=customer_email,
            customer_phone=customer_phone,
            revision=0,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                order_number=order_number,
                restaurant_id=str(restaurant_id),
                group_id=str(group_id) if group_id else None,
                status=status,
                payment_status=payment_status,
                payment_method=payment_method,
                fulfillment_type=fulfillment_type,
                line_count=len(lines),
                grand_total=charges.grand_total,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _assert_modifiable(self):
        if OrderStatus(self.status) not in _MODIFIABLE_STATES:
            raise OrderNotModifiable({"status": [f"Lines cannot be changed once the order is {self.status}"]})

    def _find_line(self, line_id):
        line = next((ln for ln in self.lines if str(ln.id) == str(line_id)), None)
        if line is None:
            raise ValidationError({"line_id": ["Line not found"]})
        return line

    def _touch(self, now):
        self.updated_at = now
        self.revision = (self.revision or 0) + 1

    def _recalculate_totals(self):
        charges = charges_for_lines(self.lines)
        self.subtotal = charges.subtotal
        self.service_charge = charges.service_charge
        self.tax = charges.tax
        self.grand_total = charges.grand_total

    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[OrderStatus(self.status)]

    # -------------------------------------------------------------------
    # Status workflow
    # -------------------------------------------------------------------
    def transition_to(self, target_status):
        """Move to the immediate next state. Cancelling and paying have their own methods."""
        try:
            target = OrderStatus(target_status)
        except ValueError:
            raise InvalidTransition({"status": [f"Unknown order status {target_status}"]}) from None
        if target == OrderStatus.CANCELLED:
            self.cancel(cancelled_by=CancellationActor.STAFF.value)
            return
        if target == OrderStatus.PAID:
            self._assert_can_transition(OrderStatus.PAID)
            self.record_payment(self.payment_method or PaymentMethod.CASH.value)
            return

        self._assert_can_transition(target)
        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self._touch(now)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                restaurant_id=str(self.restaurant_id),
                previous_status=previous,
                status=target.value,
                changed_at=now,
            )
        )

    def record_payment(self, payment_method, transaction_id=None):
        """Collect payment for a pay-later order: payment unpaid → paid, status pending → paid."""
        if PaymentStatus(self.payment_status) == PaymentStatus.PAID:
            raise InvalidTransition({"payment_status": ["Order is already paid"]})
        self._assert_can_transition(OrderStatus.PAID)
        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            raise ValidationError({"payment_method": [f"Unknown payment method {payment_method}"]}) from None

        now = datetime.now(UTC)
        previous = self.status
        with atomic_change(self):
            self.status = OrderStatus.PAID.value
            self.payment_status = PaymentStatus.PAID.value
            self.payment_method = method.value
            if transaction_id:
                self.payment_transaction_id = transaction_id
            self._touch(now)

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                restaurant_id=str(self.restaurant_id),
                payment_method=self.payment_method,
                transaction_id=transaction_id,
                amount=self.grand_total,
                paid_at=now,
            )
        )
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                restaurant_id=str(self.restaurant_id),
                previous_status=previous,
                status=OrderStatus.PAID.value,
                changed_at=now,
            )
        )

    def cancel(self, cancelled_by=CancellationActor.STAFF.value, reason=None):
        self._assert_can_transition(OrderStatus.CANCELLED)

        now = datetime.now(UTC)
        previous = self.status
        with atomic_change(self):
            self.status = OrderStatus.CANCELLED.value
            self.cancelled_by = CancellationActor(cancelled_by).value
            self.cancellation_reason = reason
            self._touch(now)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                restaurant_id=str(self.restaurant_id),
                previous_status=previous,
                cancelled_by=self.cancelled_by,
                reason=reason,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Line mutations (pending or paid only)
    # -------------------------------------------------------------------
    def remove_line(self, line_id):
        """Remove a line and recompute totals.

        Removing the only remaining line cancels the order instead; the line
        stays on the cancelled order as the record of what was ordered.
        """
        self._assert_modifiable()
        line = self._find_line(line_id)

        if len(self.lines) == 1:
            self.cancel(
                cancelled_by=CancellationActor.SYSTEM.value,
                reason="Last line removed",
            )
            return

        now = datetime.now(UTC)
        with atomic_change(self):
            self.remove_lines(line)
            self._recalculate_totals()
            self._touch(now)

        self.raise_(
            OrderLineChanged(
                order_id=str(self.id),
                restaurant_id=str(self.restaurant_id),
                line_id=str(line_id),
                change="removed",
                subtotal=self.subtotal,
                grand_total=self.grand_total,
                changed_at=now,
            )
        )

    def set_line_quantity(self, line_id, quantity):
        if quantity is None or quantity < 1:
            raise InvalidQuantity({"quantity": ["Quantity must be at least 1; remove the line instead"]})
        self._assert_modifiable()
        line = self._find_line(line_id)

        now = datetime.now(UTC)
        with atomic_change(self):
            line.quantity = quantity
            self._recalculate_totals()
            self._touch(now)

        self.raise_(
            OrderLineChanged(
                order_id=str(self.id),
                restaurant_id=str(self.restaurant_id),
                line_id=str(line_id),
                change="quantity_changed",
                quantity=quantity,
                subtotal=self.subtotal,
                grand_total=self.grand_total,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------
    def record_settlement(
        self,
        platform_commission,
        transfer_amount,
        transfer_status,
        transfer_id=None,
        failure_reason=None,
    ):
        """Record the outcome of a payout attempt.

        Only a successful transfer completes settlement. A skipped or failed
        transfer leaves the order pending manual settlement.
        """
        if PaymentStatus(self.payment_status) != PaymentStatus.PAID:
            raise ValidationError({"payment_status": ["Only paid orders can be settled"]})

        transfer_status = TransferStatus(transfer_status)
        now = datetime.now(UTC)
        with atomic_change(self):
            self.platform_commission = platform_commission
            self.transfer_amount = transfer_amount
            self.transfer_status = transfer_status.value
            self.transfer_id = transfer_id
            self.settlement_failure_reason = failure_reason
            if transfer_status == TransferStatus.SUCCESS:
                self.settlement_status = SettlementStatus.COMPLETED.value
                self.settled_at = now
            else:
                self.settlement_status = SettlementStatus.PENDING.value
            self._touch(now)

        self.raise_(
            SettlementRecorded(
                order_id=str(self.id),
                restaurant_id=str(self.restaurant_id),
                transfer_status=self.transfer_status,
                settlement_status=self.settlement_status,
                transfer_amount=transfer_amount,
                platform_commission=platform_commission,
                transfer_id=transfer_id,
                failure_reason=failure_reason,
                recorded_at=now,
            )
        )
