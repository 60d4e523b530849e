"""Order materializer — persists one order per restaurant for a checkout.

All sibling orders (and, on the pre-pay path, the consumed payment intent)
are written in a single unit of work: either the whole group exists
afterwards or none of it does. New-order notifications go out only after
the commit.
"""

from collections.abc import Callable
from dataclasses import dataclass

import structlog
from protean import UnitOfWork
from protean.utils.globals import current_domain

from ordering.broadcast.publisher import OrderEventPublisher
from ordering.checkout.splitter import CheckoutSplit
from ordering.errors import OrderNumberConflict
from ordering.order.numbering import generate_order_number
from ordering.order.order import FulfillmentType, Order
from ordering.payment.intent import PaymentIntent

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MaterializedOrders:
    orders: tuple[Order, ...]
    group_id: str | None = None


class OrderMaterializer:
    def __init__(
        self,
        publisher: OrderEventPublisher,
        number_generator: Callable[[], str] = generate_order_number,
    ) -> None:
        self._publisher = publisher
        self._number_generator = number_generator

    def _allocate_number(self, taken: set[str]) -> str:
        """Generate an unused order number, retrying once on collision."""
        repo = current_domain.repository_for(Order)
        for attempt in (1, 2):
            number = self._number_generator()
            if number not in taken and repo.find_by_order_number(number) is None:
                taken.add(number)
                return number
            logger.warning("order_number_collision", order_number=number, attempt=attempt)
        raise OrderNumberConflict("Could not allocate a unique order number", order_number=number)

    def materialize(
        self,
        split: CheckoutSplit,
        fulfillment_type: str = FulfillmentType.DINE_IN.value,
        prepaid: bool = False,
        intent: PaymentIntent | None = None,
        transaction_id: str | None = None,
        customer_email: str | None = None,
        customer_phone: str | None = None,
    ) -> MaterializedOrders:
        fulfillment_type = FulfillmentType(fulfillment_type).value
        taken: set[str] = set()
        orders = [
            Order.create(
                order_number=self._allocate_number(taken),
                restaurant_id=group.restaurant_id,
                lines_data=[line.as_line_data() for line in group.lines],
                fulfillment_type=fulfillment_type,
                group_id=split.group_id,
                prepaid=prepaid,
                payment_intent_id=intent.intent_id if intent else None,
                transaction_id=transaction_id,
                customer_email=customer_email,
                customer_phone=customer_phone,
            )
            for group in split.groups
        ]

        with UnitOfWork():
            order_repo = current_domain.repository_for(Order)
            for order in orders:
                order_repo.add(order)
            if intent is not None:
                intent.consume(transaction_id, [order.id for order in orders], group_id=split.group_id)
                current_domain.repository_for(PaymentIntent).add(intent)

        logger.info(
            "orders_materialized",
            group_id=split.group_id,
            order_numbers=[order.order_number for order in orders],
            prepaid=prepaid,
            intent_id=intent.intent_id if intent else None,
        )

        for order in orders:
            self._publisher.order_created(order)

        return MaterializedOrders(orders=tuple(orders), group_id=split.group_id)
