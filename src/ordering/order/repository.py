"""Query methods for the Order aggregate beyond get-by-id."""

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.repository(part_of=Order)
class OrderRepository:
    def find_by_order_number(self, order_number: str) -> Order | None:
        items = self._dao.query.filter(order_number=order_number).all().items
        return items[0] if items else None

    def find_by_group(self, group_id: str) -> list[Order]:
        """All sibling orders from one checkout, oldest first."""
        return self._dao.query.filter(group_id=str(group_id)).order_by("created_at").all().items

    def find_by_payment_intent(self, payment_intent_id: str) -> list[Order]:
        return self._dao.query.filter(payment_intent_id=payment_intent_id).order_by("created_at").all().items

    def list_orders(self, restaurant_id=None, status=None, limit: int = 100) -> list[Order]:
        """Most recent orders first, optionally narrowed to one restaurant and/or status."""
        filters = {}
        if restaurant_id:
            filters["restaurant_id"] = str(restaurant_id)
        if status:
            filters["status"] = status
        query = self._dao.query
        if filters:
            query = query.filter(**filters)
        return query.order_by("-created_at").limit(limit).all().items
