"""Order splitter — turns one food court cart into per-restaurant groups.

Every line is resolved against the current menu before anything else
happens; a single unknown or unavailable item rejects the whole cart.
Restaurants appear in the order their first line appears in the cart.
"""

from dataclasses import dataclass
from uuid import uuid4

from ordering.catalogue.port import CatalogLookup
from ordering.errors import EmptyCart, InvalidQuantity, UnresolvableItem
from ordering.order.pricing import Charges, charges_for_lines, round_currency


@dataclass(frozen=True)
class CartLine:
    """A client-supplied cart line. Prices are never taken from the client."""

    menu_item_id: str
    quantity: int
    notes: str | None = None

    def __post_init__(self):
        if not self.menu_item_id:
            raise UnresolvableItem({"menu_item_id": ["Menu item id is required"]})
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise InvalidQuantity({"quantity": [f"Quantity for {self.menu_item_id} must be at least 1"]})


@dataclass(frozen=True)
class PricedLine:
    menu_item_id: str
    name: str
    quantity: int
    unit_price: float
    notes: str | None = None

    def as_line_data(self) -> dict:
        return {
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class SellerGroup:
    restaurant_id: str
    lines: tuple[PricedLine, ...]
    charges: Charges


@dataclass(frozen=True)
class CheckoutSplit:
    groups: tuple[SellerGroup, ...]
    group_id: str | None = None

    @property
    def restaurant_count(self) -> int:
        return len(self.groups)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for group in self.groups for line in group.lines)

    @property
    def subtotal(self) -> float:
        return sum(group.charges.subtotal for group in self.groups)

    @property
    def service_charge(self) -> float:
        return sum(group.charges.service_charge for group in self.groups)

    @property
    def tax(self) -> float:
        return sum(group.charges.tax for group in self.groups)

    @property
    def grand_total(self) -> float:
        """Combined amount the guest pays: the sum of each restaurant's grand total."""
        return round_currency(sum(group.charges.grand_total for group in self.groups))


def new_group_id() -> str:
    return f"GRP-{uuid4().hex[:12].upper()}"


class OrderSplitter:
    def __init__(self, catalog: CatalogLookup) -> None:
        self._catalog = catalog

    def split(self, cart_lines, existing_group_id=None) -> CheckoutSplit:
        """Resolve and group cart lines by restaurant.

        A group id is generated only when more than one restaurant is
        involved. ``existing_group_id`` appends to an earlier checkout and is
        kept even for a single restaurant.
        """
        if not cart_lines:
            raise EmptyCart({"items": ["Cart must contain at least one item"]})

        grouped: dict[str, list[PricedLine]] = {}
        for cart_line in cart_lines:
            item = self._catalog.resolve_item(cart_line.menu_item_id)
            if item is None:
                raise UnresolvableItem({"items": [f"Menu item {cart_line.menu_item_id} does not exist"]})
            if not item.available:
                raise UnresolvableItem({"items": [f"Menu item {item.name} is not available"]})

            grouped.setdefault(item.restaurant_id, []).append(
                PricedLine(
                    menu_item_id=item.item_id,
                    name=item.name,
                    quantity=cart_line.quantity,
                    unit_price=item.price,
                    notes=cart_line.notes,
                )
            )

        groups = tuple(
            SellerGroup(restaurant_id=restaurant_id, lines=tuple(lines), charges=charges_for_lines(lines))
            for restaurant_id, lines in grouped.items()
        )

        if existing_group_id:
            group_id = existing_group_id
        elif len(groups) > 1:
            group_id = new_group_id()
        else:
            group_id = None
        return CheckoutSplit(groups=groups, group_id=group_id)
