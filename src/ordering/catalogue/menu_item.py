"""MenuItem aggregate — local copy of the menu used to price carts."""

from protean.fields import Boolean, Float, Identifier, String

from ordering.domain import ordering


@ordering.aggregate
class MenuItem:
    restaurant_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    price = Float(required=True, min_value=0.0)
    is_available = Boolean(default=True)

    def change_price(self, price):
        self.price = price

    def mark_unavailable(self):
        self.is_available = False

    def mark_available(self):
        self.is_available = True
