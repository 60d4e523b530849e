"""Per-user state for the checkout journeys. Nothing is shared across users."""

from dataclasses import dataclass, field


@dataclass
class CheckoutState:
    items: list[dict] = field(default_factory=list)
    intent_id: str | None = None
    group_id: str | None = None
    order_ids: list[str] = field(default_factory=list)
    revisions: dict[str, int] = field(default_factory=dict)

    def remember(self, orders: list[dict]) -> None:
        self.order_ids = [order["id"] for order in orders]
        self.revisions = {order["id"]: order["revision"] for order in orders}
