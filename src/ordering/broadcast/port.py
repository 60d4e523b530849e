"""Broadcaster port and channel naming.

Channels:
    staff                  every restaurant's dashboard
    staff:<restaurant_id>  one restaurant's dashboard
    customer:<order_id>    the guest following one order

Delivery is at-most-once. Clients reconcile by re-reading the order.
"""

from abc import ABC, abstractmethod

STAFF_CHANNEL = "staff"


def staff_channel(restaurant_id=None) -> str:
    return f"{STAFF_CHANNEL}:{restaurant_id}" if restaurant_id else STAFF_CHANNEL


def customer_channel(order_id) -> str:
    return f"customer:{order_id}"


class Broadcaster(ABC):
    @abstractmethod
    def publish(self, channel: str, message: dict) -> None:
        """Hand a message to the channel's subscribers without waiting for delivery."""
        ...
