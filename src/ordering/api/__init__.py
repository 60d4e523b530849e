"""Ordering domain API package."""

from ordering.api.realtime import realtime_router
from ordering.api.routes import checkout_router, order_router, restaurant_router

__all__ = ["checkout_router", "order_router", "restaurant_router", "realtime_router"]
