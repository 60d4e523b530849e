"""Ordering bounded context — food court orders, checkout and seller settlement.

Splits one multi-restaurant cart into restaurant-scoped orders, materializes
them only after a verified payment (or unpaid, for the pay-later path),
settles each paid order to its restaurant minus platform commission, and
drives the order status workflow with real-time fan-out to staff and guests.
"""

import structlog
from protean.domain import Domain

from ordering.utils.logging import configure_logging

configure_logging()

logger = structlog.get_logger(__name__)

ordering = Domain(name="ordering")
