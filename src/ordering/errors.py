"""Error taxonomy for the ordering domain.

Validation and state errors extend Protean's ValidationError so they carry a
field -> messages dict and map to 400 responses like every other domain
validation failure. Security and conflict errors are separate because callers
must treat them differently (fail closed, or retry after re-reading).
"""

from protean.exceptions import ValidationError


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
class EmptyCart(ValidationError):
    """Checkout was attempted without any cart lines."""


class UnresolvableItem(ValidationError):
    """A cart line references an unknown or unavailable menu item."""


class InvalidQuantity(ValidationError):
    """A line quantity below 1 was requested."""


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------
class InvalidTransition(ValidationError):
    """The requested status is not the immediate next state of the order."""


class OrderNotModifiable(ValidationError):
    """Lines can only change while the order is pending or paid."""


# ---------------------------------------------------------------------------
# Security and conflicts
# ---------------------------------------------------------------------------
class OrderingError(Exception):
    """Base class for non-validation ordering failures."""

    def __init__(self, message: str, **context) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class PaymentVerificationFailed(OrderingError):
    """The gateway callback could not be authenticated against its intent."""


class ConcurrentModification(OrderingError):
    """The order changed since the caller last read it. Re-fetch and retry."""


class OrderNumberConflict(OrderingError):
    """A generated order number collided with an existing order twice in a row."""
