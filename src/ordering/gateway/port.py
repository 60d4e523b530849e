"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement:
payment intents for the combined checkout total, payouts ("transfers") to a
restaurant's linked account, and transfer status lookups. Declines come back
as a failed ``TransferResult``; transport failures raise ``GatewayError``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class GatewayError(Exception):
    """The gateway could not be reached or returned an unusable response."""


@dataclass(frozen=True)
class IntentResult:
    """An intent created at the gateway for the combined checkout total."""

    intent_id: str
    amount: float
    currency: str
    receipt: str | None = None
    notes: dict = field(default_factory=dict)


@dataclass(frozen=True)
class TransferResult:
    """Result of a payout attempt to a restaurant account."""

    success: bool
    transfer_id: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_intent(
        self,
        amount: float,
        currency: str,
        receipt: str,
        notes: dict,
    ) -> IntentResult:
        """Create a payment intent. Never creates an order."""
        ...

    @abstractmethod
    def transfer(
        self,
        destination_account: str,
        amount: float,
        currency: str,
        source_transaction_id: str | None,
        metadata: dict,
    ) -> TransferResult:
        """Move funds from a captured payment to a linked payout account. Single attempt."""
        ...

    @abstractmethod
    def fetch_transfer(self, transfer_id: str) -> dict:
        """Return the gateway's current view of a transfer."""
        ...
