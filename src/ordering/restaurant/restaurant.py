"""Restaurant aggregate — a seller in the food court.

A restaurant without a linked payout account is still a valid seller; its
orders are simply left for manual settlement.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, String

from ordering.domain import ordering
from ordering.order.pricing import DEFAULT_COMMISSION_RATE


@ordering.aggregate
class Restaurant:
    name = String(required=True, max_length=150)
    commission_rate = Float(default=DEFAULT_COMMISSION_RATE, min_value=0.0, max_value=1.0)
    payout_account_id = String(max_length=255)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, name, commission_rate=DEFAULT_COMMISSION_RATE, payout_account_id=None, restaurant_id=None):
        now = datetime.now(UTC)
        identity = {"id": restaurant_id} if restaurant_id else {}
        return cls(
            **identity,
            name=name,
            commission_rate=commission_rate,
            payout_account_id=payout_account_id,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    @property
    def can_receive_transfers(self) -> bool:
        return bool(self.payout_account_id)

    def link_payout_account(self, account_id):
        if not account_id or not account_id.strip():
            raise ValidationError({"payout_account_id": ["Payout account reference is required"]})
        self.payout_account_id = account_id.strip()
        self.updated_at = datetime.now(UTC)

    def deactivate(self):
        self.is_active = False
        self.updated_at = datetime.now(UTC)
