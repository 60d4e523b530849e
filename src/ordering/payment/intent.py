"""PaymentIntent aggregate — ledger entry for one pre-pay checkout attempt.

The id is the gateway's intent id. An intent is ``created`` when the guest
starts paying and ``consumed`` in the same unit of work that materializes the
orders, which is what makes a replayed callback harmless.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String, Text

from ordering.domain import ordering


class IntentStatus(Enum):
    CREATED = "created"
    CONSUMED = "consumed"


@ordering.aggregate
class PaymentIntent:
    intent_id = String(identifier=True, required=True, max_length=255)
    amount = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="INR")
    item_count = Integer(default=0)
    subtotal = Float(default=0.0)
    service_charge = Float(default=0.0)
    tax = Float(default=0.0)
    restaurant_count = Integer(default=0)
    status = String(choices=IntentStatus, default=IntentStatus.CREATED.value)
    transaction_id = String(max_length=255)
    group_id = String(max_length=50)
    order_ids = Text()  # JSON array of materialized order ids
    created_at = DateTime()
    consumed_at = DateTime()

    @classmethod
    def open(cls, intent_id, amount, currency, item_count, subtotal, service_charge, tax, restaurant_count):
        return cls(
            intent_id=intent_id,
            amount=amount,
            currency=currency,
            item_count=item_count,
            subtotal=subtotal,
            service_charge=service_charge,
            tax=tax,
            restaurant_count=restaurant_count,
            status=IntentStatus.CREATED.value,
            order_ids=json.dumps([]),
            created_at=datetime.now(UTC),
        )

    @property
    def is_consumed(self) -> bool:
        return self.status == IntentStatus.CONSUMED.value

    def get_order_ids(self) -> list[str]:
        return json.loads(self.order_ids) if self.order_ids else []

    def consume(self, transaction_id, order_ids, group_id=None):
        if self.is_consumed:
            raise ValidationError({"intent_id": ["Payment intent has already been used"]})
        self.status = IntentStatus.CONSUMED.value
        self.transaction_id = transaction_id
        self.group_id = group_id
        self.order_ids = json.dumps([str(oid) for oid in order_ids])
        self.consumed_at = datetime.now(UTC)
