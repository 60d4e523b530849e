"""Payment intent service — opens a gateway intent for a checkout's combined total.

No order exists at this point. Every checkout attempt gets a fresh intent;
intents are never reused across attempts.
"""

import structlog
from protean.utils.globals import current_domain

from ordering.checkout.splitter import CheckoutSplit, new_group_id
from ordering.gateway.port import PaymentGateway
from ordering.payment.intent import PaymentIntent

logger = structlog.get_logger(__name__)


class PaymentIntentService:
    def __init__(self, gateway: PaymentGateway, currency: str = "INR") -> None:
        self._gateway = gateway
        self._currency = currency

    def create(self, split: CheckoutSplit) -> PaymentIntent:
        receipt = f"rcpt_{new_group_id()[4:]}"
        result = self._gateway.create_intent(
            amount=split.grand_total,
            currency=self._currency,
            receipt=receipt,
            notes={
                "item_count": split.item_count,
                "restaurant_count": split.restaurant_count,
                "subtotal": split.subtotal,
                "service_charge": split.service_charge,
                "tax": split.tax,
            },
        )

        intent = PaymentIntent.open(
            intent_id=result.intent_id,
            amount=split.grand_total,
            currency=result.currency,
            item_count=split.item_count,
            subtotal=split.subtotal,
            service_charge=split.service_charge,
            tax=split.tax,
            restaurant_count=split.restaurant_count,
        )
        current_domain.repository_for(PaymentIntent).add(intent)

        logger.info(
            "payment_intent_created",
            intent_id=intent.intent_id,
            amount=intent.amount,
            currency=intent.currency,
            restaurant_count=split.restaurant_count,
        )
        return intent
