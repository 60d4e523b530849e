"""Checkout service — the two ways a cart becomes orders.

Pre-pay:    create_payment_intent → guest pays → verify_and_materialize
Pay-later:  materialize_unpaid (orders start pending/unpaid)

Verification always happens before the cart is even resolved. Replaying a
verified callback returns the orders that callback already created.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.checkout.materializer import OrderMaterializer
from ordering.checkout.splitter import OrderSplitter
from ordering.errors import PaymentVerificationFailed
from ordering.order.order import FulfillmentType, Order
from ordering.payment.intent import PaymentIntent
from ordering.payment.intent_service import PaymentIntentService
from ordering.payment.verification import PaymentVerifier
from ordering.settlement.engine import SettlementEngine, SettlementReport
from ordering.utils.locks import KeyedLock

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    orders: tuple[Order, ...]
    group_id: str | None = None
    settlement: SettlementReport | None = None
    replayed: bool = False


class CheckoutService:
    def __init__(
        self,
        splitter: OrderSplitter,
        intents: PaymentIntentService,
        verifier: PaymentVerifier,
        materializer: OrderMaterializer,
        settlement: SettlementEngine,
        locks: KeyedLock | None = None,
    ) -> None:
        self._splitter = splitter
        self._intents = intents
        self._verifier = verifier
        self._materializer = materializer
        self._settlement = settlement
        self._locks = locks or KeyedLock()

    def create_payment_intent(self, cart_lines) -> PaymentIntent:
        split = self._splitter.split(cart_lines)
        return self._intents.create(split)

    def verify_and_materialize(
        self,
        intent_id,
        transaction_id,
        signature,
        cart_lines,
        fulfillment_type=FulfillmentType.DINE_IN.value,
        existing_group_id=None,
        customer_email=None,
        customer_phone=None,
    ) -> CheckoutResult:
        self._verifier.verify(intent_id, transaction_id, signature)

        with self._locks.hold(f"intent:{intent_id}"):
            intent = self._load_intent(intent_id)
            if intent.is_consumed:
                return self._replay(intent, transaction_id)

            split = self._splitter.split(cart_lines, existing_group_id=existing_group_id)
            if abs(split.grand_total - intent.amount) > 0.005:
                logger.warning(
                    "payment_amount_mismatch",
                    security_event=True,
                    intent_id=intent_id,
                    intent_amount=intent.amount,
                    cart_amount=split.grand_total,
                )
                raise PaymentVerificationFailed(
                    "Payment verification failed",
                    intent_id=intent_id,
                    reason="cart total does not match the paid amount",
                )

            materialized = self._materializer.materialize(
                split,
                fulfillment_type=fulfillment_type,
                prepaid=True,
                intent=intent,
                transaction_id=transaction_id,
                customer_email=customer_email,
                customer_phone=customer_phone,
            )

        report = self._settlement.settle(materialized.orders, transaction_id)
        orders = tuple(current_domain.repository_for(Order).get(order.id) for order in materialized.orders)
        return CheckoutResult(orders=orders, group_id=materialized.group_id, settlement=report)

    def materialize_unpaid(
        self,
        cart_lines,
        fulfillment_type=FulfillmentType.DINE_IN.value,
        existing_group_id=None,
        customer_email=None,
        customer_phone=None,
    ) -> CheckoutResult:
        split = self._splitter.split(cart_lines, existing_group_id=existing_group_id)
        materialized = self._materializer.materialize(
            split,
            fulfillment_type=fulfillment_type,
            prepaid=False,
            customer_email=customer_email,
            customer_phone=customer_phone,
        )
        return CheckoutResult(orders=materialized.orders, group_id=materialized.group_id)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @staticmethod
    def _load_intent(intent_id) -> PaymentIntent:
        try:
            return current_domain.repository_for(PaymentIntent).get(intent_id)
        except ObjectNotFoundError:
            logger.warning("payment_intent_unknown", security_event=True, intent_id=intent_id)
            raise PaymentVerificationFailed("Payment verification failed", intent_id=intent_id, reason="unknown intent")

    @staticmethod
    def _replay(intent, transaction_id) -> CheckoutResult:
        if intent.transaction_id != transaction_id:
            logger.warning(
                "payment_intent_reused",
                security_event=True,
                intent_id=intent.intent_id,
                transaction_id=transaction_id,
            )
            raise PaymentVerificationFailed(
                "Payment verification failed",
                intent_id=intent.intent_id,
                reason="intent already used by another payment",
            )

        orders = tuple(current_domain.repository_for(Order).find_by_payment_intent(intent.intent_id))
        logger.info("checkout_replayed", intent_id=intent.intent_id, order_count=len(orders))
        return CheckoutResult(orders=orders, group_id=intent.group_id, replayed=True)
