"""Wiring for the ordering services.

Built once per process (the FastAPI app keeps it on ``app.state``) and passed
to whoever needs it. Tests build their own with fakes.
"""

import os
from dataclasses import dataclass

from ordering.broadcast.port import Broadcaster
from ordering.broadcast.publisher import OrderEventPublisher
from ordering.broadcast.websocket import WebSocketHub
from ordering.catalogue.lookup import RepositoryCatalog
from ordering.catalogue.port import CatalogLookup
from ordering.checkout.materializer import OrderMaterializer
from ordering.checkout.service import CheckoutService
from ordering.checkout.splitter import OrderSplitter
from ordering.gateway import build_gateway, currency, key_secret
from ordering.gateway.port import PaymentGateway
from ordering.order.numbering import generate_order_number
from ordering.order.workflow import OrderWorkflow
from ordering.payment.intent_service import PaymentIntentService
from ordering.payment.verification import PaymentVerifier
from ordering.settlement.engine import SettlementEngine
from ordering.utils.locks import KeyedLock

DEFAULT_SETTLEMENT_PAUSE_SECONDS = 0.1


def settlement_pause_seconds() -> float:
    return float(os.environ.get("SETTLEMENT_PAUSE_SECONDS", DEFAULT_SETTLEMENT_PAUSE_SECONDS))


@dataclass
class OrderingServices:
    gateway: PaymentGateway
    broadcaster: Broadcaster
    publisher: OrderEventPublisher
    checkout: CheckoutService
    workflow: OrderWorkflow
    settlement: SettlementEngine


def build_services(
    gateway: PaymentGateway | None = None,
    broadcaster: Broadcaster | None = None,
    catalog: CatalogLookup | None = None,
    secret: str | None = None,
    pause_seconds: float | None = None,
    number_generator=generate_order_number,
) -> OrderingServices:
    secret = secret or key_secret()
    gateway = gateway or build_gateway(secret)
    broadcaster = broadcaster or WebSocketHub()
    payment_currency = currency()
    pause = settlement_pause_seconds() if pause_seconds is None else pause_seconds

    publisher = OrderEventPublisher(broadcaster)
    settlement = SettlementEngine(gateway, currency=payment_currency, pause_seconds=pause)
    checkout = CheckoutService(
        splitter=OrderSplitter(catalog or RepositoryCatalog()),
        intents=PaymentIntentService(gateway, currency=payment_currency),
        verifier=PaymentVerifier(secret),
        materializer=OrderMaterializer(publisher, number_generator=number_generator),
        settlement=settlement,
        locks=KeyedLock(),
    )
    workflow = OrderWorkflow(publisher, settlement, locks=KeyedLock())
    return OrderingServices(
        gateway=gateway,
        broadcaster=broadcaster,
        publisher=publisher,
        checkout=checkout,
        workflow=workflow,
        settlement=settlement,
    )
