"""FastAPI routes for the Ordering domain — checkout, orders and restaurants.

Handlers that reach the payment gateway or take per-order locks are plain
``def`` so FastAPI runs them in its threadpool, off the event loop.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Request
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    CancelOrderRequest,
    CheckoutResponse,
    CreateIntentRequest,
    LinkPayoutAccountRequest,
    OrderListResponse,
    OrderResponse,
    OrderStatusLiteral,
    PayLaterRequest,
    PaymentIntentResponse,
    RecordPaymentRequest,
    RegisterRestaurantRequest,
    RestaurantResponse,
    SettlementResultResponse,
    StatsSummaryResponse,
    TransferStatusResponse,
    UpdateLineQuantityRequest,
    UpdateStatusRequest,
    VerifyPaymentRequest,
)
from ordering.container import OrderingServices
from ordering.order.snapshot import serialize_order
from ordering.projections.order_board import stats_summary
from ordering.restaurant.restaurant import Restaurant


def get_services(request: Request) -> OrderingServices:
    return request.app.state.services


def _order_response(order) -> OrderResponse:
    return OrderResponse(**serialize_order(order))


def _checkout_response(result) -> CheckoutResponse:
    settlement = None
    if result.settlement is not None:
        settlement = [SettlementResultResponse(**asdict(item)) for item in result.settlement.results]
    return CheckoutResponse(
        orders=[_order_response(order) for order in result.orders],
        group_id=result.group_id,
        settlement=settlement,
        replayed=result.replayed,
    )


def _restaurant_response(restaurant) -> RestaurantResponse:
    return RestaurantResponse(
        id=str(restaurant.id),
        name=restaurant.name,
        commission_rate=restaurant.commission_rate,
        payout_account_linked=restaurant.can_receive_transfers,
        is_active=restaurant.is_active,
    )


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("/intents", status_code=201, response_model=PaymentIntentResponse)
def create_payment_intent(
    body: CreateIntentRequest,
    services: OrderingServices = Depends(get_services),
) -> PaymentIntentResponse:
    intent = services.checkout.create_payment_intent([item.to_cart_line() for item in body.items])
    return PaymentIntentResponse(
        intent_id=intent.intent_id,
        amount=intent.amount,
        currency=intent.currency,
        item_count=intent.item_count,
        restaurant_count=intent.restaurant_count,
    )


@checkout_router.post("/verify", status_code=201, response_model=CheckoutResponse)
def verify_payment(
    body: VerifyPaymentRequest,
    services: OrderingServices = Depends(get_services),
) -> CheckoutResponse:
    result = services.checkout.verify_and_materialize(
        intent_id=body.intent_id,
        transaction_id=body.transaction_id,
        signature=body.signature,
        cart_lines=[item.to_cart_line() for item in body.items],
        fulfillment_type=body.fulfillment_type,
        existing_group_id=body.existing_group_id,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
    )
    return _checkout_response(result)


@checkout_router.post("/pay-later", status_code=201, response_model=CheckoutResponse)
def pay_later(
    body: PayLaterRequest,
    services: OrderingServices = Depends(get_services),
) -> CheckoutResponse:
    result = services.checkout.materialize_unpaid(
        cart_lines=[item.to_cart_line() for item in body.items],
        fulfillment_type=body.fulfillment_type,
        existing_group_id=body.existing_group_id,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
    )
    return _checkout_response(result)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    restaurant_id: str | None = None,
    status: OrderStatusLiteral | None = None,
    limit: int = 100,
    services: OrderingServices = Depends(get_services),
) -> OrderListResponse:
    orders = services.workflow.list_orders(restaurant_id=restaurant_id, status=status, limit=limit)
    return OrderListResponse(orders=[_order_response(order) for order in orders], count=len(orders))


@order_router.get("/stats/summary", response_model=StatsSummaryResponse)
async def order_stats(restaurant_id: str | None = None) -> StatsSummaryResponse:
    return StatsSummaryResponse(**stats_summary(restaurant_id=restaurant_id))


@order_router.get("/group/{group_id}", response_model=OrderListResponse)
async def orders_in_group(
    group_id: str,
    services: OrderingServices = Depends(get_services),
) -> OrderListResponse:
    orders = services.workflow.fetch_by_group_id(group_id)
    return OrderListResponse(orders=[_order_response(order) for order in orders], count=len(orders))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, services: OrderingServices = Depends(get_services)) -> OrderResponse:
    return _order_response(services.workflow.get_order(order_id))


@order_router.patch("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: str,
    body: UpdateStatusRequest,
    services: OrderingServices = Depends(get_services),
) -> OrderResponse:
    order = services.workflow.transition_status(order_id, body.status, expected_revision=body.expected_revision)
    return _order_response(order)


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: str,
    body: CancelOrderRequest,
    services: OrderingServices = Depends(get_services),
) -> OrderResponse:
    order = services.workflow.cancel(order_id, reason=body.reason, expected_revision=body.expected_revision)
    return _order_response(order)


@order_router.post("/{order_id}/payment", response_model=OrderResponse)
def record_payment(
    order_id: str,
    body: RecordPaymentRequest,
    services: OrderingServices = Depends(get_services),
) -> OrderResponse:
    order = services.workflow.record_payment(
        order_id,
        payment_method=body.payment_method,
        transaction_id=body.transaction_id,
        expected_revision=body.expected_revision,
    )
    return _order_response(order)


@order_router.delete("/{order_id}/lines/{line_id}", response_model=OrderResponse)
def remove_order_line(
    order_id: str,
    line_id: str,
    expected_revision: int | None = None,
    services: OrderingServices = Depends(get_services),
) -> OrderResponse:
    order = services.workflow.remove_line(order_id, line_id, expected_revision=expected_revision)
    return _order_response(order)


@order_router.patch("/{order_id}/lines/{line_id}/quantity", response_model=OrderResponse)
def update_line_quantity(
    order_id: str,
    line_id: str,
    body: UpdateLineQuantityRequest,
    services: OrderingServices = Depends(get_services),
) -> OrderResponse:
    order = services.workflow.set_line_quantity(
        order_id,
        line_id,
        body.quantity,
        expected_revision=body.expected_revision,
    )
    return _order_response(order)


@order_router.get("/{order_id}/transfer", response_model=TransferStatusResponse)
def transfer_status(order_id: str, services: OrderingServices = Depends(get_services)) -> TransferStatusResponse:
    return TransferStatusResponse(**services.settlement.transfer_status(order_id))


# ---------------------------------------------------------------------------
# Restaurant Router
# ---------------------------------------------------------------------------
restaurant_router = APIRouter(prefix="/restaurants", tags=["restaurants"])


@restaurant_router.post("", status_code=201, response_model=RestaurantResponse)
async def register_restaurant(body: RegisterRestaurantRequest) -> RestaurantResponse:
    restaurant = Restaurant.register(
        name=body.name,
        commission_rate=body.commission_rate,
        payout_account_id=body.payout_account_id,
    )
    current_domain.repository_for(Restaurant).add(restaurant)
    return _restaurant_response(restaurant)


@restaurant_router.get("/{restaurant_id}", response_model=RestaurantResponse)
async def get_restaurant(restaurant_id: str) -> RestaurantResponse:
    return _restaurant_response(current_domain.repository_for(Restaurant).get(restaurant_id))


@restaurant_router.put("/{restaurant_id}/payout-account", response_model=RestaurantResponse)
async def link_payout_account(restaurant_id: str, body: LinkPayoutAccountRequest) -> RestaurantResponse:
    repo = current_domain.repository_for(Restaurant)
    restaurant = repo.get(restaurant_id)
    restaurant.link_payout_account(body.account_id)
    repo.add(restaurant)
    return _restaurant_response(restaurant)
