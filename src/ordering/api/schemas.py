"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands and services. Prices never come from the client.
"""

from typing import Literal

from pydantic import BaseModel, Field

from ordering.checkout.splitter import CartLine

FulfillmentTypeLiteral = Literal["dine_in", "takeaway"]
OrderStatusLiteral = Literal["pending", "paid", "preparing", "ready", "served", "cancelled"]
PaymentMethodLiteral = Literal["cash", "card", "upi", "online"]


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    menu_item_id: str = Field(min_length=1)
    quantity: int = Field(ge=1, default=1)
    notes: str | None = Field(default=None, max_length=500)

    def to_cart_line(self) -> CartLine:
        return CartLine(menu_item_id=self.menu_item_id, quantity=self.quantity, notes=self.notes)


class CustomerContactMixin(BaseModel):
    customer_email: str | None = Field(default=None, max_length=254)
    customer_phone: str | None = Field(default=None, max_length=20)


# ---------------------------------------------------------------------------
# Checkout Request Schemas
# ---------------------------------------------------------------------------
class CreateIntentRequest(BaseModel):
    items: list[CartLineSchema]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {"menu_item_id": "item-dosa", "quantity": 2},
                        {"menu_item_id": "item-lassi", "quantity": 1, "notes": "less sugar"},
                    ]
                }
            ]
        }
    }


class VerifyPaymentRequest(CustomerContactMixin):
    intent_id: str
    transaction_id: str
    signature: str
    items: list[CartLineSchema]
    fulfillment_type: FulfillmentTypeLiteral = "dine_in"
    existing_group_id: str | None = None


class PayLaterRequest(CustomerContactMixin):
    items: list[CartLineSchema]
    fulfillment_type: FulfillmentTypeLiteral = "dine_in"
    existing_group_id: str | None = None


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class UpdateStatusRequest(BaseModel):
    status: OrderStatusLiteral
    expected_revision: int | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)
    expected_revision: int | None = None


class RecordPaymentRequest(BaseModel):
    payment_method: PaymentMethodLiteral = "cash"
    transaction_id: str | None = None
    expected_revision: int | None = None


class UpdateLineQuantityRequest(BaseModel):
    quantity: int
    expected_revision: int | None = None


# ---------------------------------------------------------------------------
# Restaurant Request Schemas
# ---------------------------------------------------------------------------
class RegisterRestaurantRequest(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    commission_rate: float = Field(default=0.10, ge=0, le=1)
    payout_account_id: str | None = None


class LinkPayoutAccountRequest(BaseModel):
    account_id: str = Field(min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class PaymentIntentResponse(BaseModel):
    intent_id: str
    amount: float
    currency: str
    item_count: int
    restaurant_count: int


class OrderLineResponse(BaseModel):
    id: str
    menu_item_id: str
    name: str | None = None
    quantity: int
    unit_price: float
    notes: str | None = None


class OrderResponse(BaseModel):
    id: str
    order_number: str
    group_id: str | None = None
    restaurant_id: str
    fulfillment_type: str
    status: str
    payment_status: str
    payment_method: str | None = None
    lines: list[OrderLineResponse]
    subtotal: float
    service_charge: float
    tax: float
    grand_total: float
    transfer_status: str | None = None
    settlement_status: str | None = None
    cancelled_by: str | None = None
    revision: int
    created_at: str | None = None
    updated_at: str | None = None


class SettlementResultResponse(BaseModel):
    order_id: str
    order_number: str
    restaurant_id: str
    success: bool
    transfer_status: str
    platform_commission: float
    transfer_amount: float
    transfer_id: str | None = None
    error: str | None = None


class CheckoutResponse(BaseModel):
    orders: list[OrderResponse]
    group_id: str | None = None
    settlement: list[SettlementResultResponse] | None = None
    replayed: bool = False


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    count: int


class StatsSummaryResponse(BaseModel):
    date: str
    restaurant_id: str | None = None
    total_orders: int
    pending_orders: int
    preparing_orders: int
    ready_orders: int
    total_revenue: float


class TransferStatusResponse(BaseModel):
    order_id: str
    transfer_id: str | None = None
    transfer_status: str | None = None
    settlement_status: str | None = None
    transfer_amount: float | None = None
    platform_commission: float | None = None
    gateway: dict | None = None


class RestaurantResponse(BaseModel):
    id: str
    name: str
    commission_rate: float
    payout_account_linked: bool
    is_active: bool
