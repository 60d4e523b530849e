"""Shared BDD fixtures and step definitions for food court ordering."""

import pytest
from ordering.checkout.splitter import CartLine
from ordering.errors import PaymentVerificationFailed
from ordering.order.order import Order
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when


@pytest.fixture()
def context():
    """Mutable scenario state shared between steps."""
    return {"cart": [], "result": None, "order": None, "error": None}


def _all_orders():
    return current_domain.repository_for(Order)._dao.query.all().items


def _order_for(context, restaurant_id):
    return next(order for order in context["result"].orders if order.restaurant_id == restaurant_id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("the food court menu is loaded")
def _(food_court):
    return food_court


@given(parsers.re(r'a cart with (?P<entries>.+)'))
def _(context, entries):
    for entry in entries.split(" and "):
        quantity, item_id = entry.split(" x ")
        context["cart"].append(CartLine(menu_item_id=item_id.strip('"'), quantity=int(quantity)))


@given(parsers.parse('payouts to "{account}" are failing'))
def _(gateway, account):
    gateway.fail_transfers_to(account)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the guest pays for the cart")
def _(context, services, gateway):
    intent = services.checkout.create_payment_intent(context["cart"])
    transaction_id, signature = gateway.capture(intent.intent_id)
    context["callback"] = {
        "intent_id": intent.intent_id,
        "transaction_id": transaction_id,
        "signature": signature,
        "cart_lines": context["cart"],
    }
    context["result"] = services.checkout.verify_and_materialize(**context["callback"])


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.parse("{count:d} orders are created"))
def _(context, count):
    assert len(context["result"].orders) == count


@then(parsers.parse("{count:d} orders exist"))
def _(count):
    assert len(_all_orders()) == count


@then(parsers.parse('the order for "{restaurant_id}" has transfer status "{transfer}" and settlement status "{settlement}"'))
def _(context, restaurant_id, transfer, settlement):
    order = _order_for(context, restaurant_id)
    assert order.transfer_status == transfer
    assert order.settlement_status == settlement


@then("the action is rejected")
def _(context):
    assert isinstance(context["error"], (ValidationError, PaymentVerificationFailed))
