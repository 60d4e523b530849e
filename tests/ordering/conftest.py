import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------
SECRET = "test-secret"


@pytest.fixture()
def secret():
    return SECRET


@pytest.fixture()
def gateway():
    from ordering.gateway.fake_adapter import FakeGateway

    return FakeGateway(SECRET)


@pytest.fixture()
def broadcaster():
    from ordering.broadcast.memory import InMemoryBroadcaster

    return InMemoryBroadcaster()


@pytest.fixture()
def services(gateway, broadcaster):
    from ordering.container import build_services

    return build_services(gateway=gateway, broadcaster=broadcaster, secret=SECRET, pause_seconds=0)


# ---------------------------------------------------------------------------
# Food court data
# ---------------------------------------------------------------------------
@pytest.fixture()
def food_court():
    """Two restaurants with payout accounts and one without.

    Spice Junction sells item-a at 100, Dragon Wok sells item-b at 50,
    Pizza Palace (no payout account) sells item-c at 80. item-x is sold out.
    """
    from ordering.catalogue.seeding import load_seed

    load_seed(
        {
            "restaurants": [
                {
                    "id": "rest-1",
                    "name": "Spice Junction",
                    "commission_rate": 0.10,
                    "payout_account_id": "acc_rest_1",
                    "menu": [
                        {"id": "item-a", "name": "Butter Chicken", "price": 100},
                        {"id": "item-a2", "name": "Garlic Naan", "price": 30},
                        {"id": "item-x", "name": "Biryani", "price": 250, "available": False},
                    ],
                },
                {
                    "id": "rest-2",
                    "name": "Dragon Wok",
                    "commission_rate": 0.10,
                    "payout_account_id": "acc_rest_2",
                    "menu": [{"id": "item-b", "name": "Hakka Noodles", "price": 50}],
                },
                {
                    "id": "rest-3",
                    "name": "Pizza Palace",
                    "menu": [{"id": "item-c", "name": "Margherita", "price": 80}],
                },
            ]
        }
    )
    return {"rest-1": "acc_rest_1", "rest-2": "acc_rest_2", "rest-3": None}


def cart(*entries):
    """cart(("item-a", 2), ("item-b", 1)) -> list of CartLine."""
    from ordering.checkout.splitter import CartLine

    return [CartLine(menu_item_id=item_id, quantity=qty) for item_id, qty in entries]


@pytest.fixture()
def make_cart():
    return cart


@pytest.fixture()
def pay(services, gateway, make_cart):
    """Run the whole pre-pay checkout for the given (item_id, qty) pairs."""

    def _pay(*entries, **kwargs):
        lines = make_cart(*entries)
        intent = services.checkout.create_payment_intent(lines)
        transaction_id, signature = gateway.capture(intent.intent_id)
        return services.checkout.verify_and_materialize(
            intent_id=intent.intent_id,
            transaction_id=transaction_id,
            signature=signature,
            cart_lines=lines,
            **kwargs,
        )

    return _pay
