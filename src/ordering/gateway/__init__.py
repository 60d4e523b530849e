"""Payment gateway factory.

The adapter is chosen by the PAYMENT_GATEWAY environment variable. Only the
configurable fake ships with the project; a real provider adapter implements
``PaymentGateway`` and registers its name here.
"""

import os

from ordering.gateway.port import PaymentGateway

DEFAULT_KEY_SECRET = "dev-secret-change-me"


def key_secret() -> str:
    """Server-held secret used to sign and verify payment callbacks."""
    return os.environ.get("PAYMENT_KEY_SECRET", DEFAULT_KEY_SECRET)


def currency() -> str:
    return os.environ.get("PAYMENT_CURRENCY", "INR")


def build_gateway(secret: str | None = None) -> PaymentGateway:
    adapter = os.environ.get("PAYMENT_GATEWAY", "fake")
    if adapter == "fake":
        from ordering.gateway.fake_adapter import FakeGateway

        return FakeGateway(secret or key_secret())
    raise ValueError(f"Unknown payment gateway adapter: {adapter}")
