"""Configurable fake payment gateway for development and testing.

Simulates intents and payouts without any external calls. Behaviour can be
changed at runtime: fail every transfer, fail transfers to specific accounts,
or raise ``GatewayError`` to imitate an unreachable gateway.

It can also play the customer's side of checkout: ``sign()`` produces the
callback signature a real gateway would send after capturing the payment.
"""

from uuid import uuid4

from ordering.gateway.port import GatewayError, IntentResult, PaymentGateway, TransferResult
from ordering.payment.verification import compute_signature


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, secret: str) -> None:
        self._secret = secret
        self.should_succeed: bool = True
        self.failure_reason: str = "Transfer rejected"
        self.raise_error: bool = False
        self.failing_accounts: set[str] = set()
        self.calls: list[dict] = []
        self._transfers: dict[str, dict] = {}

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Transfer rejected",
        raise_error: bool = False,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.raise_error = raise_error

    def fail_transfers_to(self, *accounts: str) -> None:
        self.failing_accounts.update(accounts)

    def sign(self, intent_id: str, transaction_id: str) -> str:
        return compute_signature(self._secret, intent_id, transaction_id)

    def capture(self, intent_id: str) -> tuple[str, str]:
        """Simulate the customer paying: returns (transaction_id, signature)."""
        transaction_id = f"fake_pay_{uuid4().hex[:14]}"
        return transaction_id, self.sign(intent_id, transaction_id)

    def create_intent(self, amount: float, currency: str, receipt: str, notes: dict) -> IntentResult:
        self.calls.append(
            {
                "method": "create_intent",
                "amount": amount,
                "currency": currency,
                "receipt": receipt,
                "notes": notes,
            }
        )
        if self.raise_error:
            raise GatewayError("Payment gateway unavailable")
        return IntentResult(
            intent_id=f"fake_order_{uuid4().hex[:14]}",
            amount=amount,
            currency=currency,
            receipt=receipt,
            notes=dict(notes),
        )

    def transfer(
        self,
        destination_account: str,
        amount: float,
        currency: str,
        source_transaction_id: str | None,
        metadata: dict,
    ) -> TransferResult:
        self.calls.append(
            {
                "method": "transfer",
                "destination_account": destination_account,
                "amount": amount,
                "currency": currency,
                "source_transaction_id": source_transaction_id,
                "metadata": metadata,
            }
        )
        if self.raise_error:
            raise GatewayError("Payment gateway unavailable")

        if self.should_succeed and destination_account not in self.failing_accounts:
            transfer_id = f"fake_trf_{uuid4().hex[:12]}"
            self._transfers[transfer_id] = {
                "id": transfer_id,
                "recipient": destination_account,
                "amount": amount,
                "currency": currency,
                "source": source_transaction_id,
                "status": "processed",
            }
            return TransferResult(success=True, transfer_id=transfer_id, gateway_status="processed")
        return TransferResult(success=False, gateway_status="failed", failure_reason=self.failure_reason)

    def fetch_transfer(self, transfer_id: str) -> dict:
        self.calls.append({"method": "fetch_transfer", "transfer_id": transfer_id})
        if self.raise_error:
            raise GatewayError("Payment gateway unavailable")
        if transfer_id not in self._transfers:
            raise GatewayError(f"Unknown transfer {transfer_id}")
        return dict(self._transfers[transfer_id])
