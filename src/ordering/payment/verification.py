"""Payment callback verification — the only gate between "money moved" and "order exists".

The gateway signs ``<intent_id>|<transaction_id>`` with HMAC-SHA256 keyed by the
server-held secret. Anything other than an exact match fails closed.
"""

import hashlib
import hmac

import structlog

from ordering.errors import PaymentVerificationFailed

logger = structlog.get_logger(__name__)


def compute_signature(secret: str, intent_id: str, transaction_id: str) -> str:
    message = f"{intent_id}|{transaction_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


class PaymentVerifier:
    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("Payment verification requires a non-empty secret")
        self._secret = secret

    def verify(self, intent_id: str, transaction_id: str, signature: str) -> None:
        """Raise PaymentVerificationFailed unless the signature is authentic."""
        if not intent_id or not transaction_id or not signature:
            self._reject(intent_id, transaction_id, "missing payment identifiers")

        expected = compute_signature(self._secret, intent_id, transaction_id)
        if not hmac.compare_digest(expected.encode(), signature.encode()):
            self._reject(intent_id, transaction_id, "signature mismatch")

    def _reject(self, intent_id, transaction_id, reason):
        logger.warning(
            "payment_verification_failed",
            security_event=True,
            intent_id=intent_id,
            transaction_id=transaction_id,
            reason=reason,
        )
        raise PaymentVerificationFailed(
            "Payment verification failed",
            intent_id=intent_id,
            transaction_id=transaction_id,
            reason=reason,
        )
