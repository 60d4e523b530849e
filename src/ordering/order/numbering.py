"""Human-readable order numbers: ``FC-<last 6 digits of epoch ms><4 hex chars>``."""

import secrets
import time

ORDER_NUMBER_PREFIX = "FC"


def generate_order_number() -> str:
    timestamp = str(int(time.time() * 1000))[-6:]
    return f"{ORDER_NUMBER_PREFIX}-{timestamp}{secrets.token_hex(2).upper()}"
