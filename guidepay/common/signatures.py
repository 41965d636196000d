"""Razorpay payment signature check.

The gateway signs `"{order_id}|{payment_id}"` with the account's key secret
using HMAC-SHA256. The secret never reaches the browser, so a matching digest
is the only proof that the identifiers were issued for this order.
"""

import hashlib
import hmac


def sign(order_id: str, payment_id: str, secret: bytes) -> str:
    """Return the hex digest the gateway would attach to this payment."""

    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret, message, hashlib.sha256).hexdigest()


def verify(order_id: str, payment_id: str, signature: str, secret: bytes) -> bool:
    """Compare the submitted signature with the recomputed one in constant time."""

    if not isinstance(signature, str):
        return False
    expected = sign(order_id or "", payment_id or "", secret)
    # compare_digest rejects non-ASCII str input with TypeError.
    try:
        return hmac.compare_digest(expected, signature)
    except TypeError:
        return False
