"""Signature check properties."""

import hashlib
import hmac

from guidepay.common.signatures import sign, verify

SECRET = b"s3cret"


def test_accepts_exact_gateway_digest():
    digest = hmac.new(SECRET, b"order_A|pay_B", hashlib.sha256).hexdigest()
    assert sign("order_A", "pay_B", SECRET) == digest
    assert verify("order_A", "pay_B", digest, SECRET)


def test_deterministic():
    sig = sign("order_A", "pay_B", SECRET)
    assert all(verify("order_A", "pay_B", sig, SECRET) for _ in range(5))


def test_rejects_wrong_secret():
    sig = sign("order_A", "pay_B", b"other")
    assert not verify("order_A", "pay_B", sig, SECRET)


def test_rejects_reordered_or_altered_identifiers():
    sig = sign("order_A", "pay_B", SECRET)
    assert not verify("pay_B", "order_A", sig, SECRET)
    assert not verify("order_A", "pay_C", sig, SECRET)
    assert not verify("order_A", "pay_B", sig.upper(), SECRET)


def test_malformed_input_is_a_mismatch_not_an_error():
    assert not verify("", "", "", SECRET)
    assert not verify("order_A", "pay_B", "not-hex-£", SECRET)
    assert not verify(None, None, None, SECRET)
