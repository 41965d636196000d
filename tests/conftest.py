"""Shared fixtures: settings without env files and in-memory collaborators."""

import pytest
from fastapi.testclient import TestClient

from guidepay.common.config import Settings
from guidepay.common.signatures import sign
from guidepay.services.checkout.main import create_app

SECRET = "rzp_test_secret"


class FakeGateway:
    def __init__(self, fail: Exception | None = None) -> None:
        self.calls: list[tuple[int, str, str]] = []
        self.fail = fail

    async def create_order(self, amount: int, currency: str, receipt: str) -> dict:
        self.calls.append((amount, currency, receipt))
        if self.fail:
            raise self.fail
        return {
            "id": f"order_{len(self.calls)}",
            "entity": "order",
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "status": "created",
        }


class FakeStore:
    def __init__(self, fail: Exception | None = None) -> None:
        self.calls: list[tuple[str, str, list[str]]] = []
        self.fail = fail

    async def append_row(self, store_id: str, range_selector: str, values: list[str]) -> None:
        self.calls.append((store_id, range_selector, values))
        if self.fail:
            raise self.fail


class FakeTransport:
    def __init__(self, fail: Exception | None = None) -> None:
        self.messages = []
        self.fail = fail

    async def send(self, message) -> None:
        self.messages.append(message)
        if self.fail:
            raise self.fail


def make_settings(**overrides) -> Settings:
    values = {
        "razorpay_key_id": "rzp_test_key",
        "razorpay_key_secret": SECRET,
        "google_credentials": "{}",
        "google_sheet_id": "sheet-123",
        "mailersend_api_key": "mlsn.test",
        "attachment_path": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def signed_payload(order_id: str = "order_1", payment_id: str = "pay_1", secret: str = SECRET, **extra) -> dict:
    payload = {
        "razorpay_order_id": order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": sign(order_id, payment_id, secret.encode()),
        "name": "Asha",
        "email": "asha@example.com",
        "phone": "+919800000000",
    }
    payload.update(extra)
    return payload


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(settings, gateway, store, transport):
    app = create_app(settings, gateway=gateway, store=store, transport=transport)
    with TestClient(app) as test_client:
        yield test_client
