"""Order creation against the Razorpay Orders API."""

import threading
import time
from typing import Protocol

import httpx

from guidepay.common.config import Settings
from guidepay.common.errors import OrderGatewayError
from guidepay.common.logging import logger
from guidepay.common.metrics import upstream_failures_total
from guidepay.services.orders.models import PaymentOrder


class OrderGateway(Protocol):
    """Capability: create one order and return the gateway's JSON object."""

    async def create_order(self, amount: int, currency: str, receipt: str) -> dict: ...


class RazorpayGateway:
    """`POST /v1/orders` with HTTP basic auth (key id, key secret)."""

    def __init__(self, api_url: str, key_id: str, key_secret: str, timeout: float = 10.0, transport=None) -> None:
        self.api_url = api_url.rstrip("/")
        self.auth = (key_id, key_secret)
        self.timeout = timeout
        self.transport = transport

    async def create_order(self, amount: int, currency: str, receipt: str) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout, auth=self.auth, transport=self.transport) as client:
            resp = await client.post(
                f"{self.api_url}/orders",
                json={"amount": amount, "currency": currency, "receipt": receipt},
            )
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("error", {}).get("description") or resp.text
            except ValueError:
                detail = resp.text
            raise OrderGatewayError(f"gateway returned {resp.status_code}: {detail}")
        return resp.json()


class ReceiptLabels:
    """`receipt_order_<epoch millis>`, strictly increasing within the process."""

    def __init__(self, prefix: str = "receipt_order_", clock=time.time) -> None:
        self.prefix = prefix
        self.clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> str:
        with self._lock:
            millis = int(self.clock() * 1000)
            if millis <= self._last:
                millis = self._last + 1
            self._last = millis
        return f"{self.prefix}{millis}"


class OrderCreator:
    """Creates fixed-price orders for the guide."""

    def __init__(
        self,
        gateway: OrderGateway,
        amount: int = 4900,
        currency: str = "INR",
        receipts: ReceiptLabels | None = None,
        service_name: str = "orders",
    ) -> None:
        self.gateway = gateway
        self.amount = amount
        self.currency = currency
        self.receipts = receipts or ReceiptLabels()
        self.service_name = service_name

    @classmethod
    def from_settings(cls, settings: Settings, gateway: OrderGateway | None = None) -> "OrderCreator":
        if gateway is None:
            gateway = RazorpayGateway(
                settings.razorpay_api_url,
                settings.razorpay_key_id,
                settings.razorpay_key_secret,
                timeout=settings.http_timeout_seconds,
            )
        return cls(
            gateway,
            amount=settings.order_amount,
            currency=settings.order_currency,
            service_name=settings.service_name,
        )

    async def create(self) -> PaymentOrder:
        """Create one order or raise `OrderGatewayError`."""

        receipt = self.receipts.next()
        try:
            raw = await self.gateway.create_order(self.amount, self.currency, receipt)
            order = PaymentOrder.model_validate(raw)
        except Exception as exc:
            upstream_failures_total.labels(service=self.service_name, dependency="gateway").inc()
            if isinstance(exc, OrderGatewayError):
                raise
            raise OrderGatewayError(str(exc) or exc.__class__.__name__) from exc
        logger.info("order created order_id=%s receipt=%s", order.id, order.receipt)
        return order
