"""HTTP surface for order creation and payment verification."""

from time import perf_counter
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from guidepay.common.config import Settings, get_settings
from guidepay.common.errors import OrderGatewayError
from guidepay.common.logging import configure_logging, logger, trace_id_ctx
from guidepay.common.metrics import metrics_response, order_requests_total, verification_latency_seconds
from guidepay.common.startup import log_startup_config
from guidepay.common.tracing import instrument_app, setup_tracing
from guidepay.services.checkout.schemas import VerificationRequest
from guidepay.services.checkout.service import VerificationOrchestrator
from guidepay.services.ledger.service import LedgerRecorder, TabularStore
from guidepay.services.notification.service import MailTransport, Notifier
from guidepay.services.orders.service import OrderCreator, OrderGateway

MISSING_FIELDS = "Missing required payment fields"
STARTUP_KEYS = [
    "service_name",
    "port",
    "razorpay_key_id",
    "razorpay_key_secret",
    "google_sheet_id",
    "google_sheet_range",
    "google_credentials",
    "mail_transport",
    "mailersend_api_key",
    "smtp_host",
    "attachment_path",
    "expose_error_details",
]


def create_app(
    settings: Settings | None = None,
    *,
    gateway: OrderGateway | None = None,
    store: TabularStore | None = None,
    transport: MailTransport | None = None,
) -> FastAPI:
    """Wire components from one settings object; collaborators are injectable."""

    settings = settings or get_settings()
    configure_logging(settings.service_name, settings.log_level)
    setup_tracing(settings.service_name, settings.otel_exporter_otlp_endpoint)
    log_startup_config(settings, STARTUP_KEYS)

    orders = OrderCreator.from_settings(settings, gateway)
    orchestrator = VerificationOrchestrator(
        settings.razorpay_secret_bytes,
        LedgerRecorder.from_settings(settings, store),
        Notifier.from_settings(settings, transport),
        expose_error_details=settings.expose_error_details,
        service_name=settings.service_name,
    )

    app = FastAPI(title="GuidePay Checkout")
    app.state.settings = settings
    app.state.orders = orders
    app.state.orchestrator = orchestrator
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    instrument_app(app)

    @app.middleware("http")
    async def trace_context(request: Request, call_next):
        """Bind a trace id to every log line of the request."""

        trace_id_ctx.set(request.headers.get("x-trace-id") or str(uuid4()))
        return await call_next(request)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        if request.url.path == "/verify-payment":
            logger.info("verify-payment rejected: missing fields %s", [e.get("loc") for e in exc.errors()])
            return JSONResponse(status_code=400, content={"success": False, "message": MISSING_FIELDS})
        return JSONResponse(status_code=400, content={"error": "invalid request"})

    @app.post("/create-order")
    async def create_order():
        """Create a fixed-price gateway order for the browser checkout."""

        try:
            order = await orders.create()
        except OrderGatewayError as exc:
            logger.exception("error creating order: %s", exc)
            order_requests_total.labels(service=settings.service_name, outcome="failed").inc()
            detail = str(exc) if settings.expose_error_details else "order creation failed"
            return JSONResponse(status_code=500, content={"error": detail})
        order_requests_total.labels(service=settings.service_name, outcome="created").inc()
        return order.model_dump()

    @app.post("/verify-payment")
    async def verify_payment(req: VerificationRequest):
        """Verify signature, record the purchase, email the guide."""

        started = perf_counter()
        result = await orchestrator.verify_payment(req)
        verification_latency_seconds.labels(service=settings.service_name).observe(perf_counter() - started)
        return JSONResponse(status_code=result.status_code, content=result.body.model_dump(exclude_none=True))

    @app.get("/metrics")
    def metrics():
        """Prometheus scrape endpoint."""

        return metrics_response()

    @app.get("/health")
    def health():
        """Container health probe endpoint."""

        return {"ok": True}

    return app


def main() -> None:
    """Run the checkout service with uvicorn on the configured port."""

    settings = get_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
