"""Verification orchestrator.

Runs signature check, ledger append and buyer notification strictly in that
order, walks the per-request state machine, and maps the outcome to an HTTP
status plus JSON body. A buyer is never emailed for a purchase that was not
recorded. The reverse gap (recorded, email failed) is reported as a 500.
"""

from dataclasses import dataclass, field

from guidepay.common.errors import LedgerError, NotificationError, UpstreamError
from guidepay.common.logging import logger, order_id_ctx, payment_id_ctx
from guidepay.common.metrics import verification_requests_total
from guidepay.common.signatures import verify
from guidepay.common.state_machine import validate_transition
from guidepay.services.checkout.schemas import VerificationRequest, VerificationResponse
from guidepay.services.ledger.models import LedgerRow
from guidepay.services.ledger.service import LedgerRecorder
from guidepay.services.notification.service import Notifier

INVALID_SIGNATURE = "Invalid signature"
SERVER_ERROR = "Server error"
VERIFIED = "Payment verified, PDF sent."
GENERIC_ERROR_DETAIL = "internal error"


@dataclass
class VerificationResult:
    state: str
    status_code: int
    body: VerificationResponse
    history: list[str] = field(default_factory=list)


class VerificationRun:
    """State holder for one request."""

    def __init__(self) -> None:
        self.state = "RECEIVED"
        self.history = ["RECEIVED"]

    def advance(self, new: str) -> None:
        validate_transition(self.state, new)
        self.state = new
        self.history.append(new)


class VerificationOrchestrator:
    """Sequences signature check → ledger → notifier for one request at a time."""

    def __init__(
        self,
        secret: bytes,
        ledger: LedgerRecorder,
        notifier: Notifier,
        expose_error_details: bool = False,
        service_name: str = "checkout",
    ) -> None:
        self.secret = secret
        self.ledger = ledger
        self.notifier = notifier
        self.expose_error_details = expose_error_details
        self.service_name = service_name

    def _finish(self, run: VerificationRun, status_code: int, body: VerificationResponse) -> VerificationResult:
        verification_requests_total.labels(service=self.service_name, terminal_state=run.state).inc()
        return VerificationResult(state=run.state, status_code=status_code, body=body, history=run.history)

    def _failed(self, run: VerificationRun, exc: UpstreamError) -> VerificationResult:
        run.advance("FAILED")
        detail = str(exc) if self.expose_error_details else GENERIC_ERROR_DETAIL
        return self._finish(run, 500, VerificationResponse(success=False, message=SERVER_ERROR, error=detail))

    async def verify_payment(self, req: VerificationRequest) -> VerificationResult:
        """Run the pipeline; never raises for capability failures."""

        order_id_ctx.set(req.razorpay_order_id)
        payment_id_ctx.set(req.razorpay_payment_id)
        run = VerificationRun()

        if not verify(req.razorpay_order_id, req.razorpay_payment_id, req.razorpay_signature, self.secret):
            run.advance("REJECTED")
            logger.warning("signature mismatch, request rejected")
            return self._finish(run, 400, VerificationResponse(success=False, message=INVALID_SIGNATURE))
        run.advance("SIGNATURE_CHECKED")

        row = LedgerRow(name=req.name, email=req.email, phone=req.phone or "", payment_id=req.razorpay_payment_id)
        try:
            await self.ledger.append(row)
        except LedgerError as exc:
            logger.exception("ledger append failed, buyer not notified: %s", exc)
            return self._failed(run, exc)
        run.advance("LOGGED")

        try:
            await self.notifier.notify_purchase(req.name, req.email)
        except NotificationError as exc:
            logger.exception("notification failed after ledger row was written: %s", exc)
            return self._failed(run, exc)
        run.advance("NOTIFIED")

        run.advance("DONE")
        logger.info("payment verified")
        return self._finish(run, 200, VerificationResponse(success=True, message=VERIFIED))
