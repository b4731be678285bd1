"""
QR Payment Flow — Pay by scanning the static UPI QR, then prove it with the
bank UTR and a screenshot.

    QR_DISPLAY --start()--> UTR_SUBMISSION --submit_utr()--> VERIFIED
"""
import logging
import mimetypes
from enum import Enum
from pathlib import Path
from typing import Optional

from paydesk.client.api import ApiClient
from paydesk.client.form import FormValidationError, PaymentRequest

logger = logging.getLogger(__name__)


class QRStep(str, Enum):
    QR_DISPLAY = "qr_display"
    UTR_SUBMISSION = "utr_submission"
    VERIFIED = "verified"


class InvalidStepError(Exception):
    pass


class QRPaymentFlow:
    def __init__(self, api: ApiClient, request: PaymentRequest,
                 description: str = "Payment via QR Code"):
        self.api = api
        self.request = request
        self.description = request.description or description

        self.step = QRStep.QR_DISPLAY
        self.payment_id: Optional[str] = None
        self.qr_data: Optional[str] = None
        self.receipt: Optional[dict] = None
        self.utr_number: Optional[str] = None
        self.recorded_utr: Optional[str] = None

    def _expect(self, step: QRStep):
        if self.step is not step:
            raise InvalidStepError(f"Expected step {step.value}, flow is at {self.step.value}")

    def start(self) -> QRStep:
        """Customer says they have paid: open the pending payment, move to UTR entry."""
        self._expect(QRStep.QR_DISPLAY)
        data = self.api.post_json("/api/payment/qr-payment", {
            **self.request.customer(),
            "amount": self.request.amount,
            "description": self.description,
        })
        self.payment_id = data["paymentId"]
        self.qr_data = data.get("qrData")
        self.step = QRStep.UTR_SUBMISSION
        return self.step

    def submit_utr(self, utr: Optional[str], screenshot_path) -> QRStep:
        self._expect(QRStep.UTR_SUBMISSION)

        utr = (utr or "").strip()
        path = Path(screenshot_path) if screenshot_path else None
        if not utr or path is None or not path.is_file():
            raise FormValidationError({"utrNumber": "Please provide both UTR number and payment screenshot"})

        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        with path.open("rb") as fh:
            data = self.api.post_form(
                "/api/payment/verify-utr",
                data={"paymentId": self.payment_id, "utrNumber": utr},
                files={"screenshot": (path.name, fh, content_type)},
            )

        # Shown back to the customer as typed; the server stores it upper-cased
        self.utr_number = utr
        self.recorded_utr = data.get("utrNumber", utr)
        self.receipt = data.get("receipt")
        self.step = QRStep.VERIFIED
        logger.info("QR payment %s verified with UTR %s", self.payment_id, self.utr_number)
        return self.step
