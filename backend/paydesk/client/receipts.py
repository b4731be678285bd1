"""
Receipt Materializer — Turns a confirmed payment into a PDF on disk and
optionally an email.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional

from PIL import Image

from paydesk.client.api import ApiClient, ApiError
from paydesk.services.pdf_service import PdfService
from paydesk.utils.formatting import receipt_filename

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReceiptTarget:
    id: str
    payment_linked: bool = False    # id is a payment id, not a receipt id


def resolve_receipt_id(source: Mapping) -> ReceiptTarget:
    """Pick the id used to fetch a receipt from a backend response.

    Receipt-specific ids win: nested `receipt.receiptId`, then top-level
    `receiptId`. Only when neither exists is `id` / `paymentId` used, and
    the result is marked as payment-linked.
    """
    nested = source.get("receipt") or {}
    if nested.get("receiptId"):
        return ReceiptTarget(nested["receiptId"])
    if source.get("receiptId"):
        return ReceiptTarget(source["receiptId"])

    fallback = source.get("id") or source.get("paymentId")
    if fallback:
        return ReceiptTarget(fallback, payment_linked=True)
    raise ValueError("No receipt or payment id in response")


def _receipt_number(source: Mapping) -> Optional[str]:
    nested = source.get("receipt") or {}
    return nested.get("receiptNumber") or source.get("receiptNumber")


class ReceiptMaterializer:
    def __init__(self, api: ApiClient):
        self.api = api

    def download(self, source: Mapping, directory) -> Path:
        """Fetch the server-rendered PDF and write receipt-<number>.pdf into directory."""
        target = resolve_receipt_id(source)
        if target.payment_linked:
            path = f"/api/receipt/payment/{target.id}/pdf"
        else:
            path = f"/api/receipt/download/{target.id}"

        response = self.api.get_bytes(path)
        number = _receipt_number(source) or response.headers.get("X-Receipt-Number")
        return self._write(directory, receipt_filename(number), response.content)

    def render_local(self, image: Image.Image, directory, receipt_number: Optional[str] = None,
                     when: Optional[datetime] = None) -> Path:
        """Tile an already rendered receipt image into a multi-page PDF."""
        when = when or datetime.utcnow()
        pdf = PdfService.image_to_pdf(image, title=f"Receipt {receipt_number or ''}".strip(), when=when)
        return self._write(directory, receipt_filename(receipt_number, now=when), pdf)

    def email(self, source: Mapping) -> str:
        """Ask the backend to email the receipt once. Returns the message to show."""
        target = resolve_receipt_id(source)
        if target.payment_linked:
            return "Receipt is not available for emailing yet"
        try:
            data = self.api.post_json(f"/api/receipt/send-email/{target.id}")
        except ApiError as e:
            logger.warning("Receipt email request failed: %s", e.message)
            return f"Failed to send emails: {e.message}"
        if data.get("success"):
            return "Receipt emails sent successfully"
        return f"Failed to send emails: {data.get('message', '')}"

    @staticmethod
    def _write(directory, filename: str, content: bytes) -> Path:
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_bytes(content)
        logger.info("Saved receipt to %s", path)
        return path
