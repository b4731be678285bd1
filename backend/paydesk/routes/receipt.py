"""
Receipt Routes — Receipt lookup, PDF download, direct generation and email.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from paydesk.config import get_settings
from paydesk.database import get_db
from paydesk.schemas.schemas import (
    DirectReceiptRequest, EmailDispatchResponse, PaymentOut, ReceiptDetailResponse,
    ReceiptOut, UserOut,
)
from paydesk.services.audit_service import AuditService
from paydesk.services.email_service import EmailService
from paydesk.services.payment_service import PaymentService
from paydesk.services.pdf_service import PdfService
from paydesk.services.receipt_service import ReceiptService
from paydesk.utils.formatting import format_inr, receipt_filename
from paydesk.utils.rate_limiter import rate_limit

logger = logging.getLogger(__name__)
settings = get_settings()
router = APIRouter(prefix="/api/receipt", tags=["Receipt"])


def get_email_service() -> EmailService:
    return EmailService()


def pdf_response(receipt) -> Response:
    return Response(
        content=PdfService.render_receipt(receipt),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{receipt_filename(receipt.receipt_number)}"',
            "X-Receipt-Number": receipt.receipt_number,
        },
    )


@router.post("/generate")
def generate_direct_receipt(
    payload: DirectReceiptRequest,
    request: Request,
    db: Session = Depends(get_db),
    _throttle: bool = Depends(rate_limit(requests=20, window=60)),
):
    """Record an offline payment (cash, cheque, transfer, ...) and return its receipt PDF."""
    receipt = PaymentService(db).create_direct(
        payload, request.client.host if request.client else None,
    )
    return pdf_response(receipt)


@router.get("/download/{receipt_id}")
def download_receipt(receipt_id: str, db: Session = Depends(get_db)):
    """Server-rendered PDF for a receipt."""
    return pdf_response(ReceiptService.get(db, receipt_id))


@router.get("/payment/{payment_id}/pdf")
def download_receipt_for_payment(payment_id: str, db: Session = Depends(get_db)):
    """PDF looked up through the payment, for callers that only know the payment id."""
    return pdf_response(ReceiptService.get_for_payment(db, payment_id))


@router.post("/send-email/{receipt_id}", response_model=EmailDispatchResponse)
def send_receipt_email(
    receipt_id: str,
    request: Request,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
    _throttle: bool = Depends(rate_limit(requests=5, window=60)),
):
    """Email the receipt PDF to the customer and the merchant. Single attempt."""
    receipt = ReceiptService.get(db, receipt_id)
    payment = receipt.payment
    user = payment.user

    recipients = [user.email]
    if settings.MERCHANT_EMAIL and settings.MERCHANT_EMAIL != user.email:
        recipients.append(settings.MERCHANT_EMAIL)

    body = (
        f"Dear {user.name},\n\n"
        f"Thank you for your payment of {format_inr(payment.amount, symbol='Rs. ')} "
        f"to {settings.MERCHANT_NAME}.\n"
        f"Your receipt {receipt.receipt_number} is attached.\n\n"
        f"{settings.MERCHANT_NAME}"
    )
    delivered, message = email_service.send(
        recipients,
        subject=f"Payment Receipt {receipt.receipt_number} - {settings.MERCHANT_NAME}",
        body=body,
        attachment=PdfService.render_receipt(receipt),
        filename=receipt_filename(receipt.receipt_number),
    )

    if delivered:
        AuditService.log(
            db, payment.id, "RECEIPT_EMAILED",
            payload={"receipt_number": receipt.receipt_number, "recipients": recipients},
            ip_address=request.client.host if request.client else None,
        )
        db.commit()

    return EmailDispatchResponse(success=delivered, message=message, recipients=recipients if delivered else [])


@router.get("/{receipt_id}", response_model=ReceiptDetailResponse)
def get_receipt(receipt_id: str, db: Session = Depends(get_db)):
    """Receipt with its payment and customer."""
    receipt = ReceiptService.get(db, receipt_id)
    return ReceiptDetailResponse(
        receipt=ReceiptOut.model_validate(receipt),
        payment=PaymentOut.model_validate(receipt.payment),
        user=UserOut.model_validate(receipt.payment.user),
    )
