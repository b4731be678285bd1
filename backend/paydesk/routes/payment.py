"""
Payment Routes — Gateway checkout and QR/UTR payments.
Handles: initiate, create-order, verify, qr-payment, verify-utr.
"""
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.orm import Session

from paydesk.config import get_settings
from paydesk.database import get_db
from paydesk.schemas.schemas import (
    CreateOrderResponse, PaymentInitRequest, PaymentInitResponse, PaymentOut,
    PaymentVerifyRequest, PaymentVerifyResponse, QRPaymentRequest, QRPaymentResponse,
    ReceiptRef, UserOut, UserSummary, UTRVerifyResponse,
)
from paydesk.services.gateway_service import GatewayService
from paydesk.services.payment_service import PaymentService
from paydesk.utils.rate_limiter import rate_limit
from paydesk.utils.validators import validate_utr

settings = get_settings()
router = APIRouter(prefix="/api/payment", tags=["Payment"])


def get_gateway() -> GatewayService:
    return GatewayService()


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def receipt_ref(receipt) -> ReceiptRef:
    return ReceiptRef(
        receipt_id=receipt.id,
        receipt_number=receipt.receipt_number,
        amount=receipt.payment.amount,
        generated_at=receipt.generated_at,
    )


@router.post("/initiate", response_model=PaymentInitResponse)
def initiate_payment(
    payload: PaymentInitRequest,
    request: Request,
    db: Session = Depends(get_db),
    gateway: GatewayService = Depends(get_gateway),
    _throttle: bool = Depends(rate_limit(requests=10, window=60)),
):
    """Save the customer, open a pending payment and create its gateway order."""
    payment, order = PaymentService(db, gateway).initiate(payload, client_ip(request))

    return PaymentInitResponse(
        payment_id=payment.id,
        order_id=order["id"],
        amount=payment.amount,
        currency=payment.currency,
        key=gateway.key_id,
        user=UserSummary(name=payload.name, email=payload.email, phone=payload.phone),
    )


@router.post("/create-order", response_model=CreateOrderResponse)
def create_order(
    payload: PaymentInitRequest,
    request: Request,
    db: Session = Depends(get_db),
    gateway: GatewayService = Depends(get_gateway),
    _throttle: bool = Depends(rate_limit(requests=10, window=60)),
):
    """Same as /initiate, shaped for the checkout widget (amount in paise)."""
    payment, order = PaymentService(db, gateway).initiate(payload, client_ip(request))

    return CreateOrderResponse(
        payment_id=payment.id,
        order_id=order["id"],
        amount=order["amount"],
        currency=order.get("currency", payment.currency),
        key=gateway.key_id,
        name=settings.MERCHANT_NAME,
        description=payment.description or "Payment for services",
    )


@router.post("/verify", response_model=PaymentVerifyResponse)
def verify_payment(
    payload: PaymentVerifyRequest,
    request: Request,
    db: Session = Depends(get_db),
    gateway: GatewayService = Depends(get_gateway),
):
    """Verify the checkout signature; on success the receipt is issued in the same transaction."""
    payment, receipt = PaymentService(db, gateway).verify(payload, client_ip(request))

    if receipt is None:
        return PaymentVerifyResponse(
            success=False,
            payment=PaymentOut.model_validate(payment),
            message=payment.failure_reason or "Payment verification failed",
        )

    ref = receipt_ref(receipt)
    return PaymentVerifyResponse(
        success=True,
        receipt_id=ref.receipt_id,
        receipt_number=ref.receipt_number,
        receipt=ref,
        payment=PaymentOut.model_validate(payment),
        user=UserOut.model_validate(payment.user),
        message="Payment verified successfully",
    )


@router.post("/qr-payment", response_model=QRPaymentResponse)
def create_qr_payment(
    payload: QRPaymentRequest,
    request: Request,
    db: Session = Depends(get_db),
    _throttle: bool = Depends(rate_limit(requests=10, window=60)),
):
    """Open a pending UPI payment to be paid by scanning the static QR."""
    service = PaymentService(db)
    payment = service.create_qr_payment(payload, client_ip(request))

    return QRPaymentResponse(
        payment_id=payment.id,
        amount=payment.amount,
        qr_data=service.upi_target(payment),
        message="Scan the QR code with any UPI app, then submit the UTR number.",
    )


@router.post("/verify-utr", response_model=UTRVerifyResponse)
def verify_utr(
    request: Request,
    payment_id: str = Form(..., alias="paymentId"),
    utr_number: str = Form(..., alias="utrNumber"),
    screenshot: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    """Confirm a QR payment with its bank UTR and a screenshot of the transfer."""
    if not utr_number.strip():
        raise HTTPException(status_code=400, detail="UTR number is required")
    if not validate_utr(utr_number):
        raise HTTPException(status_code=400, detail="UTR number must be 6-30 letters or digits")

    # One byte past the cap is enough to tell an oversize upload apart
    contents = screenshot.file.read(settings.MAX_SCREENSHOT_MB * 1024 * 1024 + 1)
    if not contents:
        raise HTTPException(status_code=400, detail="Payment screenshot is required")

    payment, receipt = PaymentService(db).verify_utr(
        payment_id, utr_number, contents, screenshot.content_type, client_ip(request),
    )

    return UTRVerifyResponse(
        success=True,
        utr_number=payment.utr_number,
        receipt=receipt_ref(receipt),
        message="Payment verified and receipt generated",
    )
