"""
Payment Service — Payment lifecycle: initiation, gateway verification,
QR/UTR confirmation and direct (offline) receipts.

Status changes go through `_transition`, which only lets a payment leave
`pending` once. Every public method commits its own unit of work and rolls
back on failure, so callers never observe half-written state.
"""
import logging
import os
import uuid
from datetime import datetime
from typing import Optional
from urllib.parse import urlencode, quote

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from paydesk.config import get_settings
from paydesk.exceptions import (
    DuplicateUTRError, GatewayError, InvalidTransitionError, NotFoundError, PayloadTooLargeError,
    PaydeskError,
)
from paydesk.models.enums import PaymentMode, PaymentStatus
from paydesk.models.payment import Payment
from paydesk.models.receipt import Receipt
from paydesk.models.user import User
from paydesk.schemas.schemas import (
    DirectReceiptRequest, PaymentInitRequest, PaymentVerifyRequest, QRPaymentRequest,
)
from paydesk.services.audit_service import AuditService
from paydesk.services.gateway_service import GatewayService
from paydesk.services.receipt_service import ReceiptService

logger = logging.getLogger(__name__)

ALLOWED_SCREENSHOT_TYPES = {"image/png", "image/jpeg", "image/jpg", "image/webp"}
_EXTENSIONS = {"image/png": ".png", "image/jpeg": ".jpg", "image/jpg": ".jpg", "image/webp": ".webp"}


class PaymentService:
    """Owns every write to payments."""

    def __init__(self, db: Session, gateway: Optional[GatewayService] = None):
        self.db = db
        self.gateway = gateway or GatewayService()
        self.settings = get_settings()

    # ─── Helpers ────────────────────────────────────────────────────

    def get_or_create_user(self, name: str, email: str, phone: str, address: str) -> User:
        """Reuse the customer with the same email and phone, refreshing name/address."""
        user = (
            self.db.query(User)
            .filter(User.email == email, User.phone == phone)
            .first()
        )
        if user:
            user.name = name
            user.address = address
            user.updated_at = datetime.utcnow()
            return user

        user = User(name=name, email=email, phone=phone, address=address)
        self.db.add(user)
        self.db.flush()
        return user

    def get_payment(self, payment_id: str) -> Payment:
        payment = self.db.query(Payment).filter(Payment.id == payment_id).first()
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    @staticmethod
    def _transition(payment: Payment, target: PaymentStatus, reason: Optional[str] = None) -> None:
        current = PaymentStatus(payment.status)
        if not current.can_transition(target):
            raise InvalidTransitionError(f"Payment is already {current.value}")
        payment.status = target.value
        payment.updated_at = datetime.utcnow()
        if target is PaymentStatus.SUCCESS:
            payment.completed_at = payment.updated_at
        if reason:
            payment.failure_reason = reason[:256]

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def upi_target(self, payment: Payment) -> str:
        """UPI deep link encoded in the QR shown to the customer."""
        query = urlencode(
            {
                "pa": self.settings.UPI_VPA,
                "pn": self.settings.UPI_PAYEE_NAME,
                "am": f"{payment.amount:.2f}",
                "cu": self.settings.CURRENCY,
                "tn": f"PAY-{payment.id[:8].upper()}",
            },
            quote_via=quote,
        )
        return f"upi://pay?{query}"

    # ─── Gateway flow ───────────────────────────────────────────────

    def initiate(self, payload: PaymentInitRequest, ip_address: Optional[str] = None) -> tuple[Payment, dict]:
        """Create (or reuse) the customer, a pending payment and its gateway order.

        Raises:
            GatewayError: order could not be created; nothing is committed.
        """
        try:
            user = self.get_or_create_user(payload.name, payload.email, payload.phone, payload.address)
            payment = Payment(
                user_id=user.id,
                amount=payload.amount,
                currency=self.settings.CURRENCY,
                payment_mode=payload.payment_mode.value,
                status=PaymentStatus.PENDING.value,
                description=payload.description,
            )
            self.db.add(payment)
            self.db.flush()

            order = self.gateway.create_order(
                payload.amount, receipt_ref=payment.id, notes={"payment_id": payment.id},
            )
            payment.razorpay_order_id = order["id"]

            AuditService.log(
                self.db, payment.id, "INITIATED",
                payload={"amount": payload.amount, "mode": payment.payment_mode, "order_id": order["id"]},
                ip_address=ip_address,
            )
            self._commit()
        except GatewayError:
            self.db.rollback()
            raise

        logger.info("Payment %s initiated: %.2f %s via %s", payment.id, payment.amount, payment.currency, payment.payment_mode)
        return payment, order

    def verify(self, payload: PaymentVerifyRequest, ip_address: Optional[str] = None) -> tuple[Payment, Optional[Receipt]]:
        """Check the checkout signature and settle the payment.

        Returns:
            (payment, receipt) on success, (payment, None) when verification failed.

        Raises:
            NotFoundError: unknown payment.
            InvalidTransitionError: payment no longer pending.
        """
        payment = self.get_payment(payload.payment_id)
        if PaymentStatus(payment.status).is_terminal:
            raise InvalidTransitionError(f"Payment is already {payment.status}")

        payment.razorpay_payment_id = payload.razorpay_payment_id
        payment.razorpay_signature = payload.razorpay_signature

        if payment.razorpay_order_id != payload.razorpay_order_id:
            reason = "Order id does not match this payment"
        elif not self.gateway.verify_signature(
            payload.razorpay_order_id, payload.razorpay_payment_id, payload.razorpay_signature,
        ):
            reason = "Payment signature verification failed"
        else:
            reason = None

        if reason:
            self._transition(payment, PaymentStatus.FAILED, reason)
            AuditService.log(
                self.db, payment.id, "FAILED",
                payload={"order_id": payload.razorpay_order_id, "gateway_payment_id": payload.razorpay_payment_id},
                ip_address=ip_address,
                metadata={"reason": reason},
            )
            self._commit()
            logger.warning("Payment %s failed verification: %s", payment.id, reason)
            return payment, None

        self._transition(payment, PaymentStatus.SUCCESS)
        AuditService.log(
            self.db, payment.id, "VERIFIED",
            payload={"order_id": payload.razorpay_order_id, "gateway_payment_id": payload.razorpay_payment_id},
            ip_address=ip_address,
        )
        receipt = ReceiptService.issue(self.db, payment, ip_address=ip_address)
        self._commit()
        logger.info("Payment %s verified, receipt %s", payment.id, receipt.receipt_number)
        return payment, receipt

    # ─── QR / UTR flow ──────────────────────────────────────────────

    def create_qr_payment(self, payload: QRPaymentRequest, ip_address: Optional[str] = None) -> Payment:
        user = self.get_or_create_user(payload.name, payload.email, payload.phone, payload.address)
        payment = Payment(
            user_id=user.id,
            amount=payload.amount,
            currency=self.settings.CURRENCY,
            payment_mode=PaymentMode.UPI.value,
            status=PaymentStatus.PENDING.value,
            description=payload.description or f"Payment to {self.settings.MERCHANT_NAME} via QR Code",
        )
        self.db.add(payment)
        self.db.flush()
        AuditService.log(
            self.db, payment.id, "INITIATED",
            payload={"amount": payload.amount, "mode": "upi", "channel": "qr"},
            ip_address=ip_address,
        )
        self._commit()
        logger.info("QR payment %s created for %.2f", payment.id, payment.amount)
        return payment

    def store_screenshot(self, payment_id: str, content: bytes, content_type: Optional[str]) -> str:
        if not content:
            raise PaydeskError("Payment screenshot is empty")
        if content_type not in ALLOWED_SCREENSHOT_TYPES:
            raise PaydeskError("Screenshot must be a PNG, JPEG or WebP image")
        if len(content) > self.settings.MAX_SCREENSHOT_MB * 1024 * 1024:
            raise PayloadTooLargeError(f"Screenshot exceeds {self.settings.MAX_SCREENSHOT_MB} MB")

        os.makedirs(self.settings.UPLOAD_DIR, exist_ok=True)
        path = os.path.join(
            self.settings.UPLOAD_DIR,
            f"{payment_id}-{uuid.uuid4().hex[:8]}{_EXTENSIONS[content_type]}",
        )
        with open(path, "wb") as f:
            f.write(content)
        return path

    def verify_utr(
        self,
        payment_id: str,
        utr_number: str,
        screenshot: bytes,
        content_type: Optional[str],
        ip_address: Optional[str] = None,
    ) -> tuple[Payment, Receipt]:
        """Accept a UTR + screenshot for a pending QR payment and issue its receipt.

        Raises:
            NotFoundError, InvalidTransitionError, DuplicateUTRError, PaydeskError
        """
        payment = self.get_payment(payment_id)
        if PaymentStatus(payment.status).is_terminal:
            raise InvalidTransitionError(f"Payment is already {payment.status}")

        utr_number = utr_number.strip().upper()
        used = (
            self.db.query(Payment.id)
            .filter(Payment.utr_number == utr_number, Payment.id != payment.id)
            .first()
        )
        if used:
            raise DuplicateUTRError("This UTR number has already been used for another payment")

        path = self.store_screenshot(payment.id, screenshot, content_type)
        try:
            payment.utr_number = utr_number
            payment.screenshot_path = path
            AuditService.log(
                self.db, payment.id, "UTR_SUBMITTED",
                payload={"utr": utr_number},
                ip_address=ip_address,
                metadata={"screenshot": os.path.basename(path)},
            )
            self._transition(payment, PaymentStatus.SUCCESS)
            receipt = ReceiptService.issue(self.db, payment, ip_address=ip_address)
            self._commit()
        except IntegrityError as e:
            self.db.rollback()
            os.remove(path)
            raise DuplicateUTRError("This UTR number has already been used for another payment") from e
        except Exception:
            self.db.rollback()
            os.remove(path)
            raise

        logger.info("UTR %s accepted for payment %s, receipt %s", utr_number, payment.id, receipt.receipt_number)
        return payment, receipt

    # ─── Direct receipts ────────────────────────────────────────────

    def create_direct(self, payload: DirectReceiptRequest, ip_address: Optional[str] = None) -> Receipt:
        """Record an offline payment as already settled and issue its receipt."""
        user = self.get_or_create_user(
            payload.customer_name, payload.customer_email, payload.customer_phone, payload.customer_address,
        )
        now = datetime.utcnow()
        payment = Payment(
            user_id=user.id,
            amount=payload.amount,
            currency=self.settings.CURRENCY,
            payment_mode=payload.payment_mode.value,
            status=PaymentStatus.SUCCESS.value,
            description=payload.description,
            completed_at=now,
        )
        self.db.add(payment)
        self.db.flush()
        AuditService.log(
            self.db, payment.id, "DIRECT_RECEIPT",
            payload={"amount": payload.amount, "mode": payment.payment_mode},
            ip_address=ip_address,
        )
        receipt = ReceiptService.issue(self.db, payment, ip_address=ip_address)
        self._commit()
        logger.info("Direct receipt %s issued for %.2f via %s", receipt.receipt_number, payment.amount, payment.payment_mode)
        return receipt
