"""
Receipt Service — Receipt numbering and one-receipt-per-payment issuance.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from paydesk.config import get_settings
from paydesk.exceptions import InvalidTransitionError, NotFoundError
from paydesk.models.enums import PaymentStatus
from paydesk.models.payment import Payment
from paydesk.models.receipt import Receipt
from paydesk.services.audit_service import AuditService

logger = logging.getLogger(__name__)

MAX_NUMBERING_ATTEMPTS = 5


class ReceiptService:
    """Issues receipts for successful payments."""

    @staticmethod
    def number_prefix(when: datetime) -> str:
        return f"{get_settings().RECEIPT_PREFIX}-{when.strftime('%Y%m%d')}-"

    @staticmethod
    def next_receipt_number(db: Session, when: Optional[datetime] = None) -> str:
        """Next number for the day: PREFIX-YYYYMMDD-NNNN, NNNN counting from 0001.

        Example: AKRX-20250108-0001
        """
        when = when or datetime.utcnow()
        prefix = ReceiptService.number_prefix(when)

        numbers = (
            db.query(Receipt.receipt_number)
            .filter(Receipt.receipt_number.like(f"{prefix}%"))
            .all()
        )
        last_seq = 0
        for (number,) in numbers:
            suffix = number[len(prefix):]
            if suffix.isdigit():
                last_seq = max(last_seq, int(suffix))

        return f"{prefix}{last_seq + 1:04d}"

    @staticmethod
    def issue(db: Session, payment: Payment, ip_address: Optional[str] = None) -> Receipt:
        """Create the receipt for a successful payment, or return the existing one.

        The caller owns the transaction; the receipt is flushed, not committed.

        Raises:
            InvalidTransitionError: payment is not in success state.
        """
        if payment.status != PaymentStatus.SUCCESS.value:
            raise InvalidTransitionError(
                f"Receipt can only be issued for a successful payment (status: {payment.status})"
            )

        db.flush()
        existing = db.query(Receipt).filter(Receipt.payment_id == payment.id).first()
        if existing:
            return existing

        for attempt in range(MAX_NUMBERING_ATTEMPTS):
            now = datetime.utcnow()
            receipt = Receipt(
                payment_id=payment.id,
                receipt_number=ReceiptService.next_receipt_number(db, now),
                generated_at=now,
            )
            try:
                with db.begin_nested():
                    db.add(receipt)
            except IntegrityError:
                # Lost a race: either the number was taken or the payment got its receipt.
                existing = db.query(Receipt).filter(Receipt.payment_id == payment.id).first()
                if existing:
                    return existing
                logger.warning("Receipt number collision on attempt %d for payment %s", attempt + 1, payment.id)
                continue

            AuditService.log(
                db, payment.id, "RECEIPT_ISSUED",
                payload={"receipt_number": receipt.receipt_number},
                ip_address=ip_address,
                metadata={"receipt_id": receipt.id},
            )
            logger.info("Issued receipt %s for payment %s", receipt.receipt_number, payment.id)
            return receipt

        raise InvalidTransitionError("Could not allocate a unique receipt number, please retry")

    @staticmethod
    def get(db: Session, receipt_id: str) -> Receipt:
        receipt = db.query(Receipt).filter(Receipt.id == receipt_id).first()
        if not receipt:
            raise NotFoundError("Receipt not found")
        return receipt

    @staticmethod
    def get_for_payment(db: Session, payment_id: str) -> Receipt:
        receipt = db.query(Receipt).filter(Receipt.payment_id == payment_id).first()
        if not receipt:
            raise NotFoundError("No receipt issued for this payment")
        return receipt
