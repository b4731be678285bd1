"""
Payment Model — One payment attempt, gateway-backed, QR/UTR or direct.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from paydesk.database import Base
from paydesk.models.enums import PaymentStatus


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    amount = Column(Float, nullable=False)             # Rupees
    currency = Column(String(3), default="INR")
    payment_mode = Column(String(16), nullable=False)  # card | upi | net_banking | wallet | cash | cheque | bank_transfer
    status = Column(String(16), default=PaymentStatus.PENDING.value, index=True)
    description = Column(String(256))

    # Gateway identifiers
    razorpay_order_id = Column(String(64), index=True)
    razorpay_payment_id = Column(String(64))
    razorpay_signature = Column(String(128))

    # QR / UTR
    utr_number = Column(String(32), unique=True)
    screenshot_path = Column(String(512))

    failure_reason = Column(String(256))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="payments")
    receipt = relationship("Receipt", back_populates="payment", uselist=False)
