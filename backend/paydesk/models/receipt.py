"""
Receipt Model — Issued exactly once per successful payment, immutable.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from paydesk.database import Base


class Receipt(Base):
    __tablename__ = "receipts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    payment_id = Column(String(36), ForeignKey("payments.id"), nullable=False, unique=True)
    receipt_number = Column(String(50), nullable=False, unique=True, index=True)  # e.g. AKRX-20250108-0001
    generated_at = Column(DateTime, default=datetime.utcnow)

    payment = relationship("Payment", back_populates="receipt")
