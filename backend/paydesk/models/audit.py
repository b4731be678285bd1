"""
Payment Event Model — Hash-chained trail of everything that happened to a payment.
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, JSON, ForeignKey

from paydesk.database import Base


class PaymentEvent(Base):
    __tablename__ = "payment_events"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    payment_id = Column(String(36), ForeignKey("payments.id"), nullable=False, index=True)

    action = Column(String(32), nullable=False)
    # Actions: INITIATED, VERIFIED, FAILED, UTR_SUBMITTED,
    #          RECEIPT_ISSUED, RECEIPT_EMAILED, DIRECT_RECEIPT

    payload_hash = Column(String(64))
    previous_hash = Column(String(64))

    ip_address = Column(String(45))
    event_metadata = Column(JSON, default=dict)
    timestamp = Column(DateTime, default=datetime.utcnow)
