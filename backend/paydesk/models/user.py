"""
User Model — Customer identity captured on first payment.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Index
from sqlalchemy.orm import relationship

from paydesk.database import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (Index("ix_users_email_phone", "email", "phone"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name = Column(String(128), nullable=False)
    email = Column(String(254), nullable=False, index=True)
    phone = Column(String(15), nullable=False)
    address = Column(String(512), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    payments = relationship("Payment", back_populates="user")
