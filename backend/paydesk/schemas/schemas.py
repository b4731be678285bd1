"""
Pydantic Schemas — Request & Response models for API validation.

JSON bodies use camelCase keys (paymentMode, receiptNumber); snake_case keys
are accepted on input as well.
"""
from datetime import datetime
from typing import Optional, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from paydesk.models.enums import PaymentMode, PaymentStatus, GATEWAY_MODES
from paydesk.utils.validators import (
    normalize_phone, sanitize_text, validate_email, validate_phone,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _require_text(value: str, label: str) -> str:
    value = sanitize_text(value)
    if not value:
        raise ValueError(f"{label} is required")
    return value


def _check_email(value: str) -> str:
    value = (value or "").strip()
    if not validate_email(value):
        raise ValueError("Please enter a valid email address")
    return value.lower()


def _check_phone(value: str) -> str:
    if not validate_phone(value):
        raise ValueError("Phone number must be 10 digits")
    return normalize_phone(value)


# ──────────────── Customer ────────────────

class CustomerFields(CamelModel):
    name: str = Field(..., max_length=128)
    email: str
    phone: str
    address: str = Field(..., max_length=512)

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _require_text(v, "Name")

    @field_validator("address")
    @classmethod
    def _address(cls, v: str) -> str:
        return _require_text(v, "Address")

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return _check_phone(v)


class UserSummary(CamelModel):
    name: str
    email: str
    phone: str


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    phone: str
    address: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ──────────────── Payment ────────────────

class PaymentInitRequest(CustomerFields):
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Amount in INR")
    payment_mode: PaymentMode = Field(..., description="card | upi | net_banking | wallet")
    description: Optional[str] = Field(None, max_length=256)

    @field_validator("payment_mode")
    @classmethod
    def _gateway_mode(cls, v: PaymentMode) -> PaymentMode:
        if v not in GATEWAY_MODES:
            raise ValueError("Payment mode must be one of: card, upi, net_banking, wallet")
        return v


class PaymentInitResponse(CamelModel):
    payment_id: str
    order_id: str
    amount: float
    currency: str = "INR"
    key: str
    user: UserSummary


class CreateOrderResponse(CamelModel):
    success: bool = True
    payment_id: str
    order_id: str
    amount: int                     # Paise, as the checkout expects
    currency: str = "INR"
    key: str
    name: str
    description: str = ""


class PaymentVerifyRequest(CamelModel):
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)
    payment_id: str = Field(..., min_length=1)


class PaymentOut(CamelModel):
    id: str
    user_id: str
    amount: float
    currency: str = "INR"
    payment_mode: str
    status: PaymentStatus
    description: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    utr_number: Optional[str] = None
    failure_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class ReceiptRef(CamelModel):
    receipt_id: str
    receipt_number: str
    amount: Optional[float] = None
    generated_at: Optional[datetime] = None


class PaymentVerifyResponse(CamelModel):
    success: bool
    receipt_id: Optional[str] = None
    receipt_number: Optional[str] = None
    receipt: Optional[ReceiptRef] = None
    payment: Optional[PaymentOut] = None
    user: Optional[UserOut] = None
    message: str = ""


# ──────────────── QR / UTR ────────────────

class QRPaymentRequest(CustomerFields):
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    description: Optional[str] = Field(None, max_length=256)


class QRPaymentResponse(CamelModel):
    success: bool = True
    payment_id: str
    amount: float
    qr_data: str                    # upi://pay?... target encoded in the static QR
    message: str = ""


class UTRVerifyResponse(CamelModel):
    success: bool
    utr_number: str
    receipt: Optional[ReceiptRef] = None
    message: str = ""


# ──────────────── Receipt ────────────────

class ReceiptOut(CamelModel):
    id: str
    payment_id: str
    receipt_number: str
    generated_at: datetime


class ReceiptDetailResponse(CamelModel):
    receipt: ReceiptOut
    payment: PaymentOut
    user: UserOut


class DirectReceiptRequest(CamelModel):
    customer_name: str = Field(..., max_length=128)
    customer_email: str
    customer_phone: str
    customer_address: str = Field(..., max_length=512)
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    payment_mode: PaymentMode
    description: Optional[str] = Field(None, max_length=256)

    @field_validator("customer_name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _require_text(v, "Customer name")

    @field_validator("customer_address")
    @classmethod
    def _address(cls, v: str) -> str:
        return _require_text(v, "Customer address")

    @field_validator("customer_email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("customer_phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return _check_phone(v)


class EmailDispatchResponse(CamelModel):
    success: bool
    message: str = ""
    recipients: List[str] = []


# ──────────────── Admin ────────────────

class AdminLoginRequest(BaseModel):
    username: str
    password: str


class AdminLoginResponse(CamelModel):
    token: str
    expires_at: datetime


class AdminOverview(CamelModel):
    total_payments: int
    successful_payments: int
    total_receipts: int
    total_users: int
    total_revenue: float
    success_rate: float


class AdminStatsResponse(CamelModel):
    overview: AdminOverview
    recent_payments: List[Dict] = []
    monthly_stats: List[Dict] = []
    mode_distribution: Dict[str, int] = {}


class AdminReceiptUser(CamelModel):
    name: str
    email: str


class AdminReceiptPayment(CamelModel):
    amount: float
    status: str
    payment_mode: str
    user: AdminReceiptUser


class AdminReceiptRow(CamelModel):
    id: str
    receipt_number: str
    generated_at: datetime
    payment: AdminReceiptPayment


class AdminReceiptsResponse(CamelModel):
    total: int
    receipts: List[AdminReceiptRow]


class PaymentEventEntry(CamelModel):
    id: int
    payment_id: str
    action: str
    payload_hash: Optional[str] = None
    timestamp: datetime
    event_metadata: Optional[Dict] = None
