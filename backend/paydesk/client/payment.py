"""
Payment Initiator & Verifier — The two backend calls that bracket a
gateway checkout.
"""
from dataclasses import dataclass, field
from typing import Optional

from paydesk.client.api import ApiClient
from paydesk.client.form import PaymentRequest
from paydesk.client.gateway import GatewayResult


class VerificationFailed(Exception):
    """Backend rejected the gateway signature; the attempt is over."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class OrderHandle:
    payment_id: str
    order_id: str
    amount_paise: int
    currency: str
    key: str
    merchant_name: str
    description: str

    @property
    def amount(self) -> float:
        return self.amount_paise / 100


@dataclass
class VerifiedPayment:
    receipt_id: Optional[str]
    receipt_number: Optional[str]
    amount: float
    data: dict = field(default_factory=dict)


class PaymentInitiator:
    def __init__(self, api: ApiClient):
        self.api = api

    def initiate(self, request: PaymentRequest) -> OrderHandle:
        """Create the pending payment and its gateway order. Raises ApiError."""
        data = self.api.post_json("/api/payment/create-order", request.to_payload())
        return OrderHandle(
            payment_id=data["paymentId"],
            order_id=data["orderId"],
            amount_paise=data["amount"],
            currency=data.get("currency", "INR"),
            key=data["key"],
            merchant_name=data.get("name", ""),
            description=data.get("description", ""),
        )


class PaymentVerifier:
    def __init__(self, api: ApiClient):
        self.api = api

    def verify(self, handle: OrderHandle, result: GatewayResult) -> VerifiedPayment:
        data = self.api.post_json("/api/payment/verify", {
            "razorpayPaymentId": result.payment_id,
            "razorpayOrderId": result.order_id,
            "razorpaySignature": result.signature,
            "paymentId": handle.payment_id,
        })
        if not data.get("success"):
            raise VerificationFailed(data.get("message") or "Payment verification failed")

        payment = data.get("payment") or {}
        return VerifiedPayment(
            receipt_id=data.get("receiptId"),
            receipt_number=data.get("receiptNumber"),
            amount=payment.get("amount", handle.amount),
            data=data,
        )
