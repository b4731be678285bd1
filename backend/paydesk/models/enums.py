"""
Enumerations shared by models, schemas and the client flow.
"""
from enum import Enum


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentStatus.PENDING

    def can_transition(self, target: "PaymentStatus") -> bool:
        """Status only ever moves out of pending, and only once."""
        return self is PaymentStatus.PENDING and target is not PaymentStatus.PENDING


class PaymentMode(str, Enum):
    CARD = "card"
    UPI = "upi"
    NET_BANKING = "net_banking"
    WALLET = "wallet"
    # Direct receipts only
    CASH = "cash"
    CHEQUE = "cheque"
    BANK_TRANSFER = "bank_transfer"


GATEWAY_MODES = frozenset({
    PaymentMode.CARD, PaymentMode.UPI, PaymentMode.NET_BANKING, PaymentMode.WALLET,
})
DIRECT_MODES = frozenset(PaymentMode)
