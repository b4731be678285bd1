"""
Customer-facing payment flow, independent of any UI toolkit. Talks to the
Paydesk backend over HTTP.
"""
from paydesk.client.api import ApiClient, ApiError
from paydesk.client.form import FormCollector, FormStep, FormValidationError, FormWizard, PaymentRequest
from paydesk.client.gateway import GatewayBridge, GatewayCancelled, GatewayResult, SimulatedCheckout
from paydesk.client.payment import (
    OrderHandle, PaymentInitiator, PaymentVerifier, VerificationFailed, VerifiedPayment,
)
from paydesk.client.receipts import ReceiptMaterializer, ReceiptTarget, resolve_receipt_id
from paydesk.client.flow import FlowState, PaymentFlow
from paydesk.client.qr_flow import InvalidStepError, QRPaymentFlow, QRStep
from paydesk.client.direct import DirectReceiptFlow
from paydesk.client.theme import PreferenceStore, Theme, ThemeContext
from paydesk.client.admin import AdminClient

__all__ = [
    "ApiClient", "ApiError",
    "FormCollector", "FormStep", "FormValidationError", "FormWizard", "PaymentRequest",
    "GatewayBridge", "GatewayCancelled", "GatewayResult", "SimulatedCheckout",
    "OrderHandle", "PaymentInitiator", "PaymentVerifier", "VerificationFailed", "VerifiedPayment",
    "ReceiptMaterializer", "ReceiptTarget", "resolve_receipt_id",
    "FlowState", "PaymentFlow",
    "InvalidStepError", "QRPaymentFlow", "QRStep",
    "DirectReceiptFlow",
    "PreferenceStore", "Theme", "ThemeContext",
    "AdminClient",
]
