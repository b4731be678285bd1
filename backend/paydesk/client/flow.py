"""
Payment Flow — Form → initiate → checkout → verify, as a small state machine.

States: FORM, PROCESSING, SUCCESS, FAILURE. Every move is checked against
TRANSITIONS; the UI renders whatever state the flow is in.
"""
import logging
from enum import Enum
from typing import Mapping, Optional

from paydesk.client.api import ApiClient, ApiError
from paydesk.client.form import FormCollector, FormValidationError, FormWizard, PaymentRequest
from paydesk.client.gateway import GatewayBridge, GatewayCancelled
from paydesk.client.payment import PaymentInitiator, PaymentVerifier, VerificationFailed, VerifiedPayment
from paydesk.utils.formatting import format_inr

logger = logging.getLogger(__name__)


class FlowState(str, Enum):
    FORM = "form"
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILURE = "failure"


TRANSITIONS = {
    FlowState.FORM: {FlowState.PROCESSING},
    FlowState.PROCESSING: {FlowState.FORM, FlowState.SUCCESS, FlowState.FAILURE},
    FlowState.SUCCESS: {FlowState.FORM},
    FlowState.FAILURE: {FlowState.FORM},
}


class InvalidFlowTransition(Exception):
    pass


class PaymentFlow:
    def __init__(self, api: ApiClient, bridge: GatewayBridge, collector: Optional[FormCollector] = None):
        self.collector = collector or FormCollector()
        self.initiator = PaymentInitiator(api)
        self.bridge = bridge
        self.verifier = PaymentVerifier(api)

        self.state = FlowState.FORM
        self.field_errors: dict[str, str] = {}
        self.alert: Optional[str] = None
        self.failure_reason: Optional[str] = None
        self.request: Optional[PaymentRequest] = None
        self.result: Optional[VerifiedPayment] = None

    def _move(self, target: FlowState):
        if target not in TRANSITIONS[self.state]:
            raise InvalidFlowTransition(f"Cannot go from {self.state.value} to {target.value}")
        logger.debug("Payment flow %s -> %s", self.state.value, target.value)
        self.state = target

    def submit(self, raw: Mapping) -> FlowState:
        if self.state is not FlowState.FORM:
            raise InvalidFlowTransition(f"Cannot submit from {self.state.value}")

        self.field_errors, self.alert, self.failure_reason = {}, None, None
        try:
            request = self.collector.collect(raw)
        except FormValidationError as e:
            self.field_errors = e.errors
            return self.state
        return self.checkout(request)

    def submit_wizard(self, wizard: FormWizard) -> FlowState:
        """Pay with the request confirmed on the wizard's last step."""
        if self.state is not FlowState.FORM:
            raise InvalidFlowTransition(f"Cannot submit from {self.state.value}")

        self.field_errors, self.alert, self.failure_reason = {}, None, None
        try:
            request = wizard.submit()
        except FormValidationError as e:
            self.field_errors = e.errors
            return self.state
        return self.checkout(request)

    def checkout(self, request: PaymentRequest) -> FlowState:
        """Initiate, open the checkout and verify an already validated request."""
        self.request = request
        self._move(FlowState.PROCESSING)
        try:
            handle = self.initiator.initiate(self.request)
        except ApiError as e:
            self.alert = e.message
            self._move(FlowState.FORM)
            return self.state

        try:
            gateway_result = self.bridge.pay(handle, self.request)
            self.result = self.verifier.verify(handle, gateway_result)
        except GatewayCancelled as e:
            self._fail(e.reason)
        except VerificationFailed as e:
            self._fail(e.message)
        except ApiError as e:
            self._fail(e.message)
        else:
            self._move(FlowState.SUCCESS)
        return self.state

    def _fail(self, reason: str):
        logger.info("Payment attempt failed: %s", reason)
        self.failure_reason = reason
        self._move(FlowState.FAILURE)

    def retry(self) -> FlowState:
        """Back to the form after a failure; the customer's details are kept."""
        if self.state is not FlowState.FAILURE:
            raise InvalidFlowTransition("Retry is only possible after a failure")
        self.failure_reason = None
        self._move(FlowState.FORM)
        return self.state

    def reset(self) -> FlowState:
        """Start a new payment after a success."""
        if self.state is not FlowState.SUCCESS:
            raise InvalidFlowTransition("Reset is only possible after a success")
        self.request, self.result = None, None
        self._move(FlowState.FORM)
        return self.state

    @property
    def display_amount(self) -> Optional[str]:
        if self.result is None:
            return None
        return format_inr(self.result.amount)
