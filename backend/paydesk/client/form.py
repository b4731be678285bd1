"""
Form Collector — Field-level validation of customer and payment details.

Runs the same rules the backend schemas enforce, so a form with any invalid
field never leaves the client.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Mapping, Optional

from paydesk.models.enums import DIRECT_MODES, GATEWAY_MODES, PaymentMode
from paydesk.utils.validators import (
    as_text, normalize_phone, sanitize_text, validate_amount, validate_email, validate_phone,
)


class FormValidationError(Exception):
    """One message per failing field, keyed by the form's field name."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


@dataclass(frozen=True)
class PaymentRequest:
    name: str
    email: str
    phone: str
    address: str
    amount: float
    payment_mode: Optional[PaymentMode] = None
    description: Optional[str] = None

    def customer(self) -> dict:
        return {"name": self.name, "email": self.email, "phone": self.phone, "address": self.address}

    def to_payload(self) -> dict:
        payload = {**self.customer(), "amount": self.amount}
        if self.payment_mode is not None:
            payload["paymentMode"] = self.payment_mode.value
        if self.description:
            payload["description"] = self.description
        return payload

    def to_direct_payload(self) -> dict:
        payload = {
            "customerName": self.name,
            "customerEmail": self.email,
            "customerPhone": self.phone,
            "customerAddress": self.address,
            "amount": self.amount,
            "paymentMode": self.payment_mode.value,
        }
        if self.description:
            payload["description"] = self.description
        return payload


class FormCollector:
    """Validates a raw form mapping into a PaymentRequest.

    `keys` maps each logical field to the key used in the raw form, so the
    direct-receipt form (customerName, customerEmail, ...) shares the rules.
    """

    DEFAULT_KEYS = {
        "name": "name",
        "email": "email",
        "phone": "phone",
        "address": "address",
        "amount": "amount",
        "payment_mode": "paymentMode",
        "description": "description",
    }

    def __init__(self, modes=GATEWAY_MODES, keys: Optional[dict] = None, require_mode: bool = True):
        self.modes = frozenset(modes)
        self.keys = {**self.DEFAULT_KEYS, **(keys or {})}
        self.require_mode = require_mode

    @classmethod
    def for_direct_receipts(cls) -> "FormCollector":
        return cls(
            modes=DIRECT_MODES,
            keys={
                "name": "customerName",
                "email": "customerEmail",
                "phone": "customerPhone",
                "address": "customerAddress",
            },
        )

    @classmethod
    def for_qr_payments(cls) -> "FormCollector":
        return cls(require_mode=False)

    def _get(self, raw: Mapping, field: str):
        return raw.get(self.keys[field])

    def collect(self, raw: Mapping) -> PaymentRequest:
        errors: dict[str, str] = {}

        name = sanitize_text(self._get(raw, "name"))
        if not name:
            errors[self.keys["name"]] = "Name is required"

        email = as_text(self._get(raw, "email")).strip()
        if not validate_email(email):
            errors[self.keys["email"]] = "Please enter a valid email address"

        phone = self._get(raw, "phone")
        if not validate_phone(phone):
            errors[self.keys["phone"]] = "Phone number must be 10 digits"

        address = sanitize_text(self._get(raw, "address"))
        if not address:
            errors[self.keys["address"]] = "Address is required"

        amount = self._get(raw, "amount")
        amount_ok, amount_msg = validate_amount(amount)
        if not amount_ok:
            errors[self.keys["amount"]] = amount_msg

        mode = None
        raw_mode = self._get(raw, "payment_mode")
        if raw_mode or self.require_mode:
            try:
                mode = PaymentMode(raw_mode)
            except ValueError:
                mode = None
            if mode is None or mode not in self.modes:
                allowed = ", ".join(sorted(m.value for m in self.modes))
                errors[self.keys["payment_mode"]] = f"Payment mode must be one of: {allowed}"

        if errors:
            raise FormValidationError(errors)

        description = sanitize_text(self._get(raw, "description")) or None
        return PaymentRequest(
            name=name,
            email=email.lower(),
            phone=normalize_phone(phone),
            address=address,
            amount=float(amount),
            payment_mode=mode,
            description=description,
        )


class FormStep(IntEnum):
    PERSONAL_INFO = 1
    PAYMENT_DETAILS = 2
    CONFIRM = 3

    @property
    def title(self) -> str:
        return STEP_TITLES[self]


STEP_TITLES = {
    FormStep.PERSONAL_INFO: "Personal Information",
    FormStep.PAYMENT_DETAILS: "Payment Details",
    FormStep.CONFIRM: "Confirm & Pay",
}

# Logical fields that must be valid before leaving each step
STEP_FIELDS = {
    FormStep.PERSONAL_INFO: ("name", "email", "phone", "address"),
    FormStep.PAYMENT_DETAILS: ("amount", "payment_mode"),
    FormStep.CONFIRM: (),
}


class FormWizard:
    """The checkout form split into Personal Info, Payment Details, Confirm.

    `next()` only advances when the current step's fields pass the
    collector's rules; `back()` never validates. Values typed on any step are
    kept across moves, so going back and forward loses nothing.
    """

    def __init__(self, collector: Optional[FormCollector] = None, initial: Optional[Mapping] = None):
        self.collector = collector or FormCollector()
        self.values: dict = {self.collector.keys["payment_mode"]: PaymentMode.CARD.value}
        self.values.update(initial or {})
        self.step = FormStep.PERSONAL_INFO
        self.errors: dict[str, str] = {}

    def update(self, values: Mapping) -> None:
        self.values.update(values)

    def _step_errors(self, step: FormStep) -> dict[str, str]:
        try:
            self.collector.collect(self.values)
        except FormValidationError as e:
            wanted = {self.collector.keys[field] for field in STEP_FIELDS[step]}
            return {key: msg for key, msg in e.errors.items() if key in wanted}
        return {}

    def next(self) -> FormStep:
        self.errors = self._step_errors(self.step)
        if not self.errors and self.step < FormStep.CONFIRM:
            self.step = FormStep(self.step + 1)
        return self.step

    def back(self) -> FormStep:
        self.errors = {}
        if self.step > FormStep.PERSONAL_INFO:
            self.step = FormStep(self.step - 1)
        return self.step

    def submit(self) -> PaymentRequest:
        """Validate everything once more and return the confirmed request.

        Raises:
            FormValidationError: not on the confirm step, or a field went bad.
        """
        if self.step is not FormStep.CONFIRM:
            raise FormValidationError({"step": f"Complete {self.step.title} first"})
        try:
            return self.collector.collect(self.values)
        except FormValidationError as e:
            self.errors = e.errors
            raise
