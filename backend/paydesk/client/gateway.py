"""
Gateway Bridge — Opens the hosted checkout for an order and hands back
the identifiers the gateway returns.

The checkout itself is supplied by a loader (a browser widget, a terminal
prompt, or SimulatedCheckout) and is loaded at most once per bridge.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from paydesk.client.settings import get_client_settings
from paydesk.utils.hashing import hmac_sha256

logger = logging.getLogger(__name__)


class GatewayCancelled(Exception):
    """The customer dismissed the checkout."""

    def __init__(self, reason: str = "Payment cancelled by user"):
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class GatewayResult:
    payment_id: str
    order_id: str
    signature: str


class Checkout(Protocol):
    def open(self, options: dict) -> dict:
        """Run the checkout; return razorpay_payment_id/order_id/signature or raise GatewayCancelled."""


class GatewayBridge:
    def __init__(self, loader: Callable[[], Checkout], theme_color: Optional[str] = None):
        self._loader = loader
        self._checkout: Optional[Checkout] = None
        self.theme_color = theme_color or get_client_settings().CHECKOUT_THEME_COLOR

    @property
    def loaded(self) -> bool:
        return self._checkout is not None

    def load(self) -> Checkout:
        """Load the checkout once; later calls reuse it."""
        if self._checkout is None:
            logger.info("Loading checkout")
            self._checkout = self._loader()
        return self._checkout

    def build_options(self, handle, request) -> dict:
        return {
            "key": handle.key,
            "amount": handle.amount_paise,
            "currency": handle.currency,
            "name": handle.merchant_name,
            "description": handle.description,
            "order_id": handle.order_id,
            "prefill": {
                "name": request.name,
                "email": request.email,
                "contact": request.phone,
            },
            "theme": {"color": self.theme_color},
        }

    def pay(self, handle, request) -> GatewayResult:
        """Open checkout for the order. Raises GatewayCancelled on dismissal."""
        checkout = self.load()
        response = checkout.open(self.build_options(handle, request))
        if not response:
            raise GatewayCancelled()
        return GatewayResult(
            payment_id=response["razorpay_payment_id"],
            order_id=response["razorpay_order_id"],
            signature=response["razorpay_signature"],
        )


class SimulatedCheckout:
    """Offline checkout that signs with the backend's simulated gateway secret."""

    def __init__(self, secret: str, approve: bool = True):
        self.secret = secret
        self.approve = approve
        self.opened: list[dict] = []

    def open(self, options: dict) -> dict:
        self.opened.append(options)
        if not self.approve:
            raise GatewayCancelled()
        payment_id = f"pay_{uuid.uuid4().hex[:14]}"
        order_id = options["order_id"]
        return {
            "razorpay_payment_id": payment_id,
            "razorpay_order_id": order_id,
            "razorpay_signature": hmac_sha256(self.secret, f"{order_id}|{payment_id}"),
        }
