"""
Gateway Service — Razorpay order creation and checkout signature verification.

With no RAZORPAY_KEY_SECRET configured the gateway runs simulated: orders
are minted locally and signatures are checked against the simulated secret,
which the offline checkout uses to sign.
"""
import logging
import uuid

import httpx

from paydesk.config import get_settings
from paydesk.exceptions import GatewayError
from paydesk.utils.hashing import hmac_sha256, signatures_match

logger = logging.getLogger(__name__)


def to_paise(amount: float) -> int:
    return int(round(amount * 100))


class GatewayService:
    """Thin client over the Razorpay Orders API."""

    def __init__(self, settings=None, client: httpx.Client | None = None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def key_id(self) -> str:
        return self.settings.RAZORPAY_KEY_ID

    @property
    def simulated(self) -> bool:
        return self.settings.gateway_simulated

    def create_order(self, amount: float, receipt_ref: str, notes: dict | None = None) -> dict:
        """Create a gateway order for amount (rupees).

        Returns:
            dict with 'id' (order id), 'amount' (paise), 'currency'.

        Raises:
            GatewayError: gateway unreachable or order rejected.
        """
        payload = {
            "amount": to_paise(amount),
            "currency": self.settings.CURRENCY,
            "receipt": receipt_ref[:40],
            "notes": notes or {},
        }

        if self.simulated:
            order = {"id": f"order_{uuid.uuid4().hex[:14]}", "amount": payload["amount"],
                     "currency": payload["currency"], "status": "created"}
            logger.info("Simulated gateway order %s for %s paise", order["id"], payload["amount"])
            return order

        url = f"{self.settings.RAZORPAY_API_URL.rstrip('/')}/orders"
        try:
            client = self._client or httpx.Client(timeout=self.settings.GATEWAY_TIMEOUT_SECONDS)
            try:
                response = client.post(
                    url,
                    json=payload,
                    auth=(self.settings.RAZORPAY_KEY_ID, self.settings.RAZORPAY_KEY_SECRET),
                )
            finally:
                if self._client is None:
                    client.close()
        except httpx.HTTPError as e:
            logger.error("Gateway order request failed: %s", e)
            raise GatewayError("Payment gateway unreachable") from e

        if response.status_code >= 400:
            logger.error("Gateway rejected order (%s): %s", response.status_code, response.text[:500])
            raise GatewayError(f"Payment gateway rejected the order ({response.status_code})")

        order = response.json()
        if not order.get("id"):
            raise GatewayError("Payment gateway returned no order id")
        logger.info("Gateway order %s created for %s paise", order["id"], payload["amount"])
        return order

    def sign(self, order_id: str, payment_id: str) -> str:
        """Checkout signature: HMAC_SHA256(secret, "<order_id>|<payment_id>")."""
        return hmac_sha256(self.settings.gateway_secret, f"{order_id}|{payment_id}")

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        return signatures_match(self.sign(order_id, payment_id), signature)
