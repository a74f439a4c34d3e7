"""PayPal Orders v2 payment processor."""

import logging

import requests

from ticketing.domain.errors import PaymentFailedError
from ticketing.integrations.interfaces import PaymentCapture, PaymentProcessor

logger = logging.getLogger(__name__)

SANDBOX_URL = "https://api-m.sandbox.paypal.com"
LIVE_URL = "https://api-m.paypal.com"


class PayPalProcessor(PaymentProcessor):
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        sandbox: bool = True,
        timeout: float = 30,
        session: requests.Session | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._base_url = SANDBOX_URL if sandbox else LIVE_URL
        self._timeout = timeout
        self._session = session or requests.Session()

    def _access_token(self) -> str:
        if not self._client_id or not self._client_secret:
            raise PaymentFailedError("PayPal credentials are not configured")
        response = self._session.post(
            f"{self._base_url}/v1/oauth2/token",
            auth=(self._client_id, self._client_secret),
            data={"grant_type": "client_credentials"},
            headers={"Accept": "application/json"},
            timeout=self._timeout,
        )
        if not response.ok:
            raise PaymentFailedError(f"PayPal authentication failed ({response.status_code})")
        return response.json()["access_token"]

    def capture(self, order_id: str) -> PaymentCapture:
        try:
            token = self._access_token()
            response = self._session.post(
                f"{self._base_url}/v2/checkout/orders/{order_id}/capture",
                json={},
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.warning("PayPal capture of %s failed: %s", order_id, exc)
            raise PaymentFailedError("Payment processor unreachable") from exc

        if not response.ok:
            logger.warning(
                "PayPal refused capture of %s: %s %s",
                order_id,
                response.status_code,
                response.text[:500],
            )
            raise PaymentFailedError(f"Payment processor returned {response.status_code}")

        data = response.json()
        captures = [
            capture
            for unit in data.get("purchase_units", [])
            for capture in unit.get("payments", {}).get("captures", [])
        ]
        return PaymentCapture(
            status=data.get("status", ""),
            capture_id=captures[0]["id"] if captures else "",
        )
