# core/payments.py
import logging
from typing import Optional

import httpx

from core.config import (
    PAYMENT_API_URL,
    PAYMENT_API_KEY,
    FRONTEND_URL,
    CURRENCY,
)

logger = logging.getLogger(__name__)

PAID = "paid"


class PaymentGatewayError(Exception):
    pass


class HostedPaymentGateway:
    """Client for the hosted payment page provider.

    ``create_session`` registers the order with the gateway and returns the
    session id plus the page to send the shopper to. The page sends them back
    to ``{frontend_url}/verify`` with ``success`` and ``orderId``, but that
    redirect proves nothing: ``is_paid`` asks the gateway itself.
    """

    def __init__(self, api_url: str = PAYMENT_API_URL, api_key: str = PAYMENT_API_KEY,
                 frontend_url: str = FRONTEND_URL, currency: str = CURRENCY,
                 client: Optional[httpx.AsyncClient] = None):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.frontend_url = frontend_url.rstrip("/")
        self.currency = currency
        self.client = client

    async def _call(self, method: str, path: str, **kwargs) -> dict:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            if self.client is not None:
                resp = await self.client.request(method, f"{self.api_url}{path}", headers=headers, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=10) as client:
                    resp = await client.request(method, f"{self.api_url}{path}", headers=headers, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("payment gateway %s %s failed: %s", method, path, exc)
            raise PaymentGatewayError(str(exc)) from exc

    async def create_session(self, order_id: str, amount: float) -> dict:
        body = await self._call("POST", "/sessions", json={
            "order_id": order_id,
            "amount": int(round(amount * 100)),  # minor units
            "currency": self.currency,
            "success_url": f"{self.frontend_url}/verify?success=true&orderId={order_id}",
            "cancel_url": f"{self.frontend_url}/verify?success=false&orderId={order_id}",
        })
        if not body.get("id") or not body.get("url"):
            raise PaymentGatewayError("gateway returned no session")
        return {"id": body["id"], "url": body["url"]}

    async def is_paid(self, session_id: str) -> bool:
        body = await self._call("GET", f"/sessions/{session_id}")
        return body.get("status") == PAID


def get_payment_gateway() -> HostedPaymentGateway:
    return HostedPaymentGateway()
