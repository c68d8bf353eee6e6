"""
Razorpay Orders API client.

Only the call checkout needs is implemented: opening an order (the payment
intent) for a known amount in minor units. Card capture happens in the
shopper's browser; we learn about it from the signed callback.
"""
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx
import structlog

from shared.config.settings import Settings

logger = structlog.get_logger(__name__)


class GatewayError(Exception):
    """The gateway could not be reached or refused the request."""


@dataclass(frozen=True)
class GatewayOrder:
    id: str
    amount: int
    currency: str
    receipt: str
    status: str


class PaymentGateway(Protocol):
    key_id: str

    async def create_order(self, amount: int, currency: str, receipt: str, notes: dict) -> GatewayOrder:
        ...


class RazorpayGateway:
    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key_id = key_id
        self._key_secret = key_secret
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "RazorpayGateway":
        return cls(
            key_id=settings.razorpay_key_id,
            key_secret=settings.razorpay_key_secret,
            base_url=settings.razorpay_base_url,
            timeout=settings.razorpay_timeout_seconds,
        )

    async def create_order(self, amount: int, currency: str, receipt: str, notes: dict) -> GatewayOrder:
        if not self.key_id or not self._key_secret:
            raise GatewayError("Razorpay credentials are not configured")

        payload = {"amount": amount, "currency": currency, "receipt": receipt, "notes": notes}
        async with httpx.AsyncClient(
            base_url=self._base_url,
            auth=(self.key_id, self._key_secret),
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.post("/orders", json=payload)
                resp.raise_for_status()
            except httpx.HTTPStatusError as exc:
                logger.error("gateway.order_rejected", status_code=exc.response.status_code, receipt=receipt)
                raise GatewayError(f"Razorpay rejected the order: HTTP {exc.response.status_code}") from exc
            except httpx.HTTPError as exc:
                logger.error("gateway.unreachable", error=str(exc), receipt=receipt)
                raise GatewayError(f"Razorpay request failed: {exc}") from exc

        body = resp.json()
        return GatewayOrder(
            id=body["id"],
            amount=body["amount"],
            currency=body.get("currency", currency),
            receipt=body.get("receipt", receipt),
            status=body.get("status", "created"),
        )
