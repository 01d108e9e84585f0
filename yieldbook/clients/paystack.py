"""Paystack HTTP client for initializing checkout transactions."""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import httpx

from yieldbook.core.config import settings
from yieldbook.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "Payment gateway"


@dataclass(frozen=True)
class PaymentInitialization:
    authorization_url: str
    access_code: str
    reference: str


def to_kobo(amount: Decimal) -> int:
    """Naira → kobo, rounded half-up to a whole kobo."""
    return int((Decimal(amount) * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


class PaystackClient:
    """Client for the Paystack ``transaction/initialize`` endpoint."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        api_url: Optional[str] = None,
        callback_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.PAYSTACK_SECRET_KEY
        self.api_url = api_url or settings.PAYSTACK_API_URL
        self.callback_url = callback_url if callback_url is not None else settings.PAYSTACK_CALLBACK_URL
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

    async def initialize_transaction(self, email: str, amount: Decimal) -> PaymentInitialization:
        """
        Start a checkout for ``amount`` naira paid by ``email``.

        Raises:
            ExternalServiceError: When the key is missing, the call times out,
                Paystack rejects the request or the payload is malformed.
        """
        if not self.secret_key:
            logger.error("Paystack secret key is not configured")
            raise ExternalServiceError(SERVICE_NAME, "Payment gateway is not configured.")

        payload = {"email": email, "amount": to_kobo(amount)}
        if self.callback_url:
            payload["callback_url"] = self.callback_url

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.secret_key}"},
                )
                body = response.json()
                if response.is_error or not body.get("status"):
                    logger.error(
                        "Paystack rejected initialization (status=%d): %s",
                        response.status_code,
                        body.get("message"),
                    )
                    raise ExternalServiceError(
                        SERVICE_NAME, body.get("message") or "Failed to initialize payment."
                    )
                data = body["data"]
                return PaymentInitialization(
                    authorization_url=data["authorization_url"],
                    access_code=data.get("access_code", ""),
                    reference=data["reference"],
                )
            except httpx.TimeoutException as e:
                raise ExternalServiceError(
                    SERVICE_NAME, f"Timed out after {self.timeout}s."
                ) from e
            except httpx.HTTPError as e:
                raise ExternalServiceError(SERVICE_NAME, "Could not connect.") from e
            except (KeyError, ValueError, TypeError) as e:
                raise ExternalServiceError(SERVICE_NAME, f"Invalid response: {e}") from e
