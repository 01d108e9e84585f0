"""Twelve Data HTTP client for intraday forex quotes."""

import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx

from yieldbook.core.config import settings
from yieldbook.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "Market data provider"
INTERVAL = "5min"
SERIES_LENGTH = 30


@dataclass(frozen=True)
class PricePoint:
    time: str  # "HH:MM"
    price: float


class TwelveDataClient:
    """Client for the Twelve Data ``time_series`` endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.TWELVE_DATA_API_KEY
        self.api_url = api_url or settings.TWELVE_DATA_API_URL
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

    async def time_series(self, base: str, quote: str) -> List[PricePoint]:
        """
        Last ``SERIES_LENGTH`` 5-minute closes for ``base/quote``, oldest first.

        Raises:
            ExternalServiceError: On a missing key, HTTP failure or an error
                payload (Twelve Data reports quota errors with HTTP 200).
        """
        if not self.api_key:
            logger.error("Twelve Data API key is not configured")
            raise ExternalServiceError(SERVICE_NAME, "Live data is not configured.")

        symbol = f"{base.upper()}/{quote.upper()}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(
                    self.api_url,
                    params={"symbol": symbol, "interval": INTERVAL, "apikey": self.api_key},
                )
                response.raise_for_status()
                body = response.json()
                if body.get("status") == "error" or not body.get("values"):
                    logger.warning("Twelve Data error for %s: %s", symbol, body.get("message"))
                    raise ExternalServiceError(
                        SERVICE_NAME, body.get("message") or "Invalid data received."
                    )
                # Newest first on the wire.
                points = [
                    PricePoint(time=value["datetime"][11:16], price=float(value["close"]))
                    for value in reversed(body["values"])
                ]
                return points[-SERIES_LENGTH:]
            except httpx.TimeoutException as e:
                raise ExternalServiceError(
                    SERVICE_NAME, f"Timed out after {self.timeout}s."
                ) from e
            except httpx.HTTPStatusError as e:
                raise ExternalServiceError(
                    SERVICE_NAME, f"Provider returned {e.response.status_code}."
                ) from e
            except httpx.HTTPError as e:
                raise ExternalServiceError(SERVICE_NAME, "Could not connect.") from e
            except (KeyError, ValueError, TypeError) as e:
                raise ExternalServiceError(SERVICE_NAME, f"Invalid response: {e}") from e
