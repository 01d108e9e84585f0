"""Resend HTTP client for transactional email."""

import base64
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import httpx

from yieldbook.core.config import settings
from yieldbook.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "Email service"


@dataclass(frozen=True)
class EmailAttachment:
    filename: str
    content: bytes

    def to_payload(self) -> dict:
        return {
            "filename": self.filename,
            "content": base64.b64encode(self.content).decode("ascii"),
        }


class ResendEmailClient:
    """Client for the Resend ``/emails`` endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.api_url = api_url or settings.RESEND_API_URL
        self.sender = sender or settings.EMAIL_FROM
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

    async def send(
        self,
        to: Union[str, Sequence[str]],
        subject: str,
        html: str,
        attachments: Sequence[EmailAttachment] = (),
    ) -> str:
        """
        Send one email and return the provider's message id.

        Raises:
            ExternalServiceError: On a missing key, timeout or non-2xx answer.
        """
        if not self.api_key:
            logger.error("Resend API key is not configured")
            raise ExternalServiceError(SERVICE_NAME, "Email delivery is not configured.")

        recipients = [to] if isinstance(to, str) else list(to)
        payload = {"from": self.sender, "to": recipients, "subject": subject, "html": html}
        if attachments:
            payload["attachments"] = [a.to_payload() for a in attachments]

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                response.raise_for_status()
                return response.json().get("id", "")
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
            except ValueError as e:
                raise ExternalServiceError(SERVICE_NAME, f"Invalid response: {e}") from e
