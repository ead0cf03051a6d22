"""
Outbound mail transport for reminder emails.

The dispatcher only needs "send one email"; ``ResendMailer`` implements that
against the Resend HTTP API. An HTTP-level rejection comes back as a
``SendResult`` carrying an error, while network failures raise
``MailTransportError``.
"""

from typing import Protocol

import httpx

from app.config import settings
from app.features.reminders.domain import SendResult
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class MailTransportError(Exception):
    """Raised when the mail provider could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, recoverable: bool = True):
        super().__init__(message)
        self.status_code = status_code
        self.recoverable = recoverable


class MailTransport(Protocol):
    async def send(self, to: str, subject: str, html: str) -> SendResult: ...


class ResendMailer:
    """Async client for the Resend ``/emails`` endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        sender: str | None = None,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.sender = sender or settings.EMAIL_FROM
        self.base_url = (base_url or settings.RESEND_API_URL).rstrip("/")
        self._client = client or self._create_client()

    def _create_client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(settings.REMINDER_SEND_TIMEOUT_SECONDS)
        return httpx.AsyncClient(timeout=timeout)

    def _get_auth_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "ResendMailer":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def send(self, to: str, subject: str, html: str) -> SendResult:
        """
        Send one email.

        Returns:
            SendResult: ``message_id`` on success, ``error`` if Resend rejected it

        Raises:
            MailTransportError: If the request never got a response
        """
        if not self.api_key:
            return SendResult(error="Resend API error: RESEND_API_KEY is not configured")

        payload = {"from": self.sender, "to": [to], "subject": subject, "html": html}

        try:
            response = await self._client.post(
                f"{self.base_url}/emails", json=payload, headers=self._get_auth_headers()
            )
        except httpx.RequestError as e:
            raise MailTransportError(f"Mail transport error: {type(e).__name__}: {e}") from e

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {}

        if response.is_success:
            return SendResult(message_id=body.get("id"))

        message = body.get("message") or response.reason_phrase or "request rejected"
        logger.debug(
            "Resend rejected email",
            status_code=response.status_code,
            error_name=body.get("name"),
        )
        return SendResult(error=f"Resend API error: {message}")
