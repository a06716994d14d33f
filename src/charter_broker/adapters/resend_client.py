"""Resend email API client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class EmailClient(Protocol):
    """Interface for the transactional email provider."""

    async def send_email(
        self, sender: str, to: list[str], subject: str, text: str
    ) -> str:
        """Send an email and return the provider message id."""


@dataclass
class HttpxResendClient(EmailClient):
    """Resend client implemented with httpx."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxResendClient":
        """Create a Resend client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def send_email(
        self, sender: str, to: list[str], subject: str, text: str
    ) -> str:
        """Send an email using Resend's emails endpoint."""
        response = await self.http_client.post(
            f"{self.base_url}/emails",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={"from": sender, "to": to, "subject": subject, "text": text},
            timeout=10,
        )
        response.raise_for_status()
        data = response.json()
        message_id = data.get("id") if isinstance(data, dict) else None
        if not message_id:
            raise RuntimeError("Resend response missing message id")
        return str(message_id)

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
