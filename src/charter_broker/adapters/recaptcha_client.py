"""Google reCAPTCHA verification client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx

VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


class CaptchaClient(Protocol):
    """Interface for the bot-protection provider."""

    async def verify(self, token: str, remote_ip: str | None) -> dict[str, object]:
        """Return the provider's verdict for a client token."""


@dataclass
class HttpxRecaptchaClient(CaptchaClient):
    """reCAPTCHA siteverify client implemented with httpx."""

    secret_key: str
    verify_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, secret_key: str, verify_url: str = VERIFY_URL
    ) -> "HttpxRecaptchaClient":
        """Create a reCAPTCHA client with a managed httpx session."""
        return cls(
            secret_key=secret_key,
            verify_url=verify_url,
            http_client=httpx.AsyncClient(),
        )

    async def verify(self, token: str, remote_ip: str | None) -> dict[str, object]:
        """Post a token to siteverify and return the decoded verdict."""
        form = {"secret": self.secret_key, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip
        response = await self.http_client.post(self.verify_url, data=form, timeout=10)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise RuntimeError("reCAPTCHA response is not an object")
        return data

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
