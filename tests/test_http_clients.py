"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from charter_broker.adapters.recaptcha_client import HttpxRecaptchaClient
from charter_broker.adapters.resend_client import HttpxResendClient


def _client(handler) -> HttpxResendClient:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxResendClient(
        api_key="re_key",
        base_url="https://api.resend.test",
        http_client=httpx.AsyncClient(transport=transport),
    )


def test_resend_client_sends_email() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "re_123"})

    client = _client(handler)

    message_id = asyncio.run(
        client.send_email(
            sender="Fly-Fleet <noreply@fly-fleet.com>",
            to=["ops@fly-fleet.com"],
            subject="New quote request",
            text="Buenos Aires to Punta del Este",
        )
    )

    assert message_id == "re_123"
    assert seen[0].url.path == "/emails"
    assert seen[0].headers["Authorization"] == "Bearer re_key"
    payload = json.loads(seen[0].content.decode())
    assert payload["to"] == ["ops@fly-fleet.com"]
    assert payload["subject"] == "New quote request"


def test_resend_client_requires_message_id() -> None:
    client = _client(lambda _request: httpx.Response(200, json={}))

    with pytest.raises(RuntimeError):
        asyncio.run(client.send_email("a@b.c", ["d@e.f"], "Hi", "Body"))


def test_resend_client_raises_on_error_status() -> None:
    client = _client(
        lambda _request: httpx.Response(422, json={"message": "Invalid `to`"})
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.send_email("a@b.c", ["bad"], "Hi", "Body"))


def _recaptcha(handler) -> HttpxRecaptchaClient:  # type: ignore[no-untyped-def]
    return HttpxRecaptchaClient(
        secret_key="captcha-secret",
        verify_url="https://recaptcha.test/siteverify",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def test_recaptcha_client_posts_form() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "score": 0.8})

    client = _recaptcha(handler)

    verdict = asyncio.run(client.verify("token-1", "203.0.113.5"))

    assert verdict == {"success": True, "score": 0.8}
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/siteverify"
    form = seen[0].content.decode()
    assert "secret=captcha-secret" in form
    assert "response=token-1" in form
    assert "remoteip=203.0.113.5" in form


def test_recaptcha_client_rejects_non_object_response() -> None:
    client = _recaptcha(lambda _request: httpx.Response(200, json=["nope"]))

    with pytest.raises(RuntimeError):
        asyncio.run(client.verify("token-1", None))


def test_recaptcha_client_raises_on_error_status() -> None:
    client = _recaptcha(lambda _request: httpx.Response(503))

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.verify("token-1", None))
