"""Tests for intake and quote status endpoints."""

from uuid import uuid4

from fastapi.testclient import TestClient

from charter_broker.api.app import create_app
from charter_broker.services.captcha import CaptchaVerifier
from tests.conftest import (
    FakeCaptchaClient,
    FakeEmailClient,
    InMemoryContactRepository,
    InMemoryQuoteRepository,
    InMemoryStatusEventRepository,
    make_quote,
)

QUOTE_FORM = {
    "serviceType": "charter",
    "fullName": "Ana Gómez",
    "email": "ana@example.com",
    "phone": "+5491100000000",
    "passengers": 2,
    "origin": "AEP",
    "destination": "MDZ",
    "departureDate": "2026-11-02",
    "additionalServices": ["premium_catering"],
    "locale": "es",
}


def _status_body(status: str, **overrides: str) -> dict[str, str]:
    body = {
        "status": status,
        "adminEmail": "admin@fly-fleet.com",
        "adminToken": "admin-token",
    }
    body.update(overrides)
    return body


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_submit_quote(
    container,
    quote_repository: InMemoryQuoteRepository,
    email_client: FakeEmailClient,
) -> None:
    client = TestClient(create_app(container))

    response = client.post("/quotes", json=QUOTE_FORM)

    assert response.status_code == 201
    data = response.json()["quote"]
    assert data["destination"] == "MDZ"
    assert data["additionalServices"] == ["premium_catering"]
    assert len(quote_repository.quotes) == 1
    assert len(email_client.sent) == 2


def test_submit_quote_validation_error(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/quotes", json={**QUOTE_FORM, "passengers": 0})

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "validation_error"
    assert data["details"][0]["field"] == "body.passengers"


def test_submit_quote_rejects_unknown_airport(
    container, quote_repository: InMemoryQuoteRepository
) -> None:
    client = TestClient(create_app(container))

    unknown = client.post("/quotes", json={**QUOTE_FORM, "destination": "XXX"})
    malformed = client.post("/quotes", json={**QUOTE_FORM, "origin": "Buenos Aires"})

    assert unknown.status_code == 400
    assert unknown.json()["field"] == "destination"
    assert malformed.status_code == 400
    assert malformed.json()["details"][0]["field"] == "body.origin"
    assert quote_repository.quotes == {}


def test_intake_requires_recaptcha_when_configured(
    container,
    quote_repository: InMemoryQuoteRepository,
    contact_repository: InMemoryContactRepository,
) -> None:
    captcha_client = FakeCaptchaClient(
        response={"success": True, "score": 0.1, "action": "quote_request"}
    )
    container.captcha_verifier = CaptchaVerifier(client=captcha_client)
    client = TestClient(create_app(container))

    missing = client.post("/quotes", json=QUOTE_FORM)
    low_score = client.post(
        "/quotes",
        json={**QUOTE_FORM, "recaptchaToken": "tok"},
        headers={"X-Real-IP": "198.51.100.4"},
    )
    captcha_client.response = {"success": True, "score": 0.9, "action": "contact_form"}
    contact = client.post(
        "/contacts",
        json={
            "fullName": "John Smith",
            "email": "john@example.com",
            "message": "Need a helicopter",
            "recaptchaToken": "tok",
        },
    )

    assert missing.status_code == 400
    assert missing.json()["details"] == ["missing-input-response"]
    assert low_score.status_code == 400
    assert low_score.json()["details"] == ["Score too low: 0.1 < 0.5"]
    assert captcha_client.calls[0] == ("tok", "198.51.100.4")
    assert quote_repository.quotes == {}
    assert contact.status_code == 201
    assert len(contact_repository.contacts) == 1


def test_submit_contact(
    container, contact_repository: InMemoryContactRepository
) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/contacts",
        json={
            "fullName": "John Smith",
            "email": "john@example.com",
            "message": "Need a helicopter",
            "contactViaWhatsapp": True,
        },
    )

    assert response.status_code == 201
    assert response.json()["contact"]["contactViaWhatsapp"] is True
    assert len(contact_repository.contacts) == 1


def test_intake_is_rate_limited_per_ip(container) -> None:
    client = TestClient(create_app(container))
    limit = container.settings.intake_rate_limit
    headers = {"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}

    statuses = [
        client.post("/quotes", json=QUOTE_FORM, headers=headers).status_code
        for _ in range(limit + 1)
    ]
    other_ip = client.post(
        "/quotes", json=QUOTE_FORM, headers={"X-Forwarded-For": "198.51.100.1"}
    )

    assert statuses[:limit] == [201] * limit
    assert statuses[limit] == 429
    assert other_ip.status_code == 201


def test_update_quote_status(
    container,
    quote_repository: InMemoryQuoteRepository,
    status_repository: InMemoryStatusEventRepository,
) -> None:
    client = TestClient(create_app(container))
    quote = make_quote()
    quote_repository.quotes[quote.id] = quote

    response = client.patch(
        f"/quotes/{quote.id}/status",
        json=_status_body("reviewing", adminNote="On it"),
        headers={"User-Agent": "ops-console"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["quote"]["currentStatus"] == "reviewing"
    assert data["statusChange"]["fromStatus"] == "new_request"
    assert data["statusChange"]["adminNote"] == "On it"
    assert data["statusChange"]["userAgent"] == "ops-console"
    assert len(data["statusHistory"]) == 1
    assert data["availableActions"] == ["quote_sent", "cancelled"]
    assert len(status_repository.events) == 1


def test_update_quote_status_errors(
    container,
    quote_repository: InMemoryQuoteRepository,
    status_repository: InMemoryStatusEventRepository,
) -> None:
    client = TestClient(create_app(container))
    quote = make_quote()
    quote_repository.quotes[quote.id] = quote
    url = f"/quotes/{quote.id}/status"

    malformed = client.patch(
        "/quotes/not-a-uuid/status", json=_status_body("reviewing")
    )
    bad_token = client.patch(url, json=_status_body("reviewing", adminToken="nope"))
    not_allowed = client.patch(
        url, json=_status_body("reviewing", adminEmail="intruder@example.com")
    )
    missing = client.patch(f"/quotes/{uuid4()}/status", json=_status_body("reviewing"))
    invalid = client.patch(url, json=_status_body("paid"))

    assert malformed.status_code == 400
    assert bad_token.status_code == 401
    assert not_allowed.status_code == 403
    assert not_allowed.json()["error"] == "forbidden"
    assert missing.status_code == 404
    assert invalid.status_code == 400
    assert invalid.json()["validTransitions"] == ["reviewing", "cancelled"]
    assert status_repository.events == []


def test_get_quote_status_requires_admin(
    container, quote_repository: InMemoryQuoteRepository
) -> None:
    client = TestClient(create_app(container))
    quote = make_quote()
    quote_repository.quotes[quote.id] = quote

    denied = client.get(f"/quotes/{quote.id}/status")
    allowed = client.get(
        f"/quotes/{quote.id}/status", headers={"X-Admin-Token": "admin-token"}
    )

    assert denied.status_code == 401
    assert allowed.status_code == 200
    assert allowed.json()["quote"]["currentStatus"] == "new_request"
    assert allowed.json()["availableActions"] == ["reviewing", "cancelled"]
