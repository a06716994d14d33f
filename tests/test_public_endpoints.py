"""Tests for WhatsApp, content and FAQ endpoints."""

from urllib.parse import unquote
from uuid import UUID, uuid4

from fastapi.testclient import TestClient

from charter_broker.api.app import create_app
from charter_broker.api.content import CACHE_CONTROL
from charter_broker.domain.content import ContentItem, Faq
from tests.conftest import (
    InMemoryContentRepository,
    InMemoryFaqRepository,
    InMemoryWhatsAppClickRepository,
)


def test_whatsapp_link_endpoint(
    container, click_repository: InMemoryWhatsAppClickRepository
) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/whatsapp/link?utm_campaign=winter",
        json={
            "type": "quote",
            "locale": "es",
            "origin": "Córdoba",
            "destination": "Bariloche",
            "date": "2026-07-10",
            "passengers": 4,
            "pageSource": "/es/quote",
        },
        headers={
            "Referer": "https://www.google.com/search",
            "X-Real-IP": "198.51.100.7",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["whatsappUrl"].startswith("https://wa.me/5491166601927?text=")
    assert "Córdoba" in unquote(data["whatsappUrl"])
    assert data["metadata"] == {"type": "quote", "locale": "es"}
    click = click_repository.clicks[UUID(data["clickId"])]
    assert click.utm_source == "google"
    assert click.utm_campaign == "winter"
    assert click.ip_address == "198.51.100.7"
    assert click.page_source == "/es/quote"


def test_whatsapp_link_validation(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/whatsapp/link", json={"type": "quote", "locale": "en", "origin": "Miami"}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Destination is required for quote type"


def test_whatsapp_link_rate_limit(container) -> None:
    client = TestClient(create_app(container))
    limit = container.settings.whatsapp_rate_limit
    body = {"type": "general", "locale": "en"}

    for _ in range(limit):
        assert client.post("/whatsapp/link", json=body).status_code == 200
    blocked = client.post("/whatsapp/link", json=body)

    assert blocked.status_code == 429
    assert blocked.json()["message"] == (
        f"Rate limit exceeded. Maximum {limit} WhatsApp link requests per hour."
    )


def test_whatsapp_click_lookup_and_stats(container) -> None:
    client = TestClient(create_app(container))
    created = client.post(
        "/whatsapp/link", json={"type": "contact", "locale": "pt", "message": "Oi"}
    ).json()

    found = client.get(f"/whatsapp/link?clickId={created['clickId']}")
    missing = client.get(f"/whatsapp/link?clickId={uuid4()}")
    stats = client.get("/whatsapp/link?timeframe=today")

    assert found.json()["click"]["locale"] == "pt"
    assert missing.status_code == 404
    assert stats.json()["statistics"]["totalClicks"] == 1
    assert stats.json()["statistics"]["clicksBySource"] == {"direct": 1}


def test_content_endpoint_headers_and_metadata(
    container, content_repository: InMemoryContentRepository
) -> None:
    client = TestClient(create_app(container))
    content_repository.items[("fleet", "en")] = [
        ContentItem("title", "Our fleet"),
    ]

    first = client.get("/content/fleet/en?metadata=true")
    second = client.get("/content/fleet/en?metadata=true")

    assert first.status_code == 200
    assert first.headers["Cache-Control"] == CACHE_CONTROL
    assert first.headers["ETag"].startswith('"fleet-en-')
    assert first.headers["ETag"] == second.headers["ETag"]
    assert "Last-Modified" in first.headers
    assert first.json()["content"] == [
        {"key": "title", "value": "Our fleet", "type": "text"}
    ]
    assert first.json()["metadata"]["fromCache"] is False
    assert second.json()["metadata"]["fromCache"] is True


def test_content_by_key(
    container, content_repository: InMemoryContentRepository
) -> None:
    client = TestClient(create_app(container))
    content_repository.items[("home", "es")] = [ContentItem("hero", "Hola")]

    found = client.get("/content/home/pt?key=hero")
    missing = client.get("/content/home/es?key=footer")

    assert found.json()["content"]["value"] == "Hola"
    assert found.headers["Cache-Control"] == CACHE_CONTROL
    assert found.headers["ETag"].startswith('"home-pt-hero-')
    assert "ETag" not in missing.headers
    assert missing.status_code == 404
    assert missing.json()["key"] == "footer"


def _faq(question: str, category: str) -> Faq:
    return Faq(
        id=uuid4(), question=question, answer="Yes.", category=category, sort_order=0
    )


def test_faq_endpoint_modes(
    container, faq_repository: InMemoryFaqRepository
) -> None:
    client = TestClient(create_app(container))
    faq_repository.faqs["en"] = [
        _faq("Do you allow pets?", "travel"),
        _faq("Is catering included?", "services"),
    ]

    listing = client.get("/faqs/en?search=pets")
    grouped = client.get("/faqs/en?grouped=true")
    schema = client.get("/faqs/en?schema=true")
    stats = client.get("/faqs/en?stats=true")

    assert listing.headers["Cache-Control"] == CACHE_CONTROL
    assert listing.headers["ETag"].startswith('"faqs-en-all-pets-')
    assert listing.json()["total"] == 1
    assert listing.json()["searchTerm"] == "pets"
    assert listing.json()["availableCategories"] == ["services", "travel"]
    assert grouped.json()["totalFAQs"] == 2
    assert schema.json()["schema"]["@type"] == "FAQPage"
    assert stats.json()["statistics"]["totalCategories"] == 2
    for response, mode in ((grouped, "grouped"), (schema, "schema"), (stats, "stats")):
        assert response.headers["Cache-Control"] == CACHE_CONTROL
        assert response.headers["ETag"].startswith(f'"faqs-en-{mode}-')


def test_faq_endpoint_falls_back(
    container, faq_repository: InMemoryFaqRepository
) -> None:
    client = TestClient(create_app(container))
    faq_repository.faqs["es"] = [_faq("¿Aceptan mascotas?", "viaje")]

    response = client.get("/faqs/pt")

    assert response.json()["locale"] == "es"
    assert response.json()["fallbackUsed"] is True
