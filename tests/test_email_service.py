"""Tests for outbound email sending."""

import asyncio

from charter_broker.services.email import EmailService
from charter_broker.services.email_delivery import EmailDeliveryTracker
from tests.conftest import (
    FakeEmailClient,
    InMemoryEmailDeliveryRepository,
    make_contact,
    make_quote,
)


def test_send_marks_record_sent(
    email_service: EmailService,
    email_client: FakeEmailClient,
    delivery_repository: InMemoryEmailDeliveryRepository,
) -> None:
    record = asyncio.run(
        email_service.send("client@example.com", "Hello", "Body", "quote_confirmation")
    )

    assert record.status == "sent"
    assert record.provider_message_id == "re_1"
    assert email_client.sent[0]["to"] == ["client@example.com"]
    assert delivery_repository.records[record.id].status == "sent"


def test_send_failure_marks_record_failed(
    email_service: EmailService,
    email_client: FakeEmailClient,
    delivery_repository: InMemoryEmailDeliveryRepository,
) -> None:
    email_client.fail = True

    record = asyncio.run(
        email_service.send("client@example.com", "Hello", "Body", "quote_confirmation")
    )

    assert record.status == "failed"
    assert record.error_message == "RuntimeError: provider unavailable"
    assert delivery_repository.records[record.id].failed_at is not None


def test_missing_client_records_failure(
    tracker: EmailDeliveryTracker,
    delivery_repository: InMemoryEmailDeliveryRepository,
) -> None:
    service = EmailService(
        tracker=tracker,
        client=None,
        sender="noreply@fly-fleet.com",
        business_email="ops@fly-fleet.com",
    )

    record = asyncio.run(service.send("a@example.com", "Hi", "Body", "quote"))

    assert record.status == "failed"
    assert record.error_message == "Email client not configured"


def test_quote_notification_is_localized_and_linked(
    email_service: EmailService,
    email_client: FakeEmailClient,
) -> None:
    quote = make_quote(locale="en", additional_services=["premium_catering"])

    record = asyncio.run(email_service.send_quote_notification(quote))

    assert record.quote_request_id == quote.id
    assert record.email_type == "quote_notification"
    sent = email_client.sent[0]
    assert sent["to"] == [email_service.business_email]
    assert sent["subject"] == (
        "New quote request – Buenos Aires-Punta del Este / 2026-12-20"
    )
    assert "premium_catering" in str(sent["text"])


def test_quote_confirmation_falls_back_to_spanish(
    email_service: EmailService,
    email_client: FakeEmailClient,
) -> None:
    quote = make_quote(locale="fr")

    asyncio.run(email_service.send_quote_confirmation(quote))

    sent = email_client.sent[0]
    assert sent["to"] == ["ana@example.com"]
    assert sent["subject"] == "Confirmación de cotización recibida"
    assert str(sent["text"]).startswith("Hola Ana Gómez")


def test_contact_notification(
    email_service: EmailService,
    email_client: FakeEmailClient,
) -> None:
    contact = make_contact(locale="pt", subject=None)

    record = asyncio.run(email_service.send_contact_notification(contact))

    assert record.contact_form_id == contact.id
    assert email_client.sent[0]["subject"] == "Nova consulta – John Smith"
