"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from charter_broker.adapters.recaptcha_client import CaptchaClient
from charter_broker.adapters.resend_client import EmailClient
from charter_broker.config import Settings
from charter_broker.containers import AppContainer
from charter_broker.domain.airports import Airport
from charter_broker.domain.content import ContentItem, Faq
from charter_broker.domain.emails import EmailDeliveryRecord, WebhookLogEntry
from charter_broker.domain.inquiries import ContactForm, QuoteRequest
from charter_broker.domain.payments import Payment, PaymentMethod, Refund
from charter_broker.domain.status_events import StatusChangeEvent
from charter_broker.domain.statuses import DeliveryStatus, EntityType
from charter_broker.domain.whatsapp import WhatsAppClick
from charter_broker.services.airports import AirportRepository, AirportService
from charter_broker.services.captcha import CaptchaVerifier
from charter_broker.services.contacts import ContactRepository, ContactService
from charter_broker.services.content import ContentRepository, ContentService
from charter_broker.services.email import EmailService
from charter_broker.services.email_delivery import (
    EmailDeliveryRepository,
    EmailDeliveryTracker,
)
from charter_broker.services.faqs import FaqRepository, FaqService
from charter_broker.services.payments import PaymentRepository, PaymentService
from charter_broker.services.quotes import QuoteRepository, QuoteService
from charter_broker.services.rate_limit import InMemoryRateLimiter
from charter_broker.services.status_log import StatusChangeLog, StatusEventRepository
from charter_broker.services.webhooks import ResendWebhookService, WebhookLogRepository
from charter_broker.services.whatsapp import WhatsAppClickRepository, WhatsAppService

WEBHOOK_SECRET = "whsec_test"


def _now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class InMemoryStatusEventRepository(StatusEventRepository):
    """In-memory status event log for tests."""

    events: list[StatusChangeEvent] = field(default_factory=list)

    def append_event(  # noqa: PLR0913
        self,
        entity_type: EntityType,
        entity_id: UUID,
        from_status: str,
        to_status: str,
        actor_email: str,
        note: str | None,
        ip_address: str | None,
        user_agent: str | None,
    ) -> StatusChangeEvent:
        event = StatusChangeEvent(
            id=uuid4(),
            entity_type=entity_type,
            entity_id=entity_id,
            from_status=from_status,
            to_status=to_status,
            actor_email=actor_email,
            note=note,
            changed_at=_now() + timedelta(microseconds=len(self.events)),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.events.append(event)
        return event

    def list_events(
        self, entity_type: EntityType, entity_id: UUID
    ) -> list[StatusChangeEvent]:
        matching = [
            event
            for event in self.events
            if event.entity_type == entity_type and event.entity_id == entity_id
        ]
        return list(reversed(matching))

    def latest_event(
        self, entity_type: EntityType, entity_id: UUID
    ) -> StatusChangeEvent | None:
        events = self.list_events(entity_type, entity_id)
        return events[0] if events else None


@dataclass
class InMemoryQuoteRepository(QuoteRepository):
    """In-memory quote repository for tests."""

    quotes: dict[UUID, QuoteRequest] = field(default_factory=dict)

    def create_quote(self, payload: dict[str, object]) -> QuoteRequest:
        now = _now()
        quote = QuoteRequest(id=uuid4(), created_at=now, updated_at=now, **payload)
        self.quotes[quote.id] = quote
        return quote

    def get_quote(self, quote_id: UUID) -> QuoteRequest | None:
        return self.quotes.get(quote_id)

    def list_quotes(self, limit: int, offset: int) -> list[QuoteRequest]:
        ordered = sorted(
            self.quotes.values(), key=lambda quote: quote.created_at, reverse=True
        )
        return ordered[offset : offset + limit]

    def list_quote_ids(self) -> list[UUID]:
        return list(self.quotes)

    def list_quotes_created_before(self, cutoff: datetime) -> list[QuoteRequest]:
        return sorted(
            (quote for quote in self.quotes.values() if quote.created_at < cutoff),
            key=lambda quote: quote.created_at,
        )

    def touch_quote(self, quote_id: UUID, updated_at: datetime) -> None:
        self.quotes[quote_id] = replace(self.quotes[quote_id], updated_at=updated_at)


@dataclass
class InMemoryContactRepository(ContactRepository):
    """In-memory contact repository for tests."""

    contacts: dict[UUID, ContactForm] = field(default_factory=dict)

    def create_contact(self, payload: dict[str, object]) -> ContactForm:
        contact = ContactForm(id=uuid4(), created_at=_now(), **payload)
        self.contacts[contact.id] = contact
        return contact

    def get_contact(self, contact_id: UUID) -> ContactForm | None:
        return self.contacts.get(contact_id)

    def list_contacts(self, limit: int, offset: int) -> list[ContactForm]:
        ordered = sorted(
            self.contacts.values(), key=lambda item: item.created_at, reverse=True
        )
        return ordered[offset : offset + limit]

    def list_contact_ids(self) -> list[UUID]:
        return list(self.contacts)


_PAYMENT_COLUMNS = {
    "payment_status": "status",
    "transaction_reference": "transaction_reference",
    "notes": "notes",
    "paid_at": "paid_at",
    "processed_by": "processed_by",
}


@dataclass
class InMemoryPaymentRepository(PaymentRepository):
    """In-memory payment repository for tests."""

    payments: dict[UUID, Payment] = field(default_factory=dict)

    def create_payment(self, payload: dict[str, object]) -> Payment:
        now = _now()
        payment = Payment(
            id=uuid4(),
            quote_request_id=UUID(str(payload["quote_request_id"])),
            amount=Decimal(str(payload["amount"])),
            currency=str(payload["currency"]),
            method=PaymentMethod(str(payload["payment_method"])),
            status=str(payload["payment_status"]),
            created_at=now,
            updated_at=now,
            transaction_reference=payload.get("transaction_reference"),
            receipt_url=payload.get("receipt_url"),
            notes=payload.get("notes"),
            processed_by=payload.get("processed_by"),
        )
        self.payments[payment.id] = payment
        return payment

    def get_payment(self, payment_id: UUID) -> Payment | None:
        return self.payments.get(payment_id)

    def update_payment(self, payment_id: UUID, changes: dict[str, object]) -> Payment:
        payment = self.payments[payment_id]
        fields = {
            _PAYMENT_COLUMNS[key]: value
            for key, value in changes.items()
            if key in _PAYMENT_COLUMNS
        }
        if "refund_amount" in changes:
            fields["refund"] = Refund(
                amount=Decimal(str(changes["refund_amount"])),
                reason=str(changes["refund_reason"]),
                refunded_at=changes["refunded_at"],
            )
        updated = replace(payment, updated_at=_now(), **fields)
        self.payments[payment_id] = updated
        return updated

    def list_payments(  # noqa: PLR0913
        self,
        limit: int,
        offset: int,
        status: str | None,
        method: str | None,
        quote_request_id: UUID | None,
    ) -> list[Payment]:
        matching = [
            payment
            for payment in self.payments.values()
            if (status is None or payment.status == status)
            and (method is None or payment.method == method)
            and (
                quote_request_id is None
                or payment.quote_request_id == quote_request_id
            )
        ]
        return matching[offset : offset + limit]

    def list_all_payments(self) -> list[Payment]:
        return list(self.payments.values())


@dataclass
class InMemoryEmailDeliveryRepository(EmailDeliveryRepository):
    """In-memory email delivery repository for tests."""

    records: dict[UUID, EmailDeliveryRecord] = field(default_factory=dict)
    updates: list[tuple[UUID, dict[str, object]]] = field(default_factory=list)
    fail_updates: bool = False

    def create_delivery(  # noqa: PLR0913
        self,
        recipient_email: str,
        subject: str,
        email_type: str,
        quote_request_id: UUID | None,
        contact_form_id: UUID | None,
    ) -> EmailDeliveryRecord:
        record = EmailDeliveryRecord(
            id=uuid4(),
            provider_message_id=None,
            recipient_email=recipient_email,
            subject=subject,
            email_type=email_type,
            status=DeliveryStatus.PENDING.value,
            created_at=_now(),
            quote_request_id=quote_request_id,
            contact_form_id=contact_form_id,
        )
        self.records[record.id] = record
        return record

    def add_sent(
        self, provider_message_id: str, **overrides: object
    ) -> EmailDeliveryRecord:
        record = self.create_delivery(
            "client@example.com", "Subject", "quote_confirmation", None, None
        )
        changes: dict[str, object] = {
            "provider_message_id": provider_message_id,
            "status": DeliveryStatus.SENT.value,
            "sent_at": _now(),
        }
        changes.update(overrides)
        record = replace(record, **changes)
        self.records[record.id] = record
        return record

    def get_by_provider_id(
        self, provider_message_id: str
    ) -> EmailDeliveryRecord | None:
        for record in self.records.values():
            if record.provider_message_id == provider_message_id:
                return record
        return None

    def update_delivery(self, delivery_id: UUID, changes: dict[str, object]) -> None:
        if self.fail_updates:
            raise RuntimeError("database unavailable")
        self.updates.append((delivery_id, changes))
        self.records[delivery_id] = replace(self.records[delivery_id], **changes)

    def list_deliveries(self, since: datetime) -> list[EmailDeliveryRecord]:
        return [
            record for record in self.records.values() if record.created_at >= since
        ]

    def list_for_contact(self, contact_form_id: UUID) -> list[EmailDeliveryRecord]:
        return [
            record
            for record in self.records.values()
            if record.contact_form_id == contact_form_id
        ]


@dataclass
class InMemoryWebhookLogRepository(WebhookLogRepository):
    """In-memory webhook audit log for tests."""

    entries: list[WebhookLogEntry] = field(default_factory=list)
    fail_writes: bool = False

    def create_entry(self, entry: WebhookLogEntry) -> None:
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        self.entries.append(entry)

    def list_entries(self, since: datetime) -> list[WebhookLogEntry]:
        return [entry for entry in reversed(self.entries) if entry.received_at >= since]


@dataclass
class InMemoryWhatsAppClickRepository(WhatsAppClickRepository):
    """In-memory WhatsApp click repository for tests."""

    clicks: dict[UUID, WhatsAppClick] = field(default_factory=dict)
    fail_writes: bool = False

    def create_click(self, payload: dict[str, object]) -> WhatsAppClick:
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        click = WhatsAppClick(id=uuid4(), created_at=_now(), **payload)
        self.clicks[click.id] = click
        return click

    def get_click(self, click_id: UUID) -> WhatsAppClick | None:
        return self.clicks.get(click_id)

    def list_clicks(self, since: datetime) -> list[WhatsAppClick]:
        return [click for click in self.clicks.values() if click.created_at >= since]


@dataclass
class InMemoryContentRepository(ContentRepository):
    """In-memory page content for tests."""

    items: dict[tuple[str, str], list[ContentItem]] = field(default_factory=dict)
    updated_at: datetime = field(default_factory=_now)
    calls: list[tuple[str, str]] = field(default_factory=list)

    def list_page_items(self, page_slug: str, locale: str) -> list[ContentItem]:
        self.calls.append((page_slug, locale))
        return sorted(self.items.get((page_slug, locale), []), key=lambda i: i.key)

    def list_published_index(self) -> list[tuple[str, str, datetime]]:
        return [
            (slug, locale, self.updated_at)
            for (slug, locale), items in self.items.items()
            for _ in items
        ]


@dataclass
class InMemoryFaqRepository(FaqRepository):
    """In-memory FAQs for tests."""

    faqs: dict[str, list[Faq]] = field(default_factory=dict)
    calls: int = 0

    def list_faqs(
        self,
        locale: str,
        category: str | None,
        search: str | None,
        limit: int | None,
    ) -> list[Faq]:
        self.calls += 1
        results = [
            faq
            for faq in self.faqs.get(locale, [])
            if (category is None or faq.category == category)
            and (
                search is None
                or search.lower() in faq.question.lower()
                or search.lower() in faq.answer.lower()
            )
        ]
        results.sort(key=lambda faq: (faq.category, faq.sort_order, faq.question))
        return results if limit is None else results[:limit]

    def list_categories(self, locale: str) -> list[str]:
        return sorted({faq.category for faq in self.faqs.get(locale, [])})

    def count_by_locale(self) -> dict[str, int]:
        return {locale: len(faqs) for locale, faqs in self.faqs.items() if faqs}


AIRPORTS = [
    Airport("EZE", "Ministro Pistarini", "Buenos Aires", "AR", "SA", True),
    Airport("AEP", "Jorge Newbery Airfield", "Buenos Aires", "AR", "SA", True),
    Airport("PDP", "Capitan Corbeta CA Curbelo", "Punta del Este", "UY", "SA"),
    Airport("MVD", "Carrasco International", "Montevideo", "UY", "SA", True),
    Airport("MDZ", "El Plumerillo", "Mendoza", "AR", "SA"),
    Airport("GRU", "Guarulhos International", "Sao Paulo", "BR", "SA", True),
    Airport("MIA", "Miami International", "Miami", "US", "NA", True),
]


@dataclass
class InMemoryAirportRepository(AirportRepository):
    """In-memory airports table for tests."""

    airports: dict[str, Airport] = field(
        default_factory=lambda: {airport.code: airport for airport in AIRPORTS}
    )

    def get_airport(self, code: str) -> Airport | None:
        return self.airports.get(code)

    def search_airports(self, query: str, limit: int) -> list[Airport]:
        term = query.lower()
        return [
            airport
            for airport in self.airports.values()
            if any(
                term in value.lower()
                for value in (airport.code, airport.name, airport.city, airport.country)
            )
        ][:limit]


@dataclass
class FakeCaptchaClient(CaptchaClient):
    """Records verification calls and returns a canned verdict."""

    response: dict[str, object] = field(
        default_factory=lambda: {
            "success": True,
            "score": 0.9,
            "action": "quote_request",
        }
    )
    fail: bool = False
    calls: list[tuple[str, str | None]] = field(default_factory=list)

    async def verify(self, token: str, remote_ip: str | None) -> dict[str, object]:
        self.calls.append((token, remote_ip))
        if self.fail:
            raise RuntimeError("siteverify unavailable")
        return self.response


@dataclass
class FakeEmailClient(EmailClient):
    """Fake email client that records sent messages."""

    sent: list[dict[str, object]] = field(default_factory=list)
    fail: bool = False

    async def send_email(
        self, sender: str, to: list[str], subject: str, text: str
    ) -> str:
        if self.fail:
            raise RuntimeError("provider unavailable")
        self.sent.append({"from": sender, "to": to, "subject": subject, "text": text})
        return f"re_{len(self.sent)}"


class FakeClock:
    """Settable clock for TTL and rate window tests."""

    def __init__(self) -> None:
        self.now = datetime(2026, 5, 1, 8, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_quote(**overrides: object) -> QuoteRequest:
    now = _now()
    values: dict[str, object] = {
        "id": uuid4(),
        "service_type": "charter",
        "full_name": "Ana Gómez",
        "email": "ana@example.com",
        "phone": "+5491100000000",
        "passengers": 4,
        "origin": "EZE",
        "destination": "PDP",
        "departure_date": "2026-12-20",
        "departure_time": "10:00",
        "locale": "es",
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    return QuoteRequest(**values)


def make_contact(**overrides: object) -> ContactForm:
    values: dict[str, object] = {
        "id": uuid4(),
        "full_name": "John Smith",
        "email": "john@example.com",
        "phone": None,
        "subject": "Fleet question",
        "message": "Do you fly to Aspen?",
        "contact_via_whatsapp": False,
        "locale": "en",
        "created_at": _now(),
    }
    values.update(overrides)
    return ContactForm(**values)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        admin_token="admin-token",
        admin_emails="admin@fly-fleet.com,ops@fly-fleet.com",
        resend_api_key="re_test_key",
        resend_webhook_secret=WEBHOOK_SECRET,
    )


@pytest.fixture
def status_repository() -> InMemoryStatusEventRepository:
    return InMemoryStatusEventRepository()


@pytest.fixture
def status_log(status_repository: InMemoryStatusEventRepository) -> StatusChangeLog:
    return StatusChangeLog(status_repository)


@pytest.fixture
def quote_repository() -> InMemoryQuoteRepository:
    return InMemoryQuoteRepository()


@pytest.fixture
def contact_repository() -> InMemoryContactRepository:
    return InMemoryContactRepository()


@pytest.fixture
def payment_repository() -> InMemoryPaymentRepository:
    return InMemoryPaymentRepository()


@pytest.fixture
def delivery_repository() -> InMemoryEmailDeliveryRepository:
    return InMemoryEmailDeliveryRepository()


@pytest.fixture
def webhook_log_repository() -> InMemoryWebhookLogRepository:
    return InMemoryWebhookLogRepository()


@pytest.fixture
def click_repository() -> InMemoryWhatsAppClickRepository:
    return InMemoryWhatsAppClickRepository()


@pytest.fixture
def content_repository() -> InMemoryContentRepository:
    return InMemoryContentRepository()


@pytest.fixture
def faq_repository() -> InMemoryFaqRepository:
    return InMemoryFaqRepository()


@pytest.fixture
def airport_repository() -> InMemoryAirportRepository:
    return InMemoryAirportRepository()


@pytest.fixture
def email_client() -> FakeEmailClient:
    return FakeEmailClient()


@pytest.fixture
def tracker(
    delivery_repository: InMemoryEmailDeliveryRepository,
) -> EmailDeliveryTracker:
    return EmailDeliveryTracker(delivery_repository)


@pytest.fixture
def email_service(
    settings: Settings, tracker: EmailDeliveryTracker, email_client: FakeEmailClient
) -> EmailService:
    return EmailService(
        tracker=tracker,
        client=email_client,
        sender=settings.email_from,
        business_email=settings.business_email,
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    status_log: StatusChangeLog,
    quote_repository: InMemoryQuoteRepository,
    contact_repository: InMemoryContactRepository,
    payment_repository: InMemoryPaymentRepository,
    delivery_repository: InMemoryEmailDeliveryRepository,
    webhook_log_repository: InMemoryWebhookLogRepository,
    click_repository: InMemoryWhatsAppClickRepository,
    content_repository: InMemoryContentRepository,
    faq_repository: InMemoryFaqRepository,
    tracker: EmailDeliveryTracker,
    airport_repository: InMemoryAirportRepository,
    email_service: EmailService,
) -> AppContainer:
    airport_service = AirportService(airport_repository)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        status_log=status_log,
        airport_service=airport_service,
        captcha_verifier=CaptchaVerifier(client=None),
        quote_service=QuoteService(
            repository=quote_repository,
            status_log=status_log,
            airports=airport_service,
            email_service=email_service,
        ),
        contact_service=ContactService(
            repository=contact_repository,
            status_log=status_log,
            delivery_repository=delivery_repository,
            email_service=email_service,
        ),
        payment_service=PaymentService(
            repository=payment_repository,
            quote_repository=quote_repository,
            status_log=status_log,
        ),
        delivery_tracker=tracker,
        webhook_service=ResendWebhookService(
            tracker=tracker,
            log_repository=webhook_log_repository,
            secret=settings.resend_webhook_secret,
        ),
        whatsapp_service=WhatsAppService(
            repository=click_repository,
            business_phone=settings.whatsapp_business_phone,
        ),
        content_service=ContentService(repository=content_repository),
        faq_service=FaqService(repository=faq_repository),
        whatsapp_rate_limiter=InMemoryRateLimiter(
            limit=settings.whatsapp_rate_limit,
            window_seconds=settings.whatsapp_rate_window_seconds,
        ),
        intake_rate_limiter=InMemoryRateLimiter(
            limit=settings.intake_rate_limit,
            window_seconds=settings.intake_rate_window_seconds,
        ),
        close_resources=close_resources,
    )
