"""Customer-submitted quote requests and contact forms."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class QuoteRequest:
    """A charter trip request submitted through the quote form."""

    id: UUID
    service_type: str
    full_name: str
    email: str
    phone: str | None
    passengers: int
    origin: str
    destination: str
    departure_date: str
    departure_time: str | None
    locale: str
    created_at: datetime
    updated_at: datetime
    standard_bags: int = 0
    special_items: str | None = None
    additional_services: list[str] = field(default_factory=list)
    comments: str | None = None
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None


@dataclass(frozen=True)
class ContactForm:
    """A general inquiry submitted through the contact form."""

    id: UUID
    full_name: str
    email: str
    phone: str | None
    subject: str | None
    message: str
    contact_via_whatsapp: bool
    locale: str
    created_at: datetime
