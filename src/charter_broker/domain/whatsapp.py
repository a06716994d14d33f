"""WhatsApp deep link models."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class WhatsAppLinkRequest:
    """Data interpolated into a WhatsApp message template."""

    type: str
    locale: str
    page_source: str | None = None
    session_id: str | None = None
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    email: str | None = None
    phone: str | None = None
    full_name: str | None = None
    origin: str | None = None
    destination: str | None = None
    date: str | None = None
    time: str | None = None
    passengers: int | None = None
    service_type: str | None = None
    bags: int = 0
    special_items: str | None = None
    additional_services: list[str] = field(default_factory=list)
    comments: str | None = None
    subject: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class WhatsAppClick:
    """Attribution record stored for each generated link."""

    id: UUID
    locale: str
    created_at: datetime
    session_id: str | None = None
    page_source: str | None = None
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    ip_address: str | None = None


@dataclass(frozen=True)
class WhatsAppLink:
    """Generated link returned to the caller."""

    click_id: UUID
    whatsapp_url: str
    message: str
