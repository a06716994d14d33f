"""Pydantic models for request bodies."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

IATA_CODE = r"^[A-Za-z]{3}$"


class CamelModel(BaseModel):
    """Accepts camelCase aliases as well as field names."""

    model_config = ConfigDict(populate_by_name=True)


class QuoteSubmission(CamelModel):
    """Quote form payload."""

    service_type: str = Field(alias="serviceType", min_length=1)
    full_name: str = Field(alias="fullName", min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone: str | None = None
    passengers: int = Field(ge=1)
    origin: str = Field(pattern=IATA_CODE)
    destination: str = Field(pattern=IATA_CODE)
    departure_date: str = Field(alias="departureDate", min_length=1)
    departure_time: str | None = Field(default=None, alias="departureTime")
    standard_bags: int = Field(default=0, alias="standardBags", ge=0)
    special_items: str | None = Field(default=None, alias="specialItems")
    additional_services: list[str] = Field(
        default_factory=list, alias="additionalServices"
    )
    comments: str | None = None
    locale: str = "es"
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    recaptcha_token: str | None = Field(default=None, alias="recaptchaToken")


class ContactSubmission(CamelModel):
    """Contact form payload."""

    full_name: str = Field(alias="fullName", min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone: str | None = None
    subject: str | None = None
    message: str = Field(min_length=1)
    contact_via_whatsapp: bool = Field(default=False, alias="contactViaWhatsapp")
    locale: str = "es"
    recaptcha_token: str | None = Field(default=None, alias="recaptchaToken")


class QuoteStatusUpdate(CamelModel):
    """Status change submitted with body credentials."""

    status: str = Field(min_length=1)
    admin_note: str | None = Field(default=None, alias="adminNote")
    admin_email: str = Field(alias="adminEmail", min_length=1)
    admin_token: str = Field(alias="adminToken", min_length=1)


class StatusChange(CamelModel):
    """Status change submitted by an authenticated admin."""

    status: str = Field(min_length=1)
    note: str | None = None


class BulkStatusChange(CamelModel):
    """Status change applied to several entities."""

    ids: list[UUID] = Field(min_length=1)
    status: str = Field(min_length=1)
    note: str | None = None


class PaymentCreate(CamelModel):
    """New payment for a quote."""

    quote_request_id: UUID = Field(alias="quoteRequestId")
    amount: Decimal = Field(gt=0)
    payment_method: str = Field(alias="paymentMethod")
    currency: str | None = None
    transaction_reference: str | None = Field(
        default=None, alias="transactionReference"
    )
    receipt_url: str | None = Field(default=None, alias="receiptUrl")
    notes: str | None = None


class PaymentStatusChange(CamelModel):
    """Payment lifecycle update."""

    status: str = Field(min_length=1)
    transaction_reference: str | None = Field(
        default=None, alias="transactionReference"
    )
    notes: str | None = None
    paid_at: datetime | None = Field(default=None, alias="paidAt")


class RefundRequest(CamelModel):
    """Refund against a completed payment."""

    amount: Decimal = Field(gt=0)
    reason: str = Field(min_length=1)


class WhatsAppLinkBody(CamelModel):
    """WhatsApp link request; type-specific checks happen in the service."""

    type: str
    locale: str
    page_source: str | None = Field(default=None, alias="pageSource")
    session_id: str | None = Field(default=None, alias="sessionId")
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    email: str | None = None
    phone: str | None = None
    full_name: str | None = Field(default=None, alias="fullName")
    origin: str | None = None
    destination: str | None = None
    date: str | None = None
    time: str | None = None
    passengers: int | None = None
    service_type: str | None = Field(default=None, alias="serviceType")
    bags: int = 0
    special_items: str | None = Field(default=None, alias="specialItems")
    additional_services: list[str] = Field(
        default_factory=list, alias="additionalServices"
    )
    comments: str | None = None
    subject: str | None = None
    message: str | None = None
