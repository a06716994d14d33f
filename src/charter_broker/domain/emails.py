"""Email delivery and webhook audit models."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class EmailDeliveryRecord:
    """Delivery state of one outbound email."""

    id: UUID
    provider_message_id: str | None
    recipient_email: str
    subject: str
    email_type: str
    status: str
    created_at: datetime
    quote_request_id: UUID | None = None
    contact_form_id: UUID | None = None
    sent_at: datetime | None = None
    delivered_at: datetime | None = None
    bounced_at: datetime | None = None
    failed_at: datetime | None = None
    error_message: str | None = None

    @property
    def is_terminal(self) -> bool:
        """Return true once the record reached an absorbing state."""
        return self.bounced_at is not None or self.failed_at is not None


@dataclass(frozen=True)
class WebhookLogEntry:
    """Audit row for one inbound provider webhook."""

    event_type: str
    email_id: str | None
    outcome: str
    payload: object
    received_at: datetime
    error: str | None = None
    delivery_record_id: UUID | None = None
    new_status: str | None = None
