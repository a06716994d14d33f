"""Email delivery state machine driven by provider events."""

import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Protocol
from uuid import UUID

from charter_broker.domain.emails import EmailDeliveryRecord
from charter_broker.domain.statuses import DELIVERY_TRANSITIONS, DeliveryStatus

logger = logging.getLogger(__name__)

EVENT_STATUS_MAP: dict[str, DeliveryStatus] = {
    "email.sent": DeliveryStatus.SENT,
    "email.delivered": DeliveryStatus.DELIVERED,
    "email.bounced": DeliveryStatus.BOUNCED,
    "email.delivery_failed": DeliveryStatus.FAILED,
    "email.complained": DeliveryStatus.COMPLAINED,
}

INFORMATIONAL_EVENTS = frozenset(
    {"email.opened", "email.clicked", "email.delivery_delayed"}
)

_TIMESTAMP_FIELDS: dict[DeliveryStatus, str] = {
    DeliveryStatus.SENT: "sent_at",
    DeliveryStatus.DELIVERED: "delivered_at",
    DeliveryStatus.BOUNCED: "bounced_at",
    DeliveryStatus.FAILED: "failed_at",
}

_DEFAULT_ERRORS: dict[DeliveryStatus, str] = {
    DeliveryStatus.BOUNCED: "Email bounced",
    DeliveryStatus.FAILED: "Email delivery failed",
    DeliveryStatus.COMPLAINED: "Recipient marked as spam/complaint",
}


class DeliveryOutcome(StrEnum):
    """How a provider event affected a delivery record."""

    UPDATED = "updated"
    INFORMATIONAL = "informational"
    IGNORED = "ignored"
    UNKNOWN_EVENT = "unknown_event"


@dataclass(frozen=True)
class DeliveryUpdate:
    """Planned change to a delivery record."""

    outcome: DeliveryOutcome
    status: str
    changes: dict[str, object] = field(default_factory=dict)


class EmailDeliveryRepository(Protocol):
    """Persistence interface for email delivery records."""

    def create_delivery(  # noqa: PLR0913
        self,
        recipient_email: str,
        subject: str,
        email_type: str,
        quote_request_id: UUID | None,
        contact_form_id: UUID | None,
    ) -> EmailDeliveryRecord:
        """Create a pending delivery record and return it."""

    def get_by_provider_id(
        self, provider_message_id: str
    ) -> EmailDeliveryRecord | None:
        """Return the record for a provider message id, if present."""

    def update_delivery(self, delivery_id: UUID, changes: dict[str, object]) -> None:
        """Apply field changes to a delivery record."""

    def list_deliveries(self, since: datetime) -> list[EmailDeliveryRecord]:
        """Return delivery records created since a timestamp."""

    def list_for_contact(self, contact_form_id: UUID) -> list[EmailDeliveryRecord]:
        """Return delivery records linked to a contact form."""


def plan_update(
    record: EmailDeliveryRecord,
    event_type: str,
    occurred_at: datetime,
    error_message: str | None = None,
) -> DeliveryUpdate:
    """Decide how a provider event changes a record without persisting it."""
    current = record.status
    if event_type in INFORMATIONAL_EVENTS:
        if event_type == "email.delivery_delayed" and not _is_absorbing(record):
            reason = error_message or "Unknown reason"
            return DeliveryUpdate(
                outcome=DeliveryOutcome.INFORMATIONAL,
                status=current,
                changes={"error_message": f"Delivery delayed: {reason}"},
            )
        return DeliveryUpdate(outcome=DeliveryOutcome.INFORMATIONAL, status=current)

    target = EVENT_STATUS_MAP.get(event_type)
    if target is None:
        return DeliveryUpdate(outcome=DeliveryOutcome.UNKNOWN_EVENT, status=current)
    if _is_absorbing(record) or target.value not in DELIVERY_TRANSITIONS.get(
        current, ()
    ):
        return DeliveryUpdate(outcome=DeliveryOutcome.IGNORED, status=current)

    changes: dict[str, object] = {"status": target.value}
    timestamp_field = _TIMESTAMP_FIELDS.get(target)
    if timestamp_field:
        changes[timestamp_field] = occurred_at
    default_error = _DEFAULT_ERRORS.get(target)
    if default_error:
        changes["error_message"] = (
            default_error
            if target is DeliveryStatus.COMPLAINED
            else error_message or default_error
        )
    return DeliveryUpdate(
        outcome=DeliveryOutcome.UPDATED, status=target.value, changes=changes
    )


def _is_absorbing(record: EmailDeliveryRecord) -> bool:
    return record.is_terminal or not DELIVERY_TRANSITIONS.get(record.status, ())


@dataclass
class DeliveryStatistics:
    """Delivery counts over a trailing window."""

    days: int
    total: int
    by_status: dict[str, int]
    delivery_rate: float
    bounce_rate: float


@dataclass
class EmailDeliveryTracker:
    """Tracks outbound email delivery through its lifecycle."""

    repository: EmailDeliveryRepository

    def create(  # noqa: PLR0913
        self,
        recipient_email: str,
        subject: str,
        email_type: str,
        quote_request_id: UUID | None = None,
        contact_form_id: UUID | None = None,
    ) -> EmailDeliveryRecord:
        """Create a pending record before the provider is called."""
        return self.repository.create_delivery(
            recipient_email=recipient_email,
            subject=subject,
            email_type=email_type,
            quote_request_id=quote_request_id,
            contact_form_id=contact_form_id,
        )

    def find(self, provider_message_id: str) -> EmailDeliveryRecord | None:
        """Return the record for a provider message id."""
        return self.repository.get_by_provider_id(provider_message_id)

    def mark_sent(
        self, record: EmailDeliveryRecord, provider_message_id: str
    ) -> EmailDeliveryRecord:
        """Store the provider id once the provider accepted the email."""
        changes: dict[str, object] = {
            "provider_message_id": provider_message_id,
            "status": DeliveryStatus.SENT.value,
            "sent_at": datetime.now(tz=UTC),
        }
        self.repository.update_delivery(record.id, changes)
        return replace(record, **changes)

    def mark_failed(
        self, record: EmailDeliveryRecord, error_message: str
    ) -> EmailDeliveryRecord:
        """Mark a record failed when the provider rejected or was unreachable."""
        changes: dict[str, object] = {
            "status": DeliveryStatus.FAILED.value,
            "failed_at": datetime.now(tz=UTC),
            "error_message": error_message,
        }
        self.repository.update_delivery(record.id, changes)
        return replace(record, **changes)

    def apply_event(
        self,
        record: EmailDeliveryRecord,
        event_type: str,
        occurred_at: datetime,
        error_message: str | None = None,
    ) -> DeliveryUpdate:
        """Apply a provider event, persisting only state-advancing changes."""
        update = plan_update(record, event_type, occurred_at, error_message)
        if update.outcome is DeliveryOutcome.IGNORED:
            logger.warning(
                "Ignoring delivery event for settled record",
                extra={
                    "delivery_id": str(record.id),
                    "event_type": event_type,
                    "status": record.status,
                },
            )
        if update.changes:
            self.repository.update_delivery(record.id, update.changes)
        return update

    def statistics(self, days: int = 30) -> DeliveryStatistics:
        """Return delivery counts and rates for the trailing window."""
        since = datetime.now(tz=UTC) - timedelta(days=days)
        records = self.repository.list_deliveries(since)
        by_status = {status.value: 0 for status in DeliveryStatus}
        for record in records:
            by_status[record.status] = by_status.get(record.status, 0) + 1
        total = len(records)
        return DeliveryStatistics(
            days=days,
            total=total,
            by_status=by_status,
            delivery_rate=_rate(by_status[DeliveryStatus.DELIVERED.value], total),
            bounce_rate=_rate(by_status[DeliveryStatus.BOUNCED.value], total),
        )


def _rate(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(count / total * 100, 1)
