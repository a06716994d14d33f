"""Resend webhook ingestion."""

import hashlib
import hmac
import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID

from charter_broker.domain.emails import WebhookLogEntry
from charter_broker.domain.errors import (
    InternalError,
    UpstreamSignatureError,
    ValidationError,
)
from charter_broker.services.email_delivery import (
    DeliveryOutcome,
    EmailDeliveryTracker,
)

logger = logging.getLogger(__name__)

OUTCOME_PROCESSED = "processed"
OUTCOME_INFORMATIONAL = "informational"
OUTCOME_IGNORED = "ignored"
OUTCOME_UNKNOWN_EVENT = "unknown_event"
OUTCOME_NOT_FOUND = "not_found"
OUTCOME_REJECTED = "rejected"
OUTCOME_INVALID = "invalid"
OUTCOME_ERROR = "error"

_OUTCOMES_BY_DELIVERY = {
    DeliveryOutcome.UPDATED: OUTCOME_PROCESSED,
    DeliveryOutcome.INFORMATIONAL: OUTCOME_INFORMATIONAL,
    DeliveryOutcome.IGNORED: OUTCOME_IGNORED,
    DeliveryOutcome.UNKNOWN_EVENT: OUTCOME_UNKNOWN_EVENT,
}


class WebhookLogRepository(Protocol):
    """Persistence interface for raw webhook audit rows."""

    def create_entry(self, entry: WebhookLogEntry) -> None:
        """Append an audit row."""

    def list_entries(self, since: datetime) -> list[WebhookLogEntry]:
        """Return audit rows received since a timestamp, most recent first."""


@dataclass(frozen=True)
class WebhookResult:
    """Acknowledgement returned to the provider."""

    event_type: str
    email_id: str
    outcome: str
    occurred_at: datetime
    status: str | None = None
    delivery_record_id: UUID | None = None
    warning: str | None = None

    @property
    def processed(self) -> bool:
        return self.outcome == OUTCOME_PROCESSED


@dataclass
class WebhookStatistics:
    """Aggregated webhook activity."""

    hours: int
    total_events: int
    processed: int
    failed: int
    by_event_type: dict[str, int] = field(default_factory=dict)
    by_status: dict[str, int] = field(default_factory=dict)
    recent_errors: list[dict[str, object]] = field(default_factory=list)


def verify_signature(payload: bytes, signature: str | None, secret: str) -> bool:
    """Check an HMAC-SHA256 hex signature over the raw body."""
    if not signature:
        return False
    expected = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    received = signature.strip().removeprefix("sha256=")
    return hmac.compare_digest(expected.encode(), received.encode())


@dataclass
class ResendWebhookService:
    """Verifies, applies, and audits delivery webhooks from Resend."""

    tracker: EmailDeliveryTracker
    log_repository: WebhookLogRepository
    secret: str | None = None
    insecure: bool = False

    def ingest(self, raw_body: bytes, signature: str | None) -> WebhookResult:
        """Process one webhook delivery and return the acknowledgement."""
        received_at = datetime.now(tz=UTC)
        self._check_signature(raw_body, signature, received_at)

        payload = _parse_payload(raw_body)
        event_type, email_id = _required_fields(payload)
        if event_type is None or email_id is None:
            error = "Missing required fields: type or data.email_id"
            logger.warning("Invalid webhook payload", extra={"error": error})
            self._audit_best_effort(
                WebhookLogEntry(
                    event_type=event_type or "unknown",
                    email_id=email_id,
                    outcome=OUTCOME_INVALID,
                    payload=payload if payload is not None else _as_text(raw_body),
                    received_at=received_at,
                    error=error,
                )
            )
            raise ValidationError(error)

        data = payload["data"]
        occurred_at = _parse_timestamp(payload.get("created_at")) or received_at
        try:
            return self._apply(payload, event_type, email_id, data, occurred_at)
        except Exception as exc:
            logger.exception(
                "Webhook processing failed",
                extra={"email_id": email_id, "event_type": event_type},
            )
            self._audit_best_effort(
                WebhookLogEntry(
                    event_type=event_type,
                    email_id=email_id,
                    outcome=OUTCOME_ERROR,
                    payload=payload,
                    received_at=occurred_at,
                    error=f"{type(exc).__name__}: {exc}",
                )
            )
            raise InternalError("Webhook processing failed") from exc

    def statistics(self, hours: int = 24) -> WebhookStatistics:
        """Summarize webhook traffic for the trailing window."""
        since = datetime.now(tz=UTC) - timedelta(hours=hours)
        entries = self.log_repository.list_entries(since)
        stats = WebhookStatistics(
            hours=hours,
            total_events=len(entries),
            processed=0,
            failed=0,
        )
        for entry in entries:
            if entry.outcome == OUTCOME_PROCESSED:
                stats.processed += 1
            elif entry.outcome in {OUTCOME_ERROR, OUTCOME_INVALID, OUTCOME_REJECTED}:
                stats.failed += 1
            stats.by_event_type[entry.event_type] = (
                stats.by_event_type.get(entry.event_type, 0) + 1
            )
            if entry.new_status:
                stats.by_status[entry.new_status] = (
                    stats.by_status.get(entry.new_status, 0) + 1
                )
            if entry.error and len(stats.recent_errors) < 10:  # noqa: PLR2004
                stats.recent_errors.append(
                    {
                        "receivedAt": entry.received_at.isoformat(),
                        "eventType": entry.event_type,
                        "emailId": entry.email_id,
                        "outcome": entry.outcome,
                        "error": entry.error,
                    }
                )
        return stats

    def _check_signature(
        self, raw_body: bytes, signature: str | None, received_at: datetime
    ) -> None:
        if self.secret:
            if verify_signature(raw_body, signature, self.secret):
                return
            error = "Invalid signature"
        elif self.insecure:
            logger.warning("Webhook signature check skipped: insecure mode enabled")
            return
        else:
            error = "Webhook secret not configured"
        logger.error("Rejected webhook", extra={"error": error})
        payload = _parse_payload(raw_body)
        event_type, email_id = _required_fields(payload)
        self._audit_best_effort(
            WebhookLogEntry(
                event_type=event_type or "unknown",
                email_id=email_id,
                outcome=OUTCOME_REJECTED,
                payload=payload if payload is not None else _as_text(raw_body),
                received_at=received_at,
                error=error,
            )
        )
        raise UpstreamSignatureError(error)

    def _apply(
        self,
        payload: dict[str, object],
        event_type: str,
        email_id: str,
        data: dict[str, object],
        occurred_at: datetime,
    ) -> WebhookResult:
        record = self.tracker.find(email_id)
        if record is None:
            warning = f"Email delivery record not found for Resend ID: {email_id}"
            logger.warning(warning)
            self._audit_best_effort(
                WebhookLogEntry(
                    event_type=event_type,
                    email_id=email_id,
                    outcome=OUTCOME_NOT_FOUND,
                    payload=payload,
                    received_at=occurred_at,
                    error=warning,
                )
            )
            return WebhookResult(
                event_type=event_type,
                email_id=email_id,
                outcome=OUTCOME_NOT_FOUND,
                occurred_at=occurred_at,
                warning="Email delivery record not found",
            )

        update = self.tracker.apply_event(
            record, event_type, occurred_at, _error_message(data)
        )
        outcome = _OUTCOMES_BY_DELIVERY[update.outcome]
        error = None
        if update.outcome is DeliveryOutcome.UNKNOWN_EVENT:
            error = f"Unhandled event type: {event_type}"
            logger.warning(error, extra={"email_id": email_id})
        self.log_repository.create_entry(
            WebhookLogEntry(
                event_type=event_type,
                email_id=email_id,
                outcome=outcome,
                payload=payload,
                received_at=occurred_at,
                error=error,
                delivery_record_id=record.id,
                new_status=update.status,
            )
        )
        logger.info(
            "Email delivery event applied",
            extra={
                "email_id": email_id,
                "event_type": event_type,
                "outcome": outcome,
                "status": update.status,
            },
        )
        return WebhookResult(
            event_type=event_type,
            email_id=email_id,
            outcome=outcome,
            occurred_at=occurred_at,
            status=update.status,
            delivery_record_id=record.id,
        )

    def _audit_best_effort(self, entry: WebhookLogEntry) -> None:
        try:
            self.log_repository.create_entry(entry)
        except Exception:
            logger.exception("Failed to log webhook event")


def _parse_payload(raw_body: bytes) -> dict[str, object] | None:
    try:
        payload = json.loads(raw_body)
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _required_fields(
    payload: dict[str, object] | None,
) -> tuple[str | None, str | None]:
    if payload is None:
        return None, None
    event_type = payload.get("type")
    data = payload.get("data")
    email_id = data.get("email_id") if isinstance(data, dict) else None
    return (
        event_type if isinstance(event_type, str) and event_type else None,
        email_id if isinstance(email_id, str) and email_id else None,
    )


def _parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _error_message(data: dict[str, object]) -> str | None:
    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return message if isinstance(message, str) else None
    return None


def _as_text(raw_body: bytes) -> str:
    return raw_body.decode("utf-8", errors="replace")
