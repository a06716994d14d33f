"""Supabase repository for webhook audit rows."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from charter_broker.adapters.supabase_rows import (
    optional_text,
    parse_datetime,
    parse_optional_uuid,
)
from charter_broker.domain.emails import WebhookLogEntry
from charter_broker.services.webhooks import WebhookLogRepository


@dataclass
class SupabaseWebhookLogRepository(WebhookLogRepository):
    """Supabase-backed webhook_events table."""

    client: Client

    def create_entry(self, entry: WebhookLogEntry) -> None:
        """Append an audit row."""
        self.client.table("webhook_events").insert(
            {
                "provider": "resend",
                "event_type": entry.event_type,
                "email_id": entry.email_id,
                "outcome": entry.outcome,
                "payload": entry.payload,
                "received_at": entry.received_at.isoformat(),
                "error": entry.error,
                "delivery_record_id": str(entry.delivery_record_id)
                if entry.delivery_record_id
                else None,
                "new_status": entry.new_status,
            }
        ).execute()

    def list_entries(self, since: datetime) -> list[WebhookLogEntry]:
        """Return audit rows received since a timestamp, most recent first."""
        response = (
            self.client.table("webhook_events")
            .select("*")
            .eq("provider", "resend")
            .gte("received_at", since.isoformat())
            .order("received_at", desc=True)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]


def _parse_entry(row: dict[str, object]) -> WebhookLogEntry:
    return WebhookLogEntry(
        event_type=str(row.get("event_type") or "unknown"),
        email_id=optional_text(row.get("email_id")),
        outcome=str(row["outcome"]),
        payload=row.get("payload"),
        received_at=parse_datetime(row.get("received_at")),
        error=optional_text(row.get("error")),
        delivery_record_id=parse_optional_uuid(row.get("delivery_record_id")),
        new_status=optional_text(row.get("new_status")),
    )
