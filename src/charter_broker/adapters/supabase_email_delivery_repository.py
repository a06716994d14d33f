"""Supabase repository for email delivery records."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from charter_broker.adapters.supabase_rows import (
    optional_text,
    parse_datetime,
    parse_optional_datetime,
    parse_optional_uuid,
    serialize_changes,
)
from charter_broker.domain.emails import EmailDeliveryRecord
from charter_broker.domain.statuses import DeliveryStatus
from charter_broker.services.email_delivery import EmailDeliveryRepository


@dataclass
class SupabaseEmailDeliveryRepository(EmailDeliveryRepository):
    """Supabase-backed email_deliveries table."""

    client: Client

    def create_delivery(  # noqa: PLR0913
        self,
        recipient_email: str,
        subject: str,
        email_type: str,
        quote_request_id: UUID | None,
        contact_form_id: UUID | None,
    ) -> EmailDeliveryRecord:
        """Create a pending delivery record and return it."""
        response = (
            self.client.table("email_deliveries")
            .insert(
                {
                    "recipient_email": recipient_email,
                    "subject": subject,
                    "email_type": email_type,
                    "status": DeliveryStatus.PENDING.value,
                    "quote_request_id": str(quote_request_id)
                    if quote_request_id
                    else None,
                    "contact_form_id": str(contact_form_id)
                    if contact_form_id
                    else None,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create email delivery record")
        return _parse_delivery(response.data[0])

    def get_by_provider_id(
        self, provider_message_id: str
    ) -> EmailDeliveryRecord | None:
        """Return the record for a provider message id, if present."""
        response = (
            self.client.table("email_deliveries")
            .select("*")
            .eq("provider_message_id", provider_message_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_delivery(response.data[0])

    def update_delivery(self, delivery_id: UUID, changes: dict[str, object]) -> None:
        """Apply field changes to a delivery record."""
        self.client.table("email_deliveries").update(
            serialize_changes(changes)
        ).eq("id", str(delivery_id)).execute()

    def list_deliveries(self, since: datetime) -> list[EmailDeliveryRecord]:
        """Return delivery records created since a timestamp."""
        response = (
            self.client.table("email_deliveries")
            .select("*")
            .gte("created_at", since.isoformat())
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_delivery(row) for row in response.data or []]

    def list_for_contact(self, contact_form_id: UUID) -> list[EmailDeliveryRecord]:
        """Return delivery records linked to a contact form."""
        response = (
            self.client.table("email_deliveries")
            .select("*")
            .eq("contact_form_id", str(contact_form_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_delivery(row) for row in response.data or []]


def _parse_delivery(row: dict[str, object]) -> EmailDeliveryRecord:
    return EmailDeliveryRecord(
        id=UUID(str(row["id"])),
        provider_message_id=optional_text(row.get("provider_message_id")),
        recipient_email=str(row["recipient_email"]),
        subject=str(row.get("subject") or ""),
        email_type=str(row.get("email_type") or ""),
        status=str(row.get("status") or DeliveryStatus.PENDING.value),
        created_at=parse_datetime(row.get("created_at")),
        quote_request_id=parse_optional_uuid(row.get("quote_request_id")),
        contact_form_id=parse_optional_uuid(row.get("contact_form_id")),
        sent_at=parse_optional_datetime(row.get("sent_at")),
        delivered_at=parse_optional_datetime(row.get("delivered_at")),
        bounced_at=parse_optional_datetime(row.get("bounced_at")),
        failed_at=parse_optional_datetime(row.get("failed_at")),
        error_message=optional_text(row.get("error_message")),
    )
