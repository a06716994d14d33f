"""Supabase repository for contact forms."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from charter_broker.adapters.supabase_rows import optional_text, parse_datetime
from charter_broker.domain.inquiries import ContactForm
from charter_broker.services.contacts import ContactRepository


@dataclass
class SupabaseContactRepository(ContactRepository):
    """Supabase-backed contact_forms table."""

    client: Client

    def create_contact(self, payload: dict[str, object]) -> ContactForm:
        """Insert a contact form and return it."""
        response = self.client.table("contact_forms").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create contact form")
        return _parse_contact(response.data[0])

    def get_contact(self, contact_id: UUID) -> ContactForm | None:
        """Return a contact form by id, if present."""
        response = (
            self.client.table("contact_forms")
            .select("*")
            .eq("id", str(contact_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_contact(response.data[0])

    def list_contacts(self, limit: int, offset: int) -> list[ContactForm]:
        """Return contact forms, newest first."""
        response = (
            self.client.table("contact_forms")
            .select("*")
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return [_parse_contact(row) for row in response.data or []]

    def list_contact_ids(self) -> list[UUID]:
        """Return the ids of every contact form."""
        response = self.client.table("contact_forms").select("id").execute()
        return [UUID(str(row["id"])) for row in response.data or []]


def _parse_contact(row: dict[str, object]) -> ContactForm:
    return ContactForm(
        id=UUID(str(row["id"])),
        full_name=str(row["full_name"]),
        email=str(row["email"]),
        phone=optional_text(row.get("phone")),
        subject=optional_text(row.get("subject")),
        message=str(row.get("message") or ""),
        contact_via_whatsapp=bool(row.get("contact_via_whatsapp")),
        locale=str(row.get("locale") or "es"),
        created_at=parse_datetime(row.get("created_at")),
    )
