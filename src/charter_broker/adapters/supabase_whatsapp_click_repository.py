"""Supabase repository for WhatsApp click attribution."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from charter_broker.adapters.supabase_rows import optional_text, parse_datetime
from charter_broker.domain.whatsapp import WhatsAppClick
from charter_broker.services.whatsapp import WhatsAppClickRepository


@dataclass
class SupabaseWhatsAppClickRepository(WhatsAppClickRepository):
    """Supabase-backed whatsapp_clicks table."""

    client: Client

    def create_click(self, payload: dict[str, object]) -> WhatsAppClick:
        """Insert a click record and return it."""
        response = self.client.table("whatsapp_clicks").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to store WhatsApp click")
        return _parse_click(response.data[0])

    def get_click(self, click_id: UUID) -> WhatsAppClick | None:
        """Return a click by id, if present."""
        response = (
            self.client.table("whatsapp_clicks")
            .select("*")
            .eq("id", str(click_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_click(response.data[0])

    def list_clicks(self, since: datetime) -> list[WhatsAppClick]:
        """Return clicks recorded since a timestamp."""
        response = (
            self.client.table("whatsapp_clicks")
            .select("*")
            .gte("created_at", since.isoformat())
            .execute()
        )
        return [_parse_click(row) for row in response.data or []]


def _parse_click(row: dict[str, object]) -> WhatsAppClick:
    return WhatsAppClick(
        id=UUID(str(row["id"])),
        locale=str(row.get("locale") or "es"),
        created_at=parse_datetime(row.get("created_at")),
        session_id=optional_text(row.get("session_id")),
        page_source=optional_text(row.get("page_source")),
        utm_source=optional_text(row.get("utm_source")),
        utm_medium=optional_text(row.get("utm_medium")),
        utm_campaign=optional_text(row.get("utm_campaign")),
        ip_address=optional_text(row.get("ip_address")),
    )
