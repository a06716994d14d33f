"""Supabase repository for status change events."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from charter_broker.adapters.supabase_rows import optional_text, parse_datetime
from charter_broker.domain.status_events import StatusChangeEvent
from charter_broker.domain.statuses import EntityType
from charter_broker.services.status_log import StatusEventRepository


@dataclass
class SupabaseStatusEventRepository(StatusEventRepository):
    """Append-only status_events table."""

    client: Client

    def append_event(  # noqa: PLR0913
        self,
        entity_type: EntityType,
        entity_id: UUID,
        from_status: str,
        to_status: str,
        actor_email: str,
        note: str | None,
        ip_address: str | None,
        user_agent: str | None,
    ) -> StatusChangeEvent:
        """Insert a new event and return it."""
        response = (
            self.client.table("status_events")
            .insert(
                {
                    "entity_type": entity_type.value,
                    "entity_id": str(entity_id),
                    "from_status": from_status,
                    "to_status": to_status,
                    "actor_email": actor_email,
                    "note": note,
                    "ip_address": ip_address,
                    "user_agent": user_agent,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to record status change")
        return _parse_event(response.data[0])

    def list_events(
        self, entity_type: EntityType, entity_id: UUID
    ) -> list[StatusChangeEvent]:
        """Return all events for an entity, most recent first."""
        response = (
            self.client.table("status_events")
            .select("*")
            .eq("entity_type", entity_type.value)
            .eq("entity_id", str(entity_id))
            .order("changed_at", desc=True)
            .execute()
        )
        return [_parse_event(row) for row in response.data or []]

    def latest_event(
        self, entity_type: EntityType, entity_id: UUID
    ) -> StatusChangeEvent | None:
        """Return the most recent event for an entity, if any."""
        response = (
            self.client.table("status_events")
            .select("*")
            .eq("entity_type", entity_type.value)
            .eq("entity_id", str(entity_id))
            .order("changed_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_event(response.data[0])


def _parse_event(row: dict[str, object]) -> StatusChangeEvent:
    return StatusChangeEvent(
        id=UUID(str(row["id"])),
        entity_type=EntityType(str(row["entity_type"])),
        entity_id=UUID(str(row["entity_id"])),
        from_status=str(row["from_status"]),
        to_status=str(row["to_status"]),
        actor_email=str(row["actor_email"]),
        note=optional_text(row.get("note")),
        changed_at=parse_datetime(row.get("changed_at")),
        ip_address=optional_text(row.get("ip_address")),
        user_agent=optional_text(row.get("user_agent")),
    )
