"""Supabase repository for quote requests."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from charter_broker.adapters.supabase_rows import (
    optional_text,
    parse_datetime,
    serialize_changes,
)
from charter_broker.domain.inquiries import QuoteRequest
from charter_broker.services.quotes import QuoteRepository


@dataclass
class SupabaseQuoteRepository(QuoteRepository):
    """Supabase-backed quote_requests table."""

    client: Client

    def create_quote(self, payload: dict[str, object]) -> QuoteRequest:
        """Insert a quote request and return it."""
        response = (
            self.client.table("quote_requests")
            .insert(serialize_changes(payload))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create quote request")
        return parse_quote(response.data[0])

    def get_quote(self, quote_id: UUID) -> QuoteRequest | None:
        """Return a quote request by id, if present."""
        response = (
            self.client.table("quote_requests")
            .select("*")
            .eq("id", str(quote_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_quote(response.data[0])

    def list_quotes(self, limit: int, offset: int) -> list[QuoteRequest]:
        """Return quote requests, newest first."""
        response = (
            self.client.table("quote_requests")
            .select("*")
            .order("created_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return [parse_quote(row) for row in response.data or []]

    def list_quote_ids(self) -> list[UUID]:
        """Return the ids of every quote request."""
        response = self.client.table("quote_requests").select("id").execute()
        return [UUID(str(row["id"])) for row in response.data or []]

    def list_quotes_created_before(self, cutoff: datetime) -> list[QuoteRequest]:
        """Return quote requests created before a timestamp, oldest first."""
        response = (
            self.client.table("quote_requests")
            .select("*")
            .lt("created_at", cutoff.isoformat())
            .order("created_at", desc=False)
            .execute()
        )
        return [parse_quote(row) for row in response.data or []]

    def touch_quote(self, quote_id: UUID, updated_at: datetime) -> None:
        """Bump the quote's updated_at timestamp."""
        self.client.table("quote_requests").update(
            {"updated_at": updated_at.isoformat()}
        ).eq("id", str(quote_id)).execute()


def parse_quote(row: dict[str, object]) -> QuoteRequest:
    """Parse a quote_requests row into a domain model."""
    services = row.get("additional_services") or []
    return QuoteRequest(
        id=UUID(str(row["id"])),
        service_type=str(row["service_type"]),
        full_name=str(row["full_name"]),
        email=str(row["email"]),
        phone=optional_text(row.get("phone")),
        passengers=int(row.get("passengers") or 1),
        origin=str(row["origin"]),
        destination=str(row["destination"]),
        departure_date=str(row["departure_date"]),
        departure_time=optional_text(row.get("departure_time")),
        locale=str(row.get("locale") or "es"),
        created_at=parse_datetime(row.get("created_at")),
        updated_at=parse_datetime(row.get("updated_at")),
        standard_bags=int(row.get("standard_bags") or 0),
        special_items=optional_text(row.get("special_items")),
        additional_services=[str(item) for item in services],
        comments=optional_text(row.get("comments")),
        utm_source=optional_text(row.get("utm_source")),
        utm_medium=optional_text(row.get("utm_medium")),
        utm_campaign=optional_text(row.get("utm_campaign")),
    )
