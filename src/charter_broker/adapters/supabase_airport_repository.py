"""Supabase repository for airport reference data."""

from dataclasses import dataclass

from supabase import Client

from charter_broker.adapters.supabase_rows import escape_filter_value
from charter_broker.domain.airports import Airport
from charter_broker.services.airports import AirportRepository

_COLUMNS = "iata_code, airport_name, city_name, country_code, region_code, is_popular"


@dataclass
class SupabaseAirportRepository(AirportRepository):
    """Reads active rows from airports."""

    client: Client

    def get_airport(self, code: str) -> Airport | None:
        """Return the active airport with an IATA code, if present."""
        response = (
            self.client.table("airports")
            .select(_COLUMNS)
            .eq("iata_code", code)
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_airport(response.data[0])

    def search_airports(self, query: str, limit: int) -> list[Airport]:
        """Return active airports whose code, name, city or country matches."""
        pattern = escape_filter_value(query)
        response = (
            self.client.table("airports")
            .select(_COLUMNS)
            .eq("is_active", True)
            .or_(
                f"iata_code.ilike.*{pattern}*,airport_name.ilike.*{pattern}*,"
                f"city_name.ilike.*{pattern}*,country_code.ilike.*{pattern}*"
            )
            .limit(limit)
            .execute()
        )
        return [_parse_airport(row) for row in response.data or []]


def _parse_airport(row: dict[str, object]) -> Airport:
    return Airport(
        code=str(row["iata_code"]),
        name=str(row.get("airport_name") or ""),
        city=str(row.get("city_name") or ""),
        country=str(row.get("country_code") or ""),
        region=str(row.get("region_code") or ""),
        is_popular=bool(row.get("is_popular")),
    )
