"""Airport lookup for quote intake and the route search box."""

import logging
from dataclasses import dataclass
from typing import Protocol

from charter_broker.domain.airports import Airport
from charter_broker.domain.errors import ValidationError

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10
CANDIDATE_LIMIT = 50
MAX_QUERY_LENGTH = 50
POPULAR_BOOST = 15


class AirportRepository(Protocol):
    """Read interface for the airports table."""

    def get_airport(self, code: str) -> Airport | None:
        """Return the active airport with an IATA code, if present."""

    def search_airports(self, query: str, limit: int) -> list[Airport]:
        """Return active airports whose code, name, city or country matches."""


def relevance(airport: Airport, query: str) -> int:
    """Score how well an airport matches a search term."""
    term = query.upper()
    code = airport.code.upper()
    city = airport.city.upper()
    name = airport.name.upper()
    if code == term:
        score = 100
    elif code.startswith(term):
        score = 90
    elif city.startswith(term):
        score = 80
    elif name.startswith(term):
        score = 70
    elif term in city:
        score = 60
    elif term in name:
        score = 50
    else:
        score = 40
    return score + POPULAR_BOOST if airport.is_popular else score


@dataclass
class AirportService:
    """Validates IATA codes and ranks airport search results."""

    repository: AirportRepository

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> list[Airport]:
        """Return the best matching airports for a search term."""
        term = query.strip()
        if not term:
            raise ValidationError("Search query is required", field="search")
        if len(term) > MAX_QUERY_LENGTH:
            raise ValidationError(
                f"Search query must be at most {MAX_QUERY_LENGTH} characters",
                field="search",
            )
        candidates = self.repository.search_airports(term, CANDIDATE_LIMIT)
        ranked = sorted(
            candidates,
            key=lambda airport: (-relevance(airport, term), airport.code),
        )
        return ranked[:limit]

    def ensure_known(self, code: str, field: str) -> Airport:
        """Return the airport for a code or reject it as invalid input."""
        airport = self.repository.get_airport(code.strip().upper())
        if airport is None:
            logger.info("Unknown airport code", extra={"field": field, "code": code})
            raise ValidationError(
                f"{field.capitalize()} airport code '{code}' is not valid",
                field=field,
            )
        return airport
