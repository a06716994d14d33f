"""Row parsing helpers shared by the Supabase repositories."""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID


def parse_datetime(value: object) -> datetime:
    """Parse an ISO timestamp column, defaulting to the epoch when empty."""
    parsed = parse_optional_datetime(value)
    return parsed or datetime.fromtimestamp(0, tz=UTC)


def parse_optional_datetime(value: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def parse_optional_uuid(value: object) -> UUID | None:
    if not value:
        return None
    return UUID(str(value))


def optional_text(value: object) -> str | None:
    return str(value) if value is not None and value != "" else None


def serialize_changes(changes: dict[str, object]) -> dict[str, object]:
    """Convert values to JSON-compatible column values."""
    serialized: dict[str, object] = {}
    for key, value in changes.items():
        if isinstance(value, datetime):
            serialized[key] = value.isoformat()
        elif isinstance(value, UUID | Decimal):
            serialized[key] = str(value)
        else:
            serialized[key] = value
    return serialized


def escape_filter_value(value: str) -> str:
    """Strip characters that delimit PostgREST or-filters."""
    return "".join(char for char in value if char not in ",()*")
