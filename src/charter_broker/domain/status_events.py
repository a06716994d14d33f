"""Status change events."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from charter_broker.domain.statuses import EntityType


@dataclass(frozen=True)
class StatusChangeEvent:
    """Immutable record of one status transition."""

    id: UUID
    entity_type: EntityType
    entity_id: UUID
    from_status: str
    to_status: str
    actor_email: str
    note: str | None
    changed_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None
