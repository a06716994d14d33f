"""Append-only status change log."""

import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from charter_broker.domain.status_events import StatusChangeEvent
from charter_broker.domain.statuses import INITIAL_STATUSES, EntityType
from charter_broker.services.transitions import ensure_transition

logger = logging.getLogger(__name__)


class StatusEventRepository(Protocol):
    """Persistence interface for status change events."""

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

    def list_events(
        self, entity_type: EntityType, entity_id: UUID
    ) -> list[StatusChangeEvent]:
        """Return all events for an entity, most recent first."""

    def latest_event(
        self, entity_type: EntityType, entity_id: UUID
    ) -> StatusChangeEvent | None:
        """Return the most recent event for an entity, if any."""


@dataclass
class BulkUpdateResult:
    """Per-id results of a bulk status update."""

    updated: list[StatusChangeEvent] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


@dataclass
class StatusChangeLog:
    """Validates and records status transitions for any tracked entity."""

    repository: StatusEventRepository

    def get_current_status(self, entity_type: EntityType, entity_id: UUID) -> str:
        """Return the latest to_status, or the entity's initial status."""
        latest = self.repository.latest_event(entity_type, entity_id)
        if latest is None:
            return INITIAL_STATUSES[entity_type]
        return latest.to_status

    def get_history(
        self, entity_type: EntityType, entity_id: UUID
    ) -> list[StatusChangeEvent]:
        """Return the full event history, most recent first."""
        return self.repository.list_events(entity_type, entity_id)

    def record_transition(  # noqa: PLR0913
        self,
        entity_type: EntityType,
        entity_id: UUID,
        actor_email: str,
        requested_status: str,
        note: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        current_status: str | None = None,
    ) -> StatusChangeEvent:
        """Validate the transition and append it to the log.

        Entities that keep their own status column pass it as current_status;
        otherwise the latest logged event decides.
        """
        current = current_status or self.get_current_status(entity_type, entity_id)
        ensure_transition(entity_type, current, requested_status)
        event = self.repository.append_event(
            entity_type=entity_type,
            entity_id=entity_id,
            from_status=current,
            to_status=requested_status,
            actor_email=actor_email,
            note=note,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        logger.info(
            "Status changed",
            extra={
                "entity_type": entity_type.value,
                "entity_id": str(entity_id),
                "from_status": current,
                "to_status": requested_status,
            },
        )
        return event
