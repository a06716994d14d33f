"""Contact form intake and status workflow."""

import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from charter_broker.domain.emails import EmailDeliveryRecord
from charter_broker.domain.errors import CharterError, NotFoundError
from charter_broker.domain.inquiries import ContactForm
from charter_broker.domain.status_events import StatusChangeEvent
from charter_broker.domain.statuses import ContactStatus, EntityType
from charter_broker.services.email import EmailService
from charter_broker.services.email_delivery import EmailDeliveryRepository
from charter_broker.services.status_log import BulkUpdateResult, StatusChangeLog
from charter_broker.services.transitions import available_transitions

logger = logging.getLogger(__name__)

SCAN_BATCH_SIZE = 200


class ContactRepository(Protocol):
    """Persistence interface for contact forms."""

    def create_contact(self, payload: dict[str, object]) -> ContactForm:
        """Insert a contact form and return it."""

    def get_contact(self, contact_id: UUID) -> ContactForm | None:
        """Return a contact form by id, if present."""

    def list_contacts(self, limit: int, offset: int) -> list[ContactForm]:
        """Return contact forms, newest first."""

    def list_contact_ids(self) -> list[UUID]:
        """Return the ids of every contact form."""


@dataclass(frozen=True)
class ContactWithStatus:
    """A contact form with its derived status, history and emails."""

    contact: ContactForm
    current_status: str
    status_history: list[StatusChangeEvent]
    email_deliveries: list[EmailDeliveryRecord] = field(default_factory=list)

    @property
    def available_actions(self) -> list[str]:
        return available_transitions(EntityType.CONTACT, self.current_status)


@dataclass
class ContactService:
    """Application service for contact forms."""

    repository: ContactRepository
    status_log: StatusChangeLog
    delivery_repository: EmailDeliveryRepository
    email_service: EmailService | None = None

    async def submit(self, payload: dict[str, object]) -> ContactForm:
        """Store a contact form and notify the operations inbox."""
        contact = self.repository.create_contact(payload)
        logger.info("Contact form created", extra={"contact_id": str(contact.id)})
        if self.email_service is not None:
            try:
                await self.email_service.send_contact_notification(contact)
            except Exception:
                logger.exception(
                    "Contact email failed", extra={"contact_id": str(contact.id)}
                )
        return contact

    def get_with_status(self, contact_id: UUID) -> ContactWithStatus:
        """Return a contact with status, history and related emails."""
        contact = self.repository.get_contact(contact_id)
        if contact is None:
            raise NotFoundError("Contact not found", contactId=str(contact_id))
        history = self.status_log.get_history(EntityType.CONTACT, contact_id)
        return ContactWithStatus(
            contact=contact,
            current_status=_current(history),
            status_history=history,
            email_deliveries=self.delivery_repository.list_for_contact(contact_id),
        )

    def update_status(
        self,
        contact_id: UUID,
        new_status: str,
        actor_email: str,
        note: str | None = None,
    ) -> tuple[ContactWithStatus, StatusChangeEvent]:
        """Validate and record a status change for a contact."""
        if self.repository.get_contact(contact_id) is None:
            raise NotFoundError("Contact not found", contactId=str(contact_id))
        event = self.status_log.record_transition(
            EntityType.CONTACT,
            contact_id,
            actor_email=actor_email,
            requested_status=new_status,
            note=note,
        )
        return self.get_with_status(contact_id), event

    def list_by_status(
        self, status: str, limit: int = 50, offset: int = 0
    ) -> list[ContactWithStatus]:
        """Return contacts whose current status matches, newest first."""
        matches: list[ContactWithStatus] = []
        scan_offset = 0
        while len(matches) < offset + limit:
            batch = self.repository.list_contacts(SCAN_BATCH_SIZE, scan_offset)
            for contact in batch:
                history = self.status_log.get_history(EntityType.CONTACT, contact.id)
                if _current(history) == status:
                    matches.append(
                        ContactWithStatus(
                            contact=contact,
                            current_status=status,
                            status_history=history,
                        )
                    )
            if len(batch) < SCAN_BATCH_SIZE:
                break
            scan_offset += SCAN_BATCH_SIZE
        return matches[offset : offset + limit]

    def status_statistics(self) -> dict[str, int]:
        """Count contacts per current status."""
        stats = {status.value: 0 for status in ContactStatus}
        for contact_id in self.repository.list_contact_ids():
            current = self.status_log.get_current_status(
                EntityType.CONTACT, contact_id
            )
            stats[current] = stats.get(current, 0) + 1
        return stats

    def bulk_update_status(
        self,
        contact_ids: list[UUID],
        new_status: str,
        actor_email: str,
        note: str | None = None,
    ) -> BulkUpdateResult:
        """Apply one status change to many contacts, skipping failures."""
        result = BulkUpdateResult()
        for contact_id in contact_ids:
            try:
                _, event = self.update_status(
                    contact_id, new_status, actor_email, note
                )
            except CharterError as exc:
                logger.warning(
                    "Bulk status update skipped contact",
                    extra={"contact_id": str(contact_id), "error": exc.message},
                )
                result.failed[str(contact_id)] = exc.message
                continue
            result.updated.append(event)
        return result


def _current(history: list[StatusChangeEvent]) -> str:
    return history[0].to_status if history else ContactStatus.PENDING.value
