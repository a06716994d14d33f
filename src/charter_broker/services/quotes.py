"""Quote request intake and status workflow."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID

from charter_broker.domain.errors import CharterError, NotFoundError
from charter_broker.domain.inquiries import QuoteRequest
from charter_broker.domain.status_events import StatusChangeEvent
from charter_broker.domain.statuses import EntityType, QuoteStatus
from charter_broker.services.airports import AirportService
from charter_broker.services.email import EmailService
from charter_broker.services.status_log import BulkUpdateResult, StatusChangeLog
from charter_broker.services.transitions import available_transitions

logger = logging.getLogger(__name__)

STALE_STATUSES = frozenset({QuoteStatus.NEW_REQUEST, QuoteStatus.REVIEWING})
SCAN_BATCH_SIZE = 200


class QuoteRepository(Protocol):
    """Persistence interface for quote requests."""

    def create_quote(self, payload: dict[str, object]) -> QuoteRequest:
        """Insert a quote request and return it."""

    def get_quote(self, quote_id: UUID) -> QuoteRequest | None:
        """Return a quote request by id, if present."""

    def list_quotes(self, limit: int, offset: int) -> list[QuoteRequest]:
        """Return quote requests, newest first."""

    def list_quote_ids(self) -> list[UUID]:
        """Return the ids of every quote request."""

    def list_quotes_created_before(self, cutoff: datetime) -> list[QuoteRequest]:
        """Return quote requests created before a timestamp, oldest first."""

    def touch_quote(self, quote_id: UUID, updated_at: datetime) -> None:
        """Bump the quote's updated_at timestamp."""


@dataclass(frozen=True)
class QuoteWithStatus:
    """A quote request with its derived status and history."""

    quote: QuoteRequest
    current_status: str
    status_history: list[StatusChangeEvent]

    @property
    def available_actions(self) -> list[str]:
        return available_transitions(EntityType.QUOTE, self.current_status)


@dataclass
class StatusUpdateResult:
    """Outcome of a status change request."""

    quote: QuoteWithStatus
    status_change: StatusChangeEvent


@dataclass
class QuoteService:
    """Application service for quote requests."""

    repository: QuoteRepository
    status_log: StatusChangeLog
    airports: AirportService
    email_service: EmailService | None = None

    async def submit(self, payload: dict[str, object]) -> QuoteRequest:
        """Validate the route, store the quote and send the notification emails."""
        origin = self.airports.ensure_known(str(payload["origin"]), "origin")
        destination = self.airports.ensure_known(
            str(payload["destination"]), "destination"
        )
        quote = self.repository.create_quote(
            {**payload, "origin": origin.code, "destination": destination.code}
        )
        logger.info(
            "Quote request created",
            extra={"quote_id": str(quote.id), "locale": quote.locale},
        )
        if self.email_service is not None:
            try:
                await self.email_service.send_quote_notification(quote)
                await self.email_service.send_quote_confirmation(quote)
            except Exception:
                logger.exception(
                    "Quote emails failed", extra={"quote_id": str(quote.id)}
                )
        return quote

    def get_with_status(self, quote_id: UUID) -> QuoteWithStatus:
        """Return a quote with its current status and history."""
        quote = self.repository.get_quote(quote_id)
        if quote is None:
            raise NotFoundError("Quote not found", quoteId=str(quote_id))
        return self._with_status(quote)

    def update_status(  # noqa: PLR0913
        self,
        quote_id: UUID,
        new_status: str,
        actor_email: str,
        note: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> StatusUpdateResult:
        """Validate and record a status change for a quote."""
        if self.repository.get_quote(quote_id) is None:
            raise NotFoundError("Quote not found", quoteId=str(quote_id))
        event = self.status_log.record_transition(
            EntityType.QUOTE,
            quote_id,
            actor_email=actor_email,
            requested_status=new_status,
            note=note,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.repository.touch_quote(quote_id, datetime.now(tz=UTC))
        return StatusUpdateResult(
            quote=self.get_with_status(quote_id), status_change=event
        )

    def list_by_status(
        self, status: str, limit: int = 50, offset: int = 0
    ) -> list[QuoteWithStatus]:
        """Return quotes whose current status matches, newest first.

        Status is derived from the event log, so the repository is scanned in
        batches and paging applies to the matches.
        """
        matches: list[QuoteWithStatus] = []
        scan_offset = 0
        while len(matches) < offset + limit:
            batch = self.repository.list_quotes(SCAN_BATCH_SIZE, scan_offset)
            for quote in batch:
                current = self.status_log.get_current_status(
                    EntityType.QUOTE, quote.id
                )
                if current == status:
                    matches.append(self._with_status(quote, current))
            if len(batch) < SCAN_BATCH_SIZE:
                break
            scan_offset += SCAN_BATCH_SIZE
        return matches[offset : offset + limit]

    def status_statistics(self) -> dict[str, int]:
        """Count quotes per current status."""
        stats = {status.value: 0 for status in QuoteStatus}
        for quote_id in self.repository.list_quote_ids():
            current = self.status_log.get_current_status(EntityType.QUOTE, quote_id)
            stats[current] = stats.get(current, 0) + 1
        return stats

    def bulk_update_status(
        self,
        quote_ids: list[UUID],
        new_status: str,
        actor_email: str,
        note: str | None = None,
    ) -> BulkUpdateResult:
        """Apply one status change to many quotes, skipping failures."""
        result = BulkUpdateResult()
        for quote_id in quote_ids:
            try:
                update = self.update_status(quote_id, new_status, actor_email, note)
            except CharterError as exc:
                logger.warning(
                    "Bulk status update skipped quote",
                    extra={"quote_id": str(quote_id), "error": exc.message},
                )
                result.failed[str(quote_id)] = exc.message
                continue
            result.updated.append(update.status_change)
        return result

    def stale_quotes(self, days_old: int = 7) -> list[QuoteWithStatus]:
        """Return quotes still awaiting review after the given age."""
        cutoff = datetime.now(tz=UTC) - timedelta(days=days_old)
        stale = []
        for quote in self.repository.list_quotes_created_before(cutoff):
            current = self.status_log.get_current_status(EntityType.QUOTE, quote.id)
            if current in STALE_STATUSES:
                stale.append(self._with_status(quote, current))
        return stale

    def _with_status(
        self, quote: QuoteRequest, current: str | None = None
    ) -> QuoteWithStatus:
        history = self.status_log.get_history(EntityType.QUOTE, quote.id)
        if current is None:
            current = (
                history[0].to_status if history else QuoteStatus.NEW_REQUEST.value
            )
        return QuoteWithStatus(
            quote=quote, current_status=current, status_history=history
        )
