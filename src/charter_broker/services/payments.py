"""Payments recorded against quotes."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from charter_broker.domain.errors import NotFoundError, ValidationError
from charter_broker.domain.payments import Payment, PaymentMethod
from charter_broker.domain.statuses import EntityType, PaymentStatus
from charter_broker.services.quotes import QuoteRepository
from charter_broker.services.status_log import StatusChangeLog

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"


class PaymentRepository(Protocol):
    """Persistence interface for payments."""

    def create_payment(self, payload: dict[str, object]) -> Payment:
        """Insert a payment and return it."""

    def get_payment(self, payment_id: UUID) -> Payment | None:
        """Return a payment by id, if present."""

    def update_payment(self, payment_id: UUID, changes: dict[str, object]) -> Payment:
        """Apply field changes and return the updated payment."""

    def list_payments(  # noqa: PLR0913
        self,
        limit: int,
        offset: int,
        status: str | None,
        method: str | None,
        quote_request_id: UUID | None,
    ) -> list[Payment]:
        """Return payments matching the filters, newest first."""

    def list_all_payments(self) -> list[Payment]:
        """Return every payment."""


@dataclass
class PaymentStatistics:
    """Payment counts and amounts."""

    total_payments: int
    by_status: dict[str, int] = field(default_factory=dict)
    by_method: dict[str, int] = field(default_factory=dict)
    pending_amount: Decimal = Decimal("0")
    completed_amount: Decimal = Decimal("0")
    refunded_amount: Decimal = Decimal("0")
    total_revenue: Decimal = Decimal("0")


@dataclass
class PaymentService:
    """Application service for payment bookkeeping."""

    repository: PaymentRepository
    quote_repository: QuoteRepository
    status_log: StatusChangeLog

    def create_payment(  # noqa: PLR0913
        self,
        quote_request_id: UUID,
        amount: Decimal,
        method: str,
        processed_by: str,
        currency: str | None = None,
        transaction_reference: str | None = None,
        receipt_url: str | None = None,
        notes: str | None = None,
    ) -> Payment:
        """Record a pending payment for an existing quote."""
        if amount <= 0:
            raise ValidationError("Payment amount must be positive")
        if method not in set(PaymentMethod):
            raise ValidationError(
                "Invalid payment method",
                validMethods=[item.value for item in PaymentMethod],
            )
        if self.quote_repository.get_quote(quote_request_id) is None:
            raise NotFoundError("Quote not found", quoteId=str(quote_request_id))
        payment = self.repository.create_payment(
            {
                "quote_request_id": str(quote_request_id),
                "amount": str(amount),
                "currency": (currency or DEFAULT_CURRENCY).upper(),
                "payment_method": method,
                "payment_status": PaymentStatus.PENDING.value,
                "transaction_reference": transaction_reference,
                "receipt_url": receipt_url,
                "notes": notes,
                "processed_by": processed_by,
            }
        )
        logger.info(
            "Payment created",
            extra={"payment_id": str(payment.id), "quote_id": str(quote_request_id)},
        )
        return payment

    def get_payment(self, payment_id: UUID) -> Payment:
        """Return a payment or raise NotFoundError."""
        payment = self.repository.get_payment(payment_id)
        if payment is None:
            raise NotFoundError("Payment not found", paymentId=str(payment_id))
        return payment

    def list_payments(  # noqa: PLR0913
        self,
        limit: int = 50,
        offset: int = 0,
        status: str | None = None,
        method: str | None = None,
        quote_request_id: UUID | None = None,
    ) -> list[Payment]:
        """Return recent payments with optional filters."""
        return self.repository.list_payments(
            limit, offset, status, method, quote_request_id
        )

    def update_status(  # noqa: PLR0913
        self,
        payment_id: UUID,
        new_status: str,
        actor_email: str,
        transaction_reference: str | None = None,
        notes: str | None = None,
        paid_at: datetime | None = None,
    ) -> Payment:
        """Move a payment through its lifecycle."""
        payment = self.get_payment(payment_id)
        self.status_log.record_transition(
            EntityType.PAYMENT,
            payment_id,
            actor_email=actor_email,
            requested_status=new_status,
            note=notes,
            current_status=payment.status,
        )
        changes: dict[str, object] = {
            "payment_status": new_status,
            "processed_by": actor_email,
        }
        if new_status == PaymentStatus.COMPLETED and payment.paid_at is None:
            changes["paid_at"] = paid_at or datetime.now(tz=UTC)
        if transaction_reference:
            changes["transaction_reference"] = transaction_reference
        if notes:
            changes["notes"] = notes
        return self.repository.update_payment(payment_id, changes)

    def record_refund(
        self,
        payment_id: UUID,
        amount: Decimal,
        reason: str,
        actor_email: str,
    ) -> Payment:
        """Refund all or part of a completed payment."""
        payment = self.get_payment(payment_id)
        if payment.status != PaymentStatus.COMPLETED:
            raise ValidationError(
                "Can only refund completed payments", currentStatus=payment.status
            )
        if amount <= 0:
            raise ValidationError("Refund amount must be positive")
        if amount > payment.amount:
            raise ValidationError("Refund amount cannot exceed payment amount")
        new_status = (
            PaymentStatus.PARTIALLY_REFUNDED
            if amount < payment.amount
            else PaymentStatus.REFUNDED
        )
        self.status_log.record_transition(
            EntityType.PAYMENT,
            payment_id,
            actor_email=actor_email,
            requested_status=new_status.value,
            note=reason,
            current_status=payment.status,
        )
        logger.info(
            "Payment refunded",
            extra={"payment_id": str(payment_id), "status": new_status.value},
        )
        return self.repository.update_payment(
            payment_id,
            {
                "payment_status": new_status.value,
                "refund_amount": str(amount),
                "refund_reason": reason,
                "refunded_at": datetime.now(tz=UTC),
                "processed_by": actor_email,
            },
        )

    def statistics(self) -> PaymentStatistics:
        """Aggregate payment counts and amounts."""
        payments = self.repository.list_all_payments()
        stats = PaymentStatistics(
            total_payments=len(payments),
            by_status={status.value: 0 for status in PaymentStatus},
            by_method={method.value: 0 for method in PaymentMethod},
        )
        for payment in payments:
            stats.by_status[payment.status] = (
                stats.by_status.get(payment.status, 0) + 1
            )
            stats.by_method[payment.method] = (
                stats.by_method.get(payment.method, 0) + 1
            )
            refunded = payment.refund.amount if payment.refund else Decimal("0")
            if payment.status == PaymentStatus.COMPLETED:
                stats.completed_amount += payment.amount
                stats.total_revenue += payment.amount
            elif payment.status in {PaymentStatus.PENDING, PaymentStatus.PROCESSING}:
                stats.pending_amount += payment.amount
            elif payment.status == PaymentStatus.REFUNDED:
                stats.refunded_amount += payment.amount
            elif payment.status == PaymentStatus.PARTIALLY_REFUNDED:
                stats.refunded_amount += refunded
                stats.completed_amount += payment.amount - refunded
                stats.total_revenue += payment.amount - refunded
        return stats
