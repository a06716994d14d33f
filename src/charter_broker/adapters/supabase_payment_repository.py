"""Supabase repository for payments."""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from supabase import Client

from charter_broker.adapters.supabase_rows import (
    optional_text,
    parse_datetime,
    parse_optional_datetime,
    serialize_changes,
)
from charter_broker.domain.payments import Payment, PaymentMethod, Refund
from charter_broker.services.payments import PaymentRepository


@dataclass
class SupabasePaymentRepository(PaymentRepository):
    """Supabase-backed payments table."""

    client: Client

    def create_payment(self, payload: dict[str, object]) -> Payment:
        """Insert a payment and return it."""
        response = (
            self.client.table("payments").insert(serialize_changes(payload)).execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create payment")
        return _parse_payment(response.data[0])

    def get_payment(self, payment_id: UUID) -> Payment | None:
        """Return a payment by id, if present."""
        response = (
            self.client.table("payments")
            .select("*")
            .eq("id", str(payment_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_payment(response.data[0])

    def update_payment(self, payment_id: UUID, changes: dict[str, object]) -> Payment:
        """Apply field changes and return the updated payment."""
        response = (
            self.client.table("payments")
            .update(serialize_changes(changes))
            .eq("id", str(payment_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update payment")
        return _parse_payment(response.data[0])

    def list_payments(  # noqa: PLR0913
        self,
        limit: int,
        offset: int,
        status: str | None,
        method: str | None,
        quote_request_id: UUID | None,
    ) -> list[Payment]:
        """Return payments matching the filters, newest first."""
        query = self.client.table("payments").select("*")
        if status:
            query = query.eq("payment_status", status)
        if method:
            query = query.eq("payment_method", method)
        if quote_request_id:
            query = query.eq("quote_request_id", str(quote_request_id))
        response = (
            query.order("created_at", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        return [_parse_payment(row) for row in response.data or []]

    def list_all_payments(self) -> list[Payment]:
        """Return every payment."""
        response = self.client.table("payments").select("*").execute()
        return [_parse_payment(row) for row in response.data or []]


def _parse_payment(row: dict[str, object]) -> Payment:
    refund = None
    if row.get("refund_amount") is not None:
        refund = Refund(
            amount=Decimal(str(row["refund_amount"])),
            reason=str(row.get("refund_reason") or ""),
            refunded_at=parse_datetime(row.get("refunded_at")),
        )
    return Payment(
        id=UUID(str(row["id"])),
        quote_request_id=UUID(str(row["quote_request_id"])),
        amount=Decimal(str(row["amount"])),
        currency=str(row.get("currency") or "USD"),
        method=PaymentMethod(str(row["payment_method"])),
        status=str(row["payment_status"]),
        created_at=parse_datetime(row.get("created_at")),
        updated_at=parse_datetime(row.get("updated_at")),
        transaction_reference=optional_text(row.get("transaction_reference")),
        receipt_url=optional_text(row.get("receipt_url")),
        notes=optional_text(row.get("notes")),
        paid_at=parse_optional_datetime(row.get("paid_at")),
        processed_by=optional_text(row.get("processed_by")),
        refund=refund,
    )
