"""Payment domain models."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from uuid import UUID


class PaymentMethod(StrEnum):
    """Accepted payment methods."""

    CREDIT_CARD = "credit_card"
    WIRE_TRANSFER = "wire_transfer"
    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"
    CASH = "cash"
    OTHER = "other"


@dataclass(frozen=True)
class Refund:
    """Refund recorded against a completed payment."""

    amount: Decimal
    reason: str
    refunded_at: datetime


@dataclass(frozen=True)
class Payment:
    """Payment received for a quote."""

    id: UUID
    quote_request_id: UUID
    amount: Decimal
    currency: str
    method: PaymentMethod
    status: str
    created_at: datetime
    updated_at: datetime
    transaction_reference: str | None = None
    receipt_url: str | None = None
    notes: str | None = None
    paid_at: datetime | None = None
    processed_by: str | None = None
    refund: Refund | None = None
