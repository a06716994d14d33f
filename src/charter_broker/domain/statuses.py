"""Status enums and legal transition tables."""

from enum import StrEnum


class EntityType(StrEnum):
    """Entities whose status lifecycle is tracked."""

    QUOTE = "quote"
    CONTACT = "contact"
    PAYMENT = "payment"


class QuoteStatus(StrEnum):
    """Lifecycle of a charter quote request."""

    NEW_REQUEST = "new_request"
    REVIEWING = "reviewing"
    QUOTE_SENT = "quote_sent"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    PAYMENT_PENDING = "payment_pending"
    PAID = "paid"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ContactStatus(StrEnum):
    """Lifecycle of a general inquiry."""

    PENDING = "pending"
    RESPONDED = "responded"
    CLOSED = "closed"


class PaymentStatus(StrEnum):
    """Lifecycle of a payment."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class DeliveryStatus(StrEnum):
    """Delivery state of one outbound email."""

    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    BOUNCED = "bounced"
    FAILED = "failed"
    COMPLAINED = "complained"


_QUOTE_PIPELINE = [
    QuoteStatus.NEW_REQUEST,
    QuoteStatus.REVIEWING,
    QuoteStatus.QUOTE_SENT,
    QuoteStatus.AWAITING_CONFIRMATION,
    QuoteStatus.CONFIRMED,
    QuoteStatus.PAYMENT_PENDING,
    QuoteStatus.PAID,
    QuoteStatus.COMPLETED,
]

QUOTE_TRANSITIONS: dict[str, tuple[str, ...]] = {
    **{
        current.value: (following.value, QuoteStatus.CANCELLED.value)
        for current, following in zip(
            _QUOTE_PIPELINE, _QUOTE_PIPELINE[1:], strict=False
        )
    },
    QuoteStatus.COMPLETED.value: (),
    QuoteStatus.CANCELLED.value: (),
}

CONTACT_TRANSITIONS: dict[str, tuple[str, ...]] = {
    ContactStatus.PENDING.value: (
        ContactStatus.RESPONDED.value,
        ContactStatus.CLOSED.value,
    ),
    ContactStatus.RESPONDED.value: (ContactStatus.CLOSED.value,),
    ContactStatus.CLOSED.value: (),
}

PAYMENT_TRANSITIONS: dict[str, tuple[str, ...]] = {
    PaymentStatus.PENDING.value: (
        PaymentStatus.PROCESSING.value,
        PaymentStatus.COMPLETED.value,
        PaymentStatus.FAILED.value,
    ),
    PaymentStatus.PROCESSING.value: (
        PaymentStatus.COMPLETED.value,
        PaymentStatus.FAILED.value,
    ),
    PaymentStatus.COMPLETED.value: (
        PaymentStatus.REFUNDED.value,
        PaymentStatus.PARTIALLY_REFUNDED.value,
        PaymentStatus.FAILED.value,
    ),
    PaymentStatus.REFUNDED.value: (PaymentStatus.FAILED.value,),
    PaymentStatus.PARTIALLY_REFUNDED.value: (PaymentStatus.FAILED.value,),
    PaymentStatus.FAILED.value: (),
}

# Absorbing states never move; pending accepts out-of-order provider events.
DELIVERY_TRANSITIONS: dict[str, tuple[str, ...]] = {
    DeliveryStatus.PENDING.value: (
        DeliveryStatus.SENT.value,
        DeliveryStatus.DELIVERED.value,
        DeliveryStatus.BOUNCED.value,
        DeliveryStatus.FAILED.value,
    ),
    DeliveryStatus.SENT.value: (
        DeliveryStatus.DELIVERED.value,
        DeliveryStatus.BOUNCED.value,
        DeliveryStatus.FAILED.value,
        DeliveryStatus.COMPLAINED.value,
    ),
    DeliveryStatus.DELIVERED.value: (DeliveryStatus.COMPLAINED.value,),
    DeliveryStatus.BOUNCED.value: (),
    DeliveryStatus.FAILED.value: (),
    DeliveryStatus.COMPLAINED.value: (),
}

TRANSITION_TABLES: dict[EntityType, dict[str, tuple[str, ...]]] = {
    EntityType.QUOTE: QUOTE_TRANSITIONS,
    EntityType.CONTACT: CONTACT_TRANSITIONS,
    EntityType.PAYMENT: PAYMENT_TRANSITIONS,
}

INITIAL_STATUSES: dict[EntityType, str] = {
    EntityType.QUOTE: QuoteStatus.NEW_REQUEST.value,
    EntityType.CONTACT: ContactStatus.PENDING.value,
    EntityType.PAYMENT: PaymentStatus.PENDING.value,
}
