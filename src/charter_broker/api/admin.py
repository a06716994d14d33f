"""Admin API endpoints with simple token auth."""

from __future__ import annotations

import hmac
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, Request

from charter_broker.api.requests import get_container
from charter_broker.api.schemas import (
    BulkStatusChange,
    PaymentCreate,
    PaymentStatusChange,
    RefundRequest,
    StatusChange,
)
from charter_broker.api.serializers import (
    serialize_bulk_result,
    serialize_contact_with_status,
    serialize_event,
    serialize_payment,
    serialize_quote_with_status,
)
from charter_broker.domain.errors import AuthError
from charter_broker.domain.statuses import EntityType

if TYPE_CHECKING:
    from charter_broker.containers import AppContainer
    from charter_broker.services.cache import CacheStats

DEFAULT_ACTOR = "admin"


def _get_admin_token(request: Request) -> str:
    container: AppContainer = get_container(request)
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or not hmac.compare_digest(
        x_admin_token.encode(), admin_token.encode()
    ):
        raise AuthError("Invalid admin token")


def admin_actor(x_admin_email: str | None = Header(default=None)) -> str:
    """Return the acting admin's email for audit rows."""
    return x_admin_email or DEFAULT_ACTOR


router = APIRouter(
    prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)]
)


@router.get("/health")
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/quotes")
async def list_quotes(
    request: Request, status: str = "new_request", limit: int = 50, offset: int = 0
) -> dict[str, object]:
    """Return quotes whose current status matches."""
    container: AppContainer = get_container(request)
    quotes = container.quote_service.list_by_status(status, limit, offset)
    return {
        "status": status,
        "quotes": [serialize_quote_with_status(item) for item in quotes],
        "pagination": {
            "limit": limit,
            "offset": offset,
            "hasMore": len(quotes) == limit,
        },
    }


@router.get("/quotes/stats")
async def quote_stats(request: Request) -> dict[str, object]:
    """Return quote counts per status."""
    container: AppContainer = get_container(request)
    return {"statistics": container.quote_service.status_statistics()}


@router.get("/quotes/stale")
async def stale_quotes(request: Request, days: int = 7) -> dict[str, object]:
    """Return quotes waiting for review longer than the given days."""
    container: AppContainer = get_container(request)
    quotes = container.quote_service.stale_quotes(days)
    return {
        "daysOld": days,
        "quotes": [serialize_quote_with_status(item) for item in quotes],
    }


@router.post("/quotes/bulk-status")
async def bulk_quote_status(
    body: BulkStatusChange,
    request: Request,
    actor: str = Depends(admin_actor),
) -> dict[str, object]:
    """Apply one status to several quotes."""
    container: AppContainer = get_container(request)
    result = container.quote_service.bulk_update_status(
        body.ids, body.status, actor, body.note
    )
    return serialize_bulk_result(result)


@router.get("/contacts")
async def list_contacts(
    request: Request, status: str = "pending", limit: int = 50, offset: int = 0
) -> dict[str, object]:
    """Return contacts whose current status matches."""
    container: AppContainer = get_container(request)
    contacts = container.contact_service.list_by_status(status, limit, offset)
    return {
        "status": status,
        "contacts": [serialize_contact_with_status(item) for item in contacts],
        "pagination": {
            "limit": limit,
            "offset": offset,
            "hasMore": len(contacts) == limit,
        },
    }


@router.get("/contacts/stats")
async def contact_stats(request: Request) -> dict[str, object]:
    """Return contact counts per status."""
    container: AppContainer = get_container(request)
    return {"statistics": container.contact_service.status_statistics()}


@router.post("/contacts/bulk-status")
async def bulk_contact_status(
    body: BulkStatusChange,
    request: Request,
    actor: str = Depends(admin_actor),
) -> dict[str, object]:
    """Apply one status to several contacts."""
    container: AppContainer = get_container(request)
    result = container.contact_service.bulk_update_status(
        body.ids, body.status, actor, body.note
    )
    return serialize_bulk_result(result)


@router.get("/contacts/{contact_id}")
async def contact_detail(contact_id: UUID, request: Request) -> dict[str, object]:
    """Return a contact with status history and related emails."""
    container: AppContainer = get_container(request)
    contact = container.contact_service.get_with_status(contact_id)
    return {"contact": serialize_contact_with_status(contact)}


@router.patch("/contacts/{contact_id}")
async def update_contact_status(
    contact_id: UUID,
    body: StatusChange,
    request: Request,
    actor: str = Depends(admin_actor),
) -> dict[str, object]:
    """Move a contact to a new status."""
    container: AppContainer = get_container(request)
    contact, event = container.contact_service.update_status(
        contact_id, body.status, actor, body.note
    )
    return {
        "message": f"Contact status updated to {body.status}",
        "contact": serialize_contact_with_status(contact),
        "statusChange": serialize_event(event),
    }


@router.get("/payments")
async def list_payments(  # noqa: PLR0913
    request: Request,
    status: str | None = None,
    method: str | None = None,
    quote_request_id: UUID | None = None,
    limit: int = 50,
    offset: int = 0,
) -> dict[str, object]:
    """Return payments with optional filters."""
    container: AppContainer = get_container(request)
    payments = container.payment_service.list_payments(
        limit=limit,
        offset=offset,
        status=status,
        method=method,
        quote_request_id=quote_request_id,
    )
    return {
        "payments": [serialize_payment(payment) for payment in payments],
        "total": len(payments),
        "pagination": {
            "limit": limit,
            "offset": offset,
            "hasMore": len(payments) == limit,
        },
    }


@router.post("/payments")
async def create_payment(
    body: PaymentCreate,
    request: Request,
    actor: str = Depends(admin_actor),
) -> dict[str, object]:
    """Record a new pending payment."""
    container: AppContainer = get_container(request)
    payment = container.payment_service.create_payment(
        quote_request_id=body.quote_request_id,
        amount=body.amount,
        method=body.payment_method,
        processed_by=actor,
        currency=body.currency,
        transaction_reference=body.transaction_reference,
        receipt_url=body.receipt_url,
        notes=body.notes,
    )
    return {"payment": serialize_payment(payment)}


@router.get("/payments/stats")
async def payment_stats(request: Request) -> dict[str, object]:
    """Return payment counts and amounts."""
    container: AppContainer = get_container(request)
    stats = container.payment_service.statistics()
    return {
        "statistics": {
            "totalPayments": stats.total_payments,
            "byStatus": stats.by_status,
            "byMethod": stats.by_method,
            "pendingAmount": float(stats.pending_amount),
            "completedAmount": float(stats.completed_amount),
            "refundedAmount": float(stats.refunded_amount),
            "totalRevenue": float(stats.total_revenue),
        }
    }


@router.get("/payments/{payment_id}")
async def payment_detail(payment_id: UUID, request: Request) -> dict[str, object]:
    """Return one payment."""
    container: AppContainer = get_container(request)
    payment = container.payment_service.get_payment(payment_id)
    history = container.status_log.get_history(EntityType.PAYMENT, payment_id)
    return {
        "payment": serialize_payment(payment),
        "statusHistory": [serialize_event(event) for event in history],
    }


@router.patch("/payments/{payment_id}")
async def update_payment_status(
    payment_id: UUID,
    body: PaymentStatusChange,
    request: Request,
    actor: str = Depends(admin_actor),
) -> dict[str, object]:
    """Move a payment to a new status."""
    container: AppContainer = get_container(request)
    payment = container.payment_service.update_status(
        payment_id,
        body.status,
        actor,
        transaction_reference=body.transaction_reference,
        notes=body.notes,
        paid_at=body.paid_at,
    )
    return {"payment": serialize_payment(payment)}


@router.post("/payments/{payment_id}/refund")
async def refund_payment(
    payment_id: UUID,
    body: RefundRequest,
    request: Request,
    actor: str = Depends(admin_actor),
) -> dict[str, object]:
    """Refund all or part of a completed payment."""
    container: AppContainer = get_container(request)
    payment = container.payment_service.record_refund(
        payment_id, body.amount, body.reason, actor
    )
    return {"payment": serialize_payment(payment)}


@router.get("/emails/stats")
async def email_stats(request: Request, days: int = 30) -> dict[str, object]:
    """Return email delivery counts and rates."""
    container: AppContainer = get_container(request)
    stats = container.delivery_tracker.statistics(days)
    return {
        "statistics": {
            "days": stats.days,
            "total": stats.total,
            "byStatus": stats.by_status,
            "deliveryRate": stats.delivery_rate,
            "bounceRate": stats.bounce_rate,
        }
    }


@router.get("/webhooks/stats")
async def webhook_stats(request: Request, hours: int = 24) -> dict[str, object]:
    """Return webhook processing statistics."""
    container: AppContainer = get_container(request)
    stats = container.webhook_service.statistics(hours)
    return {
        "statistics": {
            "hours": stats.hours,
            "totalEvents": stats.total_events,
            "processed": stats.processed,
            "failed": stats.failed,
            "byEventType": stats.by_event_type,
            "byStatus": stats.by_status,
            "recentErrors": stats.recent_errors,
        }
    }


@router.get("/whatsapp/stats")
async def whatsapp_stats(
    request: Request, timeframe: str = "today"
) -> dict[str, object]:
    """Return WhatsApp click attribution statistics."""
    container: AppContainer = get_container(request)
    stats = container.whatsapp_service.click_statistics(timeframe)
    return {
        "timeframe": stats.timeframe,
        "statistics": {
            "totalClicks": stats.total_clicks,
            "clicksByLocale": stats.clicks_by_locale,
            "clicksBySource": stats.clicks_by_source,
            "topPages": stats.top_pages,
        },
    }


@router.get("/content/pages")
async def content_pages(request: Request) -> dict[str, object]:
    """Return published content counts per page."""
    container: AppContainer = get_container(request)
    pages = container.content_service.list_pages()
    return {
        "pages": [
            {
                "pageSlug": page.page_slug,
                "locales": page.locales,
                "totalItems": page.total_items,
                "lastUpdated": page.last_updated.isoformat()
                if page.last_updated
                else None,
            }
            for page in pages
        ]
    }


@router.get("/content/cache")
async def content_cache_stats(request: Request) -> dict[str, object]:
    """Return content and FAQ cache occupancy."""
    container: AppContainer = get_container(request)
    return {
        "content": _cache_stats(container.content_service.cache_stats()),
        "faqs": _cache_stats(container.faq_service.cache_stats()),
    }


@router.delete("/content/cache")
async def clear_content_cache(request: Request) -> dict[str, str]:
    """Drop every cached content and FAQ entry."""
    container: AppContainer = get_container(request)
    container.content_service.clear_cache()
    container.faq_service.clear_cache()
    return {"status": "cleared"}


def _cache_stats(stats: CacheStats) -> dict[str, int]:
    return {"size": stats.size, "maxAgeSeconds": stats.max_age_seconds}
