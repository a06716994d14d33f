"""Inbound provider webhooks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, Request

from charter_broker.api.admin import require_admin
from charter_broker.api.requests import get_container

if TYPE_CHECKING:
    from charter_broker.containers import AppContainer

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/resend")
async def resend_webhook(
    request: Request,
    resend_signature: str | None = Header(default=None),
) -> dict[str, object]:
    """Apply a Resend delivery event to its email record."""
    container: AppContainer = get_container(request)
    raw_body = await request.body()
    result = container.webhook_service.ingest(raw_body, resend_signature)
    response: dict[str, object] = {
        "success": True,
        "processed": result.processed,
        "outcome": result.outcome,
        "eventType": result.event_type,
        "emailId": result.email_id,
        "status": result.status,
    }
    if result.warning:
        response["warning"] = result.warning
    return response


@router.get("/resend", dependencies=[Depends(require_admin)])
async def resend_webhook_stats(request: Request, hours: int = 24) -> dict[str, object]:
    """Return recent webhook activity."""
    container: AppContainer = get_container(request)
    stats = container.webhook_service.statistics(hours)
    return {
        "status": "healthy",
        "hours": stats.hours,
        "totalEvents": stats.total_events,
        "processed": stats.processed,
        "failed": stats.failed,
        "byEventType": stats.by_event_type,
        "byStatus": stats.by_status,
        "recentErrors": stats.recent_errors,
    }
