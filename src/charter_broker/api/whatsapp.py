"""WhatsApp deep link endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Query, Request

from charter_broker.api.requests import client_ip, get_container
from charter_broker.api.schemas import WhatsAppLinkBody
from charter_broker.api.serializers import serialize_click
from charter_broker.domain.errors import NotFoundError
from charter_broker.domain.whatsapp import WhatsAppLinkRequest
from charter_broker.services.rate_limit import enforce

if TYPE_CHECKING:
    from charter_broker.containers import AppContainer

router = APIRouter(prefix="/whatsapp", tags=["whatsapp"])

_UTM_FIELDS = ("utm_source", "utm_medium", "utm_campaign")


@router.post("/link")
async def create_link(body: WhatsAppLinkBody, request: Request) -> dict[str, object]:
    """Build a WhatsApp link and record the click."""
    container: AppContainer = get_container(request)
    ip_address = client_ip(request)
    limit = container.settings.whatsapp_rate_limit
    enforce(
        container.whatsapp_rate_limiter,
        f"whatsapp:{ip_address}",
        f"Rate limit exceeded. Maximum {limit} WhatsApp link requests per hour.",
    )
    data = body.model_dump()
    data.update(_utm_params(request, data))
    link = container.whatsapp_service.generate_link(
        WhatsAppLinkRequest(**data), ip_address=ip_address
    )
    return {
        "success": True,
        "clickId": str(link.click_id),
        "whatsappUrl": link.whatsapp_url,
        "message": link.message,
        "metadata": {"type": body.type, "locale": body.locale},
    }


@router.get("/link")
async def link_status(
    request: Request,
    click_id: UUID | None = Query(default=None, alias="clickId"),
    timeframe: str = "today",
) -> dict[str, object]:
    """Return one click by id, or click statistics for a timeframe."""
    container: AppContainer = get_container(request)
    if click_id is not None:
        click = container.whatsapp_service.get_click(click_id)
        if click is None:
            raise NotFoundError("Click not found", clickId=str(click_id))
        return {"success": True, "click": serialize_click(click)}
    stats = container.whatsapp_service.click_statistics(timeframe)
    return {
        "status": "healthy",
        "timeframe": stats.timeframe,
        "statistics": {
            "totalClicks": stats.total_clicks,
            "clicksByLocale": stats.clicks_by_locale,
            "clicksBySource": stats.clicks_by_source,
            "topPages": stats.top_pages,
        },
    }


def _utm_params(request: Request, data: dict[str, object]) -> dict[str, object]:
    """Resolve UTM values from the body, then the query string, then headers."""
    resolved: dict[str, object] = {}
    for name in _UTM_FIELDS:
        header = name.replace("_", "-")
        resolved[name] = (
            data.get(name)
            or request.query_params.get(name)
            or request.headers.get(header)
        )
    if not resolved["utm_source"]:
        referer = request.headers.get("referer", "")
        if "google" in referer:
            resolved["utm_source"] = "google"
        elif "facebook" in referer:
            resolved["utm_source"] = "facebook"
    return resolved
