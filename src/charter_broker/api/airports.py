"""Airport search for the quote form's route fields."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from charter_broker.api.requests import get_container
from charter_broker.api.serializers import serialize_airport

if TYPE_CHECKING:
    from charter_broker.containers import AppContainer

router = APIRouter(tags=["airports"])


@router.get("/airports")
async def search_airports(request: Request, search: str = "") -> dict[str, object]:
    """Return airports matching a code, name, city or country fragment."""
    container: AppContainer = get_container(request)
    results = container.airport_service.search(search)
    return {
        "success": True,
        "query": search,
        "results": [serialize_airport(airport) for airport in results],
        "count": len(results),
    }
