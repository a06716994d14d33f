"""Cache-backed content and FAQ endpoints."""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, Response

from charter_broker.api.requests import get_container
from charter_broker.api.serializers import (
    serialize_content_item,
    serialize_faq,
    serialize_page,
)
from charter_broker.domain.errors import NotFoundError
from charter_broker.services.faqs import DEFAULT_LIMIT

if TYPE_CHECKING:
    from datetime import datetime

    from charter_broker.containers import AppContainer

router = APIRouter(tags=["content"])

CACHE_CONTROL = "public, max-age=3600, stale-while-revalidate=86400"


@router.get("/content/{page}/{locale}")
async def page_content(
    page: str,
    locale: str,
    request: Request,
    response: Response,
    key: str | None = None,
    metadata: bool = False,
) -> dict[str, object]:
    """Return a page's content, or one keyed item of it."""
    container: AppContainer = get_container(request)
    if key:
        item = container.content_service.get_content_by_key(page, key, locale)
        if item is None:
            raise NotFoundError(
                "Content not found", page=page, locale=locale, key=key
            )
        body: dict[str, object] = {
            "success": True,
            "page": page,
            "locale": locale,
            "key": key,
            "content": serialize_content_item(item),
        }
        _set_cache_headers(response, etag=f"{page}-{locale}-{key}-{_digest(body)}")
        return body

    content = container.content_service.get_page_content(page, locale)
    body = {"success": True, **serialize_page(content)}
    if metadata:
        body["metadata"] = {
            "lastUpdated": content.last_updated.isoformat(),
            "fromCache": content.from_cache,
            "fallbackUsed": content.fallback_used,
            "contentCount": len(content.content),
        }
    _set_cache_headers(
        response,
        etag=f"{content.page_slug}-{content.locale}-{_stamp(content.last_updated)}",
        last_modified=content.last_updated,
    )
    return body


@router.get("/faqs/{locale}")
async def faqs(  # noqa: PLR0913
    locale: str,
    request: Request,
    response: Response,
    category: str | None = None,
    search: str | None = None,
    grouped: bool = False,
    stats: bool = False,
    schema: bool = False,
    limit: int = DEFAULT_LIMIT,
) -> dict[str, object]:
    """Return FAQs for a locale in list, grouped, schema or stats form."""
    container: AppContainer = get_container(request)
    service = container.faq_service
    if stats:
        statistics = service.statistics(locale)
        body: dict[str, object] = {
            "success": True,
            "action": "stats",
            "locale": statistics.locale,
            "statistics": {
                "totalFAQs": statistics.total_faqs,
                "totalCategories": statistics.total_categories,
                "faqsByLocale": statistics.faqs_by_locale,
                "categoriesCount": statistics.categories_count,
            },
        }
        _set_cache_headers(response, etag=f"faqs-{locale}-stats-{_digest(body)}")
        return body
    if schema:
        body = {
            "success": True,
            "action": "schema",
            "locale": locale,
            "category": category,
            "schema": service.schema_data(locale, category),
        }
        _set_cache_headers(response, etag=f"faqs-{locale}-schema-{_digest(body)}")
        return body
    if grouped:
        groups = service.get_faqs_by_category(locale)
        body = {
            "success": True,
            "action": "grouped",
            "locale": locale,
            "categories": [
                {
                    "category": group.category,
                    "count": group.count,
                    "faqs": [serialize_faq(faq) for faq in group.faqs],
                }
                for group in groups
            ],
            "totalCategories": len(groups),
            "totalFAQs": sum(group.count for group in groups),
        }
        _set_cache_headers(response, etag=f"faqs-{locale}-grouped-{_digest(body)}")
        return body

    result = service.get_faqs(locale, category, search, limit)
    body = {
        "success": True,
        "action": "list",
        "locale": result.locale,
        "faqs": [serialize_faq(faq) for faq in result.faqs],
        "total": result.total,
        "availableCategories": result.categories,
        "fallbackUsed": result.fallback_used,
        "filters": {"category": category, "search": search, "limit": limit},
    }
    if search:
        body["searchTerm"] = search
    if category:
        body["filteredByCategory"] = category
    _set_cache_headers(
        response,
        etag=(
            f"faqs-{result.locale}-{category or 'all'}-{search or 'none'}"
            f"-{_stamp(result.fetched_at)}"
        ),
    )
    return body


def _stamp(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def _digest(body: dict[str, object]) -> str:
    encoded = json.dumps(body, sort_keys=True, default=str).encode()
    return hashlib.sha256(encoded).hexdigest()[:16]


def _set_cache_headers(
    response: Response, etag: str, last_modified: datetime | None = None
) -> None:
    response.headers["Cache-Control"] = CACHE_CONTROL
    response.headers["ETag"] = f'"{etag}"'
    if last_modified is not None:
        response.headers["Last-Modified"] = last_modified.strftime(
            "%a, %d %b %Y %H:%M:%S GMT"
        )
