"""Localized page content with a TTL cache."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol

from charter_broker.domain.content import ContentItem, PageContent, PageSummary
from charter_broker.services.cache import CacheStats, InMemoryCache

logger = logging.getLogger(__name__)

SUPPORTED_LOCALES = ("es", "en", "pt")


class ContentRepository(Protocol):
    """Read interface for published page content."""

    def list_page_items(self, page_slug: str, locale: str) -> list[ContentItem]:
        """Return published items for a page and locale ordered by key."""

    def list_published_index(self) -> list[tuple[str, str, datetime]]:
        """Return (page_slug, locale, updated_at) for every published item."""


def normalize_slug(page_slug: str) -> str:
    """Lowercase and strip whitespace and surrounding slashes."""
    return page_slug.strip().lower().strip("/")


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ContentService:
    """Serves page copy per locale, falling back to the default locale."""

    repository: ContentRepository
    default_locale: str = "es"
    ttl_seconds: int = 3600
    clock: Callable[[], datetime] = _utcnow
    cache: InMemoryCache = field(default_factory=InMemoryCache)

    def resolve_locale(self, locale: str) -> str:
        return locale if locale in SUPPORTED_LOCALES else self.default_locale

    def get_page_content(self, page_slug: str, locale: str) -> PageContent:
        """Return a page's content, served from cache when fresh."""
        locale = self.resolve_locale(locale)
        slug = normalize_slug(page_slug)
        cache_key = f"{slug}_{locale}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, PageContent):
            return replace(cached, from_cache=True)

        items = self.repository.list_page_items(slug, locale)
        resolved_locale = locale
        fallback_used = False
        if not items and locale != self.default_locale:
            fallback = self.repository.list_page_items(slug, self.default_locale)
            if fallback:
                items = fallback
                resolved_locale = self.default_locale
                fallback_used = True
                logger.info(
                    "Content fallback used",
                    extra={"page": slug, "locale": locale, "fallback": resolved_locale},
                )
        page = PageContent(
            page_slug=slug,
            locale=resolved_locale,
            content=items,
            last_updated=self.clock(),
            fallback_used=fallback_used,
        )
        self.cache.set(cache_key, page, self.ttl_seconds)
        return page

    def get_content_by_key(
        self, page_slug: str, key: str, locale: str
    ) -> ContentItem | None:
        """Return one content item of a page, if present."""
        page = self.get_page_content(page_slug, locale)
        return next((item for item in page.content if item.key == key), None)

    def get_all_page_content(self, page_slug: str) -> dict[str, PageContent]:
        """Return a page's content for every supported locale."""
        return {
            locale: self.get_page_content(page_slug, locale)
            for locale in SUPPORTED_LOCALES
        }

    def list_pages(self) -> list[PageSummary]:
        """Summarize published content per page and locale."""
        counts: dict[str, dict[str, int]] = {}
        latest: dict[str, datetime] = {}
        for slug, locale, updated_at in self.repository.list_published_index():
            locales = counts.setdefault(slug, {})
            locales[locale] = locales.get(locale, 0) + 1
            if slug not in latest or updated_at > latest[slug]:
                latest[slug] = updated_at
        return [
            PageSummary(
                page_slug=slug,
                locales=locales,
                total_items=sum(locales.values()),
                last_updated=latest.get(slug),
            )
            for slug, locales in sorted(counts.items())
        ]

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()
