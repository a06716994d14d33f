"""Published FAQs per locale."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from charter_broker.domain.content import Faq, FaqCategory, FaqSearchResult
from charter_broker.services.cache import CacheStats, InMemoryCache
from charter_broker.services.content import SUPPORTED_LOCALES

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


class FaqRepository(Protocol):
    """Read interface for published FAQs."""

    def list_faqs(
        self,
        locale: str,
        category: str | None,
        search: str | None,
        limit: int | None,
    ) -> list[Faq]:
        """Return FAQs ordered by category, sort order and question."""

    def list_categories(self, locale: str) -> list[str]:
        """Return distinct categories for a locale in alphabetical order."""

    def count_by_locale(self) -> dict[str, int]:
        """Return the number of published FAQs per locale."""


@dataclass
class FaqStatistics:
    """FAQ counts for a locale."""

    locale: str
    total_faqs: int
    total_categories: int
    faqs_by_locale: dict[str, int] = field(default_factory=dict)
    categories_count: dict[str, int] = field(default_factory=dict)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class FaqService:
    """Serves FAQs with locale fallback and caching."""

    repository: FaqRepository
    default_locale: str = "es"
    ttl_seconds: int = 3600
    clock: Callable[[], datetime] = _utcnow
    cache: InMemoryCache = field(default_factory=InMemoryCache)

    def get_faqs(
        self,
        locale: str,
        category: str | None = None,
        search: str | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> FaqSearchResult:
        """Return FAQs for a locale filtered by category and search text."""
        locale = self._resolve_locale(locale)
        cache_key = f"faqs_{locale}_{category or 'all'}_{search or 'none'}_{limit}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FaqSearchResult):
            return cached

        faqs = self.repository.list_faqs(locale, category, search, limit)
        resolved_locale = locale
        if not faqs and locale != self.default_locale:
            fallback = self.repository.list_faqs(
                self.default_locale, category, search, limit
            )
            if fallback:
                faqs = fallback
                resolved_locale = self.default_locale
                logger.info(
                    "FAQ fallback used",
                    extra={"locale": locale, "fallback": resolved_locale},
                )
        result = FaqSearchResult(
            locale=resolved_locale,
            faqs=faqs,
            categories=self.repository.list_categories(resolved_locale),
            fetched_at=self.clock(),
            category=category,
            search=search,
            fallback_used=resolved_locale != locale,
        )
        self.cache.set(cache_key, result, self.ttl_seconds)
        return result

    def get_faqs_by_category(self, locale: str) -> list[FaqCategory]:
        """Return every FAQ for a locale grouped by category."""
        locale = self._resolve_locale(locale)
        cache_key = f"faqs_by_category_{locale}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached
        groups: dict[str, list[Faq]] = {}
        for faq in self._all_faqs(locale):
            groups.setdefault(faq.category, []).append(faq)
        result = [
            FaqCategory(category=category, faqs=faqs)
            for category, faqs in groups.items()
        ]
        self.cache.set(cache_key, result, self.ttl_seconds)
        return result

    def get_categories(self, locale: str) -> list[str]:
        """Return the categories available for a locale."""
        return self.repository.list_categories(self._resolve_locale(locale))

    def schema_data(
        self, locale: str, category: str | None = None
    ) -> dict[str, object]:
        """Return schema.org FAQPage structured data."""
        result = self.get_faqs(locale, category)
        return {
            "@context": "https://schema.org",
            "@type": "FAQPage",
            "mainEntity": [
                {
                    "@type": "Question",
                    "name": faq.question,
                    "acceptedAnswer": {"@type": "Answer", "text": faq.answer},
                }
                for faq in result.faqs
            ],
        }

    def statistics(self, locale: str) -> FaqStatistics:
        """Return FAQ counts for a locale and across locales."""
        locale = self._resolve_locale(locale)
        faqs = self.repository.list_faqs(locale, None, None, None)
        categories: dict[str, int] = {}
        for faq in faqs:
            categories[faq.category] = categories.get(faq.category, 0) + 1
        return FaqStatistics(
            locale=locale,
            total_faqs=len(faqs),
            total_categories=len(categories),
            faqs_by_locale=self.repository.count_by_locale(),
            categories_count=categories,
        )

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def _all_faqs(self, locale: str) -> list[Faq]:
        faqs = self.repository.list_faqs(locale, None, None, None)
        if not faqs and locale != self.default_locale:
            return self.repository.list_faqs(self.default_locale, None, None, None)
        return faqs

    def _resolve_locale(self, locale: str) -> str:
        return locale if locale in SUPPORTED_LOCALES else self.default_locale
