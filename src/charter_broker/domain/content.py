"""Page content and FAQ models."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class ContentItem:
    """One keyed block of page copy."""

    key: str
    value: str
    type: str = "text"


@dataclass(frozen=True)
class PageContent:
    """All published content for a page in one locale."""

    page_slug: str
    locale: str
    content: list[ContentItem]
    last_updated: datetime
    from_cache: bool = False
    fallback_used: bool = False


@dataclass(frozen=True)
class PageSummary:
    """Published content counts for a page across locales."""

    page_slug: str
    locales: dict[str, int]
    total_items: int
    last_updated: datetime | None


@dataclass(frozen=True)
class Faq:
    """A published question and answer."""

    id: UUID
    question: str
    answer: str
    category: str
    sort_order: int


@dataclass(frozen=True)
class FaqSearchResult:
    """FAQ listing for a locale, optionally filtered."""

    locale: str
    faqs: list[Faq]
    categories: list[str]
    fetched_at: datetime
    category: str | None = None
    search: str | None = None
    fallback_used: bool = False

    @property
    def total(self) -> int:
        return len(self.faqs)


@dataclass(frozen=True)
class FaqCategory:
    """FAQs grouped under one category."""

    category: str
    faqs: list[Faq] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.faqs)
