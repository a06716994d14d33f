"""Supabase repositories for page content and FAQs."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from charter_broker.adapters.supabase_rows import escape_filter_value, parse_datetime
from charter_broker.domain.content import ContentItem, Faq
from charter_broker.services.content import ContentRepository
from charter_broker.services.faqs import FaqRepository


@dataclass
class SupabaseContentRepository(ContentRepository):
    """Reads published rows from page_content."""

    client: Client

    def list_page_items(self, page_slug: str, locale: str) -> list[ContentItem]:
        """Return published items for a page and locale ordered by key."""
        response = (
            self.client.table("page_content")
            .select("content_key, content_value, content_type")
            .eq("page_slug", page_slug)
            .eq("locale", locale)
            .eq("is_published", True)
            .order("content_key", desc=False)
            .execute()
        )
        return [
            ContentItem(
                key=str(row["content_key"]),
                value=str(row.get("content_value") or ""),
                type=str(row.get("content_type") or "text"),
            )
            for row in response.data or []
        ]

    def list_published_index(self) -> list[tuple[str, str, datetime]]:
        """Return (page_slug, locale, updated_at) for every published item."""
        response = (
            self.client.table("page_content")
            .select("page_slug, locale, updated_at")
            .eq("is_published", True)
            .execute()
        )
        return [
            (
                str(row["page_slug"]),
                str(row["locale"]),
                parse_datetime(row.get("updated_at")),
            )
            for row in response.data or []
        ]


@dataclass
class SupabaseFaqRepository(FaqRepository):
    """Reads published rows from faqs."""

    client: Client

    def list_faqs(
        self,
        locale: str,
        category: str | None,
        search: str | None,
        limit: int | None,
    ) -> list[Faq]:
        """Return FAQs ordered by category, sort order and question."""
        query = (
            self.client.table("faqs")
            .select("id, question, answer, category, sort_order")
            .eq("locale", locale)
            .eq("is_published", True)
        )
        if category:
            query = query.eq("category", category)
        if search:
            pattern = escape_filter_value(search)
            query = query.or_(f"question.ilike.*{pattern}*,answer.ilike.*{pattern}*")
        query = (
            query.order("category", desc=False)
            .order("sort_order", desc=False)
            .order("question", desc=False)
        )
        if limit is not None:
            query = query.limit(limit)
        response = query.execute()
        return [_parse_faq(row) for row in response.data or []]

    def list_categories(self, locale: str) -> list[str]:
        """Return distinct categories for a locale in alphabetical order."""
        response = (
            self.client.table("faqs")
            .select("category")
            .eq("locale", locale)
            .eq("is_published", True)
            .execute()
        )
        return sorted({str(row["category"]) for row in response.data or []})

    def count_by_locale(self) -> dict[str, int]:
        """Return the number of published FAQs per locale."""
        response = (
            self.client.table("faqs")
            .select("locale")
            .eq("is_published", True)
            .execute()
        )
        counts: dict[str, int] = {}
        for row in response.data or []:
            locale = str(row["locale"])
            counts[locale] = counts.get(locale, 0) + 1
        return counts


def _parse_faq(row: dict[str, object]) -> Faq:
    return Faq(
        id=UUID(str(row["id"])),
        question=str(row["question"]),
        answer=str(row["answer"]),
        category=str(row.get("category") or "general"),
        sort_order=int(row.get("sort_order") or 0),
    )
