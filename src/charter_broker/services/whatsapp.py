"""WhatsApp deep link generation and click attribution."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from urllib.parse import quote
from uuid import UUID

from charter_broker.domain.errors import InternalError, ValidationError
from charter_broker.domain.whatsapp import (
    WhatsAppClick,
    WhatsAppLink,
    WhatsAppLinkRequest,
)

logger = logging.getLogger(__name__)

LINK_TYPES = ("general", "quote", "contact")
LOCALES = ("es", "en", "pt")
TIMEFRAMES = ("today", "week", "month")

SERVICE_TYPES = {
    "es": {
        "charter": "Charter",
        "multicity": "Multi-ciudad",
        "helicopter": "Helicóptero",
        "medical": "Médico",
        "cargo": "Carga",
        "other": "Otro",
    },
    "en": {
        "charter": "Charter",
        "multicity": "Multi-city",
        "helicopter": "Helicopter",
        "medical": "Medical",
        "cargo": "Cargo",
        "other": "Other",
    },
    "pt": {
        "charter": "Charter",
        "multicity": "Multi-cidade",
        "helicopter": "Helicóptero",
        "medical": "Médico",
        "cargo": "Carga",
        "other": "Outro",
    },
}

ADDITIONAL_SERVICES = {
    "es": {
        "international_support": "Apoyo vuelos internacionales",
        "country_documentation": "Documentación por país",
        "pet_friendly_transport": "Transporte pet-friendly",
        "ground_transfer_driver": "Transfer terrestre / chofer",
        "premium_catering": "Catering premium",
        "vip_lounge_fbo": "Sala VIP / FBO específico",
        "customs_immigration_assist": "Asistencia migraciones/aduana",
    },
    "en": {
        "international_support": "International flight support",
        "country_documentation": "Country documentation",
        "pet_friendly_transport": "Pet-friendly transport",
        "ground_transfer_driver": "Ground transfer / driver",
        "premium_catering": "Premium catering",
        "vip_lounge_fbo": "VIP lounge / specific FBO",
        "customs_immigration_assist": "Customs/immigration assistance",
    },
    "pt": {
        "international_support": "Suporte para voos internacionais",
        "country_documentation": "Documentação por país",
        "pet_friendly_transport": "Transporte pet-friendly",
        "ground_transfer_driver": "Transfer terrestre / motorista",
        "premium_catering": "Catering premium",
        "vip_lounge_fbo": "Sala VIP / FBO específico",
        "customs_immigration_assist": "Assistência alfândega/imigração",
    },
}

_LABELS = {
    "es": {
        "services": "🛎️ **SERVICIOS ADICIONALES**",
        "comments": "💬 **COMENTARIOS ADICIONALES**",
        "special_items": "🎒 Artículos especiales",
    },
    "en": {
        "services": "🛎️ **ADDITIONAL SERVICES**",
        "comments": "💬 **ADDITIONAL COMMENTS**",
        "special_items": "🎒 Special items",
    },
    "pt": {
        "services": "🛎️ **SERVIÇOS ADICIONAIS**",
        "comments": "💬 **COMENTÁRIOS ADICIONAIS**",
        "special_items": "🎒 Itens especiais",
    },
}

TEMPLATES = {
    "general": {
        "es": (
            "¡Hola! Me interesa cotizar un vuelo privado.\n\n"
            "Mis datos de contacto:\n"
            "📧 Email: {email}\n"
            "📞 Teléfono: {phone}\n\n"
            "¡Gracias por la atención!"
        ),
        "en": (
            "Hello! I'm interested in getting a quote for a private flight.\n\n"
            "My contact information:\n"
            "📧 Email: {email}\n"
            "📞 Phone: {phone}\n\n"
            "Thank you for your attention!"
        ),
        "pt": (
            "Olá! Estou interessado em cotar um voo privado.\n\n"
            "Minhas informações de contato:\n"
            "📧 Email: {email}\n"
            "📞 Telefone: {phone}\n\n"
            "Obrigado pela atenção!"
        ),
    },
    "quote": {
        "es": (
            "¡Hola! Me interesa cotizar un vuelo privado con los siguientes "
            "detalles:\n\n"
            "✈️ **DETALLES DEL VUELO**\n"
            "🛫 Origen: {origin}\n"
            "🛬 Destino: {destination}\n"
            "📅 Fecha: {date}\n"
            "🕐 Hora: {time}\n"
            "👥 Pasajeros: {passengers}\n"
            "🎯 Servicio: {service_type}\n\n"
            "👤 **MIS DATOS**\n"
            "📧 Email: {email}\n"
            "📞 Teléfono: {phone}\n\n"
            "🧳 Equipaje estándar: {bags} piezas{special_items}"
            "{additional_services}{comments}\n\n"
            "¡Espero su cotización!"
        ),
        "en": (
            "Hello! I'm interested in getting a quote for a private flight "
            "with the following details:\n\n"
            "✈️ **FLIGHT DETAILS**\n"
            "🛫 Origin: {origin}\n"
            "🛬 Destination: {destination}\n"
            "📅 Date: {date}\n"
            "🕐 Time: {time}\n"
            "👥 Passengers: {passengers}\n"
            "🎯 Service: {service_type}\n\n"
            "👤 **MY DETAILS**\n"
            "📧 Email: {email}\n"
            "📞 Phone: {phone}\n\n"
            "🧳 Standard bags: {bags} pieces{special_items}"
            "{additional_services}{comments}\n\n"
            "Looking forward to your quote!"
        ),
        "pt": (
            "Olá! Estou interessado em cotar um voo privado com os seguintes "
            "detalhes:\n\n"
            "✈️ **DETALHES DO VOO**\n"
            "🛫 Origem: {origin}\n"
            "🛬 Destino: {destination}\n"
            "📅 Data: {date}\n"
            "🕐 Hora: {time}\n"
            "👥 Passageiros: {passengers}\n"
            "🎯 Serviço: {service_type}\n\n"
            "👤 **MEUS DADOS**\n"
            "📧 Email: {email}\n"
            "📞 Telefone: {phone}\n\n"
            "🧳 Bagagem padrão: {bags} peças{special_items}"
            "{additional_services}{comments}\n\n"
            "Aguardo sua cotação!"
        ),
    },
    "contact": {
        "es": (
            "¡Hola! Tengo una consulta sobre sus servicios de aviación privada.\n\n"
            "📋 **ASUNTO**: {subject}\n\n"
            "💬 **MENSAJE**:\n{message}\n\n"
            "👤 **MIS DATOS**\n"
            "📧 Email: {email}\n"
            "📞 Teléfono: {phone}\n\n"
            "¡Gracias por la atención!"
        ),
        "en": (
            "Hello! I have a question about your private aviation services.\n\n"
            "📋 **SUBJECT**: {subject}\n\n"
            "💬 **MESSAGE**:\n{message}\n\n"
            "👤 **MY DETAILS**\n"
            "📧 Email: {email}\n"
            "📞 Phone: {phone}\n\n"
            "Thank you for your attention!"
        ),
        "pt": (
            "Olá! Tenho uma consulta sobre seus serviços de aviação privada.\n\n"
            "📋 **ASSUNTO**: {subject}\n\n"
            "💬 **MENSAGEM**:\n{message}\n\n"
            "👤 **MEUS DADOS**\n"
            "📧 Email: {email}\n"
            "📞 Telefone: {phone}\n\n"
            "Obrigado pela atenção!"
        ),
    },
}


class WhatsAppClickRepository(Protocol):
    """Persistence interface for WhatsApp click attribution."""

    def create_click(self, payload: dict[str, object]) -> WhatsAppClick:
        """Insert a click record and return it."""

    def get_click(self, click_id: UUID) -> WhatsAppClick | None:
        """Return a click by id, if present."""

    def list_clicks(self, since: datetime) -> list[WhatsAppClick]:
        """Return clicks recorded since a timestamp."""


@dataclass
class ClickStatistics:
    """Click attribution counts for a timeframe."""

    timeframe: str
    total_clicks: int
    clicks_by_locale: dict[str, int] = field(default_factory=dict)
    clicks_by_source: dict[str, int] = field(default_factory=dict)
    top_pages: list[dict[str, object]] = field(default_factory=list)


def validate_request(request: WhatsAppLinkRequest) -> None:
    """Raise ValidationError when a request lacks fields for its type."""
    if request.type not in LINK_TYPES:
        raise ValidationError("Type must be one of: general, quote, contact")
    if request.locale not in LOCALES:
        raise ValidationError("Locale must be one of: es, en, pt")
    if request.type == "quote":
        for name in ("origin", "destination", "date"):
            if not getattr(request, name):
                raise ValidationError(
                    f"{name.capitalize()} is required for quote type"
                )
        if not request.passengers or request.passengers < 1:
            raise ValidationError(
                "Valid passenger count is required for quote type"
            )
    if request.type == "contact" and not request.message:
        raise ValidationError("Message is required for contact type")


def render_message(request: WhatsAppLinkRequest) -> str:
    """Interpolate request details into the localized template."""
    labels = _LABELS[request.locale]
    values: dict[str, object] = {
        "email": request.email or "",
        "phone": request.phone or "",
        "origin": request.origin or "",
        "destination": request.destination or "",
        "date": request.date or "",
        "time": request.time or "",
        "passengers": request.passengers or "",
        "bags": request.bags or 0,
        "service_type": SERVICE_TYPES[request.locale].get(
            request.service_type or "", request.service_type or ""
        ),
        "special_items": (
            f"\n{labels['special_items']}: {request.special_items}"
            if request.special_items
            else ""
        ),
        "additional_services": _format_services(
            request.additional_services, request.locale
        ),
        "comments": (
            f"\n\n{labels['comments']}\n{request.comments}" if request.comments else ""
        ),
        "subject": request.subject or "",
        "message": request.message or "",
    }
    return TEMPLATES[request.type][request.locale].format_map(values)


def build_url(phone: str, message: str) -> str:
    """Return the wa.me deep link for a message."""
    return f"https://wa.me/{phone}?text={quote(message, safe='')}"


def _format_services(services: list[str], locale: str) -> str:
    if not services:
        return ""
    translations = ADDITIONAL_SERVICES[locale]
    lines = "\n".join(f"• {translations.get(item, item)}" for item in services)
    return f"\n\n{_LABELS[locale]['services']}\n{lines}"


@dataclass
class WhatsAppService:
    """Builds deep links and records click attribution."""

    repository: WhatsAppClickRepository
    business_phone: str

    def generate_link(
        self, request: WhatsAppLinkRequest, ip_address: str | None = None
    ) -> WhatsAppLink:
        """Validate, render and persist one link request."""
        validate_request(request)
        message = render_message(request)
        try:
            click = self.repository.create_click(
                {
                    "session_id": request.session_id,
                    "page_source": request.page_source,
                    "utm_source": request.utm_source,
                    "utm_medium": request.utm_medium,
                    "utm_campaign": request.utm_campaign,
                    "ip_address": ip_address,
                    "locale": request.locale,
                }
            )
        except Exception as exc:
            logger.exception(
                "Failed to store WhatsApp click", extra={"type": request.type}
            )
            raise InternalError("Failed to generate WhatsApp link") from exc
        return WhatsAppLink(
            click_id=click.id,
            whatsapp_url=build_url(self.business_phone, message),
            message=message,
        )

    def get_click(self, click_id: UUID) -> WhatsAppClick | None:
        """Return a stored click, if present."""
        return self.repository.get_click(click_id)

    def click_statistics(
        self, timeframe: str = "today", now: datetime | None = None
    ) -> ClickStatistics:
        """Aggregate clicks by locale, source and page for a timeframe."""
        if timeframe not in TIMEFRAMES:
            raise ValidationError("Timeframe must be one of: today, week, month")
        now = now or datetime.now(tz=UTC)
        clicks = self.repository.list_clicks(_timeframe_start(timeframe, now))
        pages = Counter(click.page_source or "unknown" for click in clicks)
        return ClickStatistics(
            timeframe=timeframe,
            total_clicks=len(clicks),
            clicks_by_locale=dict(Counter(click.locale for click in clicks)),
            clicks_by_source=dict(
                Counter(click.utm_source or "direct" for click in clicks)
            ),
            top_pages=[
                {"page": page, "clicks": count} for page, count in pages.most_common(10)
            ],
        )


def _timeframe_start(timeframe: str, now: datetime) -> datetime:
    if timeframe == "week":
        return now - timedelta(days=7)
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if timeframe == "month":
        return start_of_day.replace(day=1)
    return start_of_day
