"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from charter_broker.adapters.recaptcha_client import HttpxRecaptchaClient
from charter_broker.adapters.resend_client import HttpxResendClient
from charter_broker.adapters.supabase_airport_repository import (
    SupabaseAirportRepository,
)
from charter_broker.adapters.supabase_contact_repository import (
    SupabaseContactRepository,
)
from charter_broker.adapters.supabase_content_repository import (
    SupabaseContentRepository,
    SupabaseFaqRepository,
)
from charter_broker.adapters.supabase_email_delivery_repository import (
    SupabaseEmailDeliveryRepository,
)
from charter_broker.adapters.supabase_payment_repository import (
    SupabasePaymentRepository,
)
from charter_broker.adapters.supabase_quote_repository import SupabaseQuoteRepository
from charter_broker.adapters.supabase_status_event_repository import (
    SupabaseStatusEventRepository,
)
from charter_broker.adapters.supabase_webhook_log_repository import (
    SupabaseWebhookLogRepository,
)
from charter_broker.adapters.supabase_whatsapp_click_repository import (
    SupabaseWhatsAppClickRepository,
)
from charter_broker.config import Settings
from charter_broker.services.airports import AirportService
from charter_broker.services.captcha import CaptchaVerifier
from charter_broker.services.contacts import ContactService
from charter_broker.services.content import ContentService
from charter_broker.services.email import EmailService
from charter_broker.services.email_delivery import EmailDeliveryTracker
from charter_broker.services.faqs import FaqService
from charter_broker.services.payments import PaymentService
from charter_broker.services.quotes import QuoteService
from charter_broker.services.rate_limit import InMemoryRateLimiter, RateLimiter
from charter_broker.services.status_log import StatusChangeLog
from charter_broker.services.webhooks import ResendWebhookService
from charter_broker.services.whatsapp import WhatsAppService

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    status_log: StatusChangeLog
    airport_service: AirportService
    captcha_verifier: CaptchaVerifier
    quote_service: QuoteService
    contact_service: ContactService
    payment_service: PaymentService
    delivery_tracker: EmailDeliveryTracker
    webhook_service: ResendWebhookService
    whatsapp_service: WhatsAppService
    content_service: ContentService
    faq_service: FaqService
    whatsapp_rate_limiter: RateLimiter
    intake_rate_limiter: RateLimiter
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    quote_repository = SupabaseQuoteRepository(supabase_client)
    delivery_repository = SupabaseEmailDeliveryRepository(supabase_client)
    status_log = StatusChangeLog(SupabaseStatusEventRepository(supabase_client))
    delivery_tracker = EmailDeliveryTracker(delivery_repository)
    resend_client = (
        HttpxResendClient.create(
            api_key=resolved_settings.resend_api_key,
            base_url=resolved_settings.resend_base_url,
        )
        if resolved_settings.resend_api_key
        else None
    )
    email_service = EmailService(
        tracker=delivery_tracker,
        client=resend_client,
        sender=resolved_settings.email_from,
        business_email=resolved_settings.business_email,
    )
    airport_service = AirportService(SupabaseAirportRepository(supabase_client))
    recaptcha_client = (
        HttpxRecaptchaClient.create(
            secret_key=resolved_settings.recaptcha_secret_key,
            verify_url=resolved_settings.recaptcha_verify_url,
        )
        if resolved_settings.recaptcha_secret_key
        else None
    )
    if recaptcha_client is None:
        logger.warning("reCAPTCHA secret not configured, intake verification disabled")
    captcha_verifier = CaptchaVerifier(
        client=recaptcha_client,
        score_threshold=resolved_settings.recaptcha_score_threshold,
    )
    quote_service = QuoteService(
        repository=quote_repository,
        status_log=status_log,
        airports=airport_service,
        email_service=email_service,
    )
    contact_service = ContactService(
        repository=SupabaseContactRepository(supabase_client),
        status_log=status_log,
        delivery_repository=delivery_repository,
        email_service=email_service,
    )
    payment_service = PaymentService(
        repository=SupabasePaymentRepository(supabase_client),
        quote_repository=quote_repository,
        status_log=status_log,
    )
    webhook_service = ResendWebhookService(
        tracker=delivery_tracker,
        log_repository=SupabaseWebhookLogRepository(supabase_client),
        secret=resolved_settings.resend_webhook_secret,
        insecure=resolved_settings.resend_webhook_insecure,
    )
    whatsapp_service = WhatsAppService(
        repository=SupabaseWhatsAppClickRepository(supabase_client),
        business_phone=resolved_settings.whatsapp_business_phone,
    )
    content_service = ContentService(
        repository=SupabaseContentRepository(supabase_client),
        default_locale=resolved_settings.default_locale,
        ttl_seconds=resolved_settings.content_cache_ttl_seconds,
    )
    faq_service = FaqService(
        repository=SupabaseFaqRepository(supabase_client),
        default_locale=resolved_settings.default_locale,
        ttl_seconds=resolved_settings.content_cache_ttl_seconds,
    )

    async def close_resources() -> None:
        if resend_client is not None:
            await resend_client.close()
        if recaptcha_client is not None:
            await recaptcha_client.close()

    return AppContainer(
        settings=resolved_settings,
        status_log=status_log,
        airport_service=airport_service,
        captcha_verifier=captcha_verifier,
        quote_service=quote_service,
        contact_service=contact_service,
        payment_service=payment_service,
        delivery_tracker=delivery_tracker,
        webhook_service=webhook_service,
        whatsapp_service=whatsapp_service,
        content_service=content_service,
        faq_service=faq_service,
        whatsapp_rate_limiter=InMemoryRateLimiter(
            limit=resolved_settings.whatsapp_rate_limit,
            window_seconds=resolved_settings.whatsapp_rate_window_seconds,
        ),
        intake_rate_limiter=InMemoryRateLimiter(
            limit=resolved_settings.intake_rate_limit,
            window_seconds=resolved_settings.intake_rate_window_seconds,
        ),
        close_resources=close_resources,
    )
