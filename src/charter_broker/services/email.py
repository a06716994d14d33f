"""Outbound email with delivery tracking."""

import logging
from dataclasses import dataclass

from charter_broker.adapters.resend_client import EmailClient
from charter_broker.domain.emails import EmailDeliveryRecord
from charter_broker.domain.inquiries import ContactForm, QuoteRequest
from charter_broker.services.email_delivery import EmailDeliveryTracker

logger = logging.getLogger(__name__)

_QUOTE_NOTIFICATION_SUBJECTS = {
    "es": "Nueva cotización – {origin}-{destination} / {date}",
    "en": "New quote request – {origin}-{destination} / {date}",
    "pt": "Nova cotação – {origin}-{destination} / {date}",
}

_QUOTE_CONFIRMATION_SUBJECTS = {
    "es": "Confirmación de cotización recibida",
    "en": "Quote request confirmation",
    "pt": "Confirmação de cotação recebida",
}

_CONTACT_NOTIFICATION_SUBJECTS = {
    "es": "Nueva consulta – {subject}",
    "en": "New inquiry – {subject}",
    "pt": "Nova consulta – {subject}",
}

_CONFIRMATION_BODIES = {
    "es": (
        "Hola {name},\n\nRecibimos tu solicitud {origin} → {destination} "
        "para el {date}. Un asesor te contactará a la brevedad.\n\nFly-Fleet"
    ),
    "en": (
        "Hello {name},\n\nWe received your request {origin} → {destination} "
        "for {date}. An advisor will contact you shortly.\n\nFly-Fleet"
    ),
    "pt": (
        "Olá {name},\n\nRecebemos sua solicitação {origin} → {destination} "
        "para {date}. Um consultor entrará em contato em breve.\n\nFly-Fleet"
    ),
}


@dataclass
class EmailService:
    """Sends transactional email and records each delivery."""

    tracker: EmailDeliveryTracker
    client: EmailClient | None
    sender: str
    business_email: str

    async def send(  # noqa: PLR0913
        self,
        recipient: str,
        subject: str,
        text: str,
        email_type: str,
        quote: QuoteRequest | None = None,
        contact: ContactForm | None = None,
    ) -> EmailDeliveryRecord:
        """Send one email; provider failures mark the record failed."""
        record = self.tracker.create(
            recipient_email=recipient,
            subject=subject,
            email_type=email_type,
            quote_request_id=quote.id if quote else None,
            contact_form_id=contact.id if contact else None,
        )
        if self.client is None:
            logger.warning(
                "Email client not configured", extra={"delivery_id": str(record.id)}
            )
            return self.tracker.mark_failed(record, "Email client not configured")
        try:
            message_id = await self.client.send_email(
                sender=self.sender, to=[recipient], subject=subject, text=text
            )
        except Exception as exc:
            logger.exception(
                "Email send failed",
                extra={"delivery_id": str(record.id), "email_type": email_type},
            )
            return self.tracker.mark_failed(record, f"{type(exc).__name__}: {exc}")
        return self.tracker.mark_sent(record, message_id)

    async def send_quote_notification(
        self, quote: QuoteRequest
    ) -> EmailDeliveryRecord:
        """Notify the operations inbox about a new quote request."""
        subject = _localized(_QUOTE_NOTIFICATION_SUBJECTS, quote.locale).format(
            origin=quote.origin,
            destination=quote.destination,
            date=quote.departure_date,
        )
        lines = [
            f"Request: {quote.id}",
            f"Service: {quote.service_type}",
            f"Route: {quote.origin} → {quote.destination}",
            f"Date: {quote.departure_date} {quote.departure_time or ''}".rstrip(),
            f"Passengers: {quote.passengers}",
            f"Name: {quote.full_name}",
            f"Email: {quote.email}",
            f"Phone: {quote.phone or '-'}",
        ]
        if quote.additional_services:
            services = ", ".join(quote.additional_services)
            lines.append(f"Additional services: {services}")
        if quote.comments:
            lines.append(f"Comments: {quote.comments}")
        return await self.send(
            recipient=self.business_email,
            subject=subject,
            text="\n".join(lines),
            email_type="quote_notification",
            quote=quote,
        )

    async def send_quote_confirmation(
        self, quote: QuoteRequest
    ) -> EmailDeliveryRecord:
        """Confirm receipt of a quote request to the customer."""
        text = _localized(_CONFIRMATION_BODIES, quote.locale).format(
            name=quote.full_name,
            origin=quote.origin,
            destination=quote.destination,
            date=quote.departure_date,
        )
        return await self.send(
            recipient=quote.email,
            subject=_localized(_QUOTE_CONFIRMATION_SUBJECTS, quote.locale),
            text=text,
            email_type="quote_confirmation",
            quote=quote,
        )

    async def send_contact_notification(
        self, contact: ContactForm
    ) -> EmailDeliveryRecord:
        """Notify the operations inbox about a new inquiry."""
        subject = _localized(_CONTACT_NOTIFICATION_SUBJECTS, contact.locale).format(
            subject=contact.subject or contact.full_name
        )
        text = "\n".join(
            [
                f"From: {contact.full_name} <{contact.email}>",
                f"Phone: {contact.phone or '-'}",
                f"WhatsApp: {'yes' if contact.contact_via_whatsapp else 'no'}",
                "",
                contact.message,
            ]
        )
        return await self.send(
            recipient=self.business_email,
            subject=subject,
            text=text,
            email_type="contact_notification",
            contact=contact,
        )


def _localized(options: dict[str, str], locale: str) -> str:
    return options.get(locale, options["es"])
