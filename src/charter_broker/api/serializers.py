"""JSON serialization of domain models for API responses."""

from datetime import datetime

from charter_broker.domain.airports import Airport
from charter_broker.domain.content import ContentItem, Faq, PageContent
from charter_broker.domain.emails import EmailDeliveryRecord
from charter_broker.domain.inquiries import ContactForm, QuoteRequest
from charter_broker.domain.payments import Payment
from charter_broker.domain.status_events import StatusChangeEvent
from charter_broker.domain.whatsapp import WhatsAppClick
from charter_broker.services.contacts import ContactWithStatus
from charter_broker.services.quotes import QuoteWithStatus
from charter_broker.services.status_log import BulkUpdateResult


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def serialize_quote(quote: QuoteRequest) -> dict[str, object]:
    return {
        "id": str(quote.id),
        "serviceType": quote.service_type,
        "fullName": quote.full_name,
        "email": quote.email,
        "phone": quote.phone,
        "passengers": quote.passengers,
        "origin": quote.origin,
        "destination": quote.destination,
        "departureDate": quote.departure_date,
        "departureTime": quote.departure_time,
        "standardBags": quote.standard_bags,
        "specialItems": quote.special_items,
        "additionalServices": quote.additional_services,
        "comments": quote.comments,
        "locale": quote.locale,
        "createdAt": _iso(quote.created_at),
        "updatedAt": _iso(quote.updated_at),
    }


def serialize_event(event: StatusChangeEvent) -> dict[str, object]:
    return {
        "id": str(event.id),
        "entityType": event.entity_type.value,
        "entityId": str(event.entity_id),
        "fromStatus": event.from_status,
        "toStatus": event.to_status,
        "adminEmail": event.actor_email,
        "adminNote": event.note,
        "changedAt": _iso(event.changed_at),
        "ipAddress": event.ip_address,
        "userAgent": event.user_agent,
    }


def serialize_quote_with_status(item: QuoteWithStatus) -> dict[str, object]:
    return {
        **serialize_quote(item.quote),
        "currentStatus": item.current_status,
        "statusHistory": [serialize_event(event) for event in item.status_history],
    }


def serialize_contact(contact: ContactForm) -> dict[str, object]:
    return {
        "id": str(contact.id),
        "fullName": contact.full_name,
        "email": contact.email,
        "phone": contact.phone,
        "subject": contact.subject,
        "message": contact.message,
        "contactViaWhatsapp": contact.contact_via_whatsapp,
        "locale": contact.locale,
        "createdAt": _iso(contact.created_at),
    }


def serialize_contact_with_status(item: ContactWithStatus) -> dict[str, object]:
    return {
        **serialize_contact(item.contact),
        "currentStatus": item.current_status,
        "statusHistory": [serialize_event(event) for event in item.status_history],
        "emailDeliveries": [
            serialize_delivery(record) for record in item.email_deliveries
        ],
        "availableActions": item.available_actions,
    }


def serialize_delivery(record: EmailDeliveryRecord) -> dict[str, object]:
    return {
        "id": str(record.id),
        "resendId": record.provider_message_id,
        "recipientEmail": record.recipient_email,
        "subject": record.subject,
        "emailType": record.email_type,
        "status": record.status,
        "createdAt": _iso(record.created_at),
        "sentAt": _iso(record.sent_at),
        "deliveredAt": _iso(record.delivered_at),
        "bouncedAt": _iso(record.bounced_at),
        "failedAt": _iso(record.failed_at),
        "errorMessage": record.error_message,
    }


def serialize_payment(payment: Payment) -> dict[str, object]:
    refund = payment.refund
    return {
        "id": str(payment.id),
        "quoteRequestId": str(payment.quote_request_id),
        "amount": float(payment.amount),
        "currency": payment.currency,
        "paymentMethod": payment.method.value,
        "paymentStatus": payment.status,
        "transactionReference": payment.transaction_reference,
        "receiptUrl": payment.receipt_url,
        "notes": payment.notes,
        "paidAt": _iso(payment.paid_at),
        "processedBy": payment.processed_by,
        "refundAmount": float(refund.amount) if refund else None,
        "refundReason": refund.reason if refund else None,
        "refundedAt": _iso(refund.refunded_at) if refund else None,
        "createdAt": _iso(payment.created_at),
        "updatedAt": _iso(payment.updated_at),
    }


def serialize_bulk_result(result: BulkUpdateResult) -> dict[str, object]:
    return {
        "updated": [serialize_event(event) for event in result.updated],
        "failed": result.failed,
        "successCount": len(result.updated),
        "failureCount": len(result.failed),
    }


def serialize_click(click: WhatsAppClick) -> dict[str, object]:
    return {
        "id": str(click.id),
        "locale": click.locale,
        "sessionId": click.session_id,
        "pageSource": click.page_source,
        "utmSource": click.utm_source,
        "utmMedium": click.utm_medium,
        "utmCampaign": click.utm_campaign,
        "ipAddress": click.ip_address,
        "createdAt": _iso(click.created_at),
    }


def serialize_content_item(item: ContentItem) -> dict[str, object]:
    return {"key": item.key, "value": item.value, "type": item.type}


def serialize_page(page: PageContent) -> dict[str, object]:
    return {
        "page": page.page_slug,
        "locale": page.locale,
        "content": [serialize_content_item(item) for item in page.content],
    }


def serialize_faq(faq: Faq) -> dict[str, object]:
    return {
        "id": str(faq.id),
        "question": faq.question,
        "answer": faq.answer,
        "category": faq.category,
        "sortOrder": faq.sort_order,
    }


def serialize_airport(airport: Airport) -> dict[str, object]:
    return {
        "code": airport.code,
        "name": airport.name,
        "city": airport.city,
        "country": airport.country,
        "region": airport.region,
        "isPopular": airport.is_popular,
    }
