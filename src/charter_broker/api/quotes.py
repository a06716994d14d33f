"""Quote and contact intake plus the token-authenticated status endpoint."""

from __future__ import annotations

import hmac
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request

from charter_broker.api.admin import require_admin
from charter_broker.api.requests import client_ip, get_container, user_agent
from charter_broker.api.schemas import (
    ContactSubmission,
    QuoteStatusUpdate,
    QuoteSubmission,
)
from charter_broker.api.serializers import (
    serialize_contact,
    serialize_event,
    serialize_quote,
    serialize_quote_with_status,
)
from charter_broker.config import parse_admin_emails
from charter_broker.domain.errors import AuthError, ForbiddenError
from charter_broker.services.rate_limit import enforce

if TYPE_CHECKING:
    from charter_broker.containers import AppContainer

router = APIRouter(tags=["quotes"])


@router.post("/quotes", status_code=201)
async def submit_quote(body: QuoteSubmission, request: Request) -> dict[str, object]:
    """Accept a quote request from the public form."""
    container: AppContainer = get_container(request)
    enforce(
        container.intake_rate_limiter,
        f"quote:{client_ip(request)}",
        "Too many quote requests. Please try again later.",
    )
    await container.captcha_verifier.ensure_human(
        body.recaptcha_token, "quote_request", client_ip(request)
    )
    quote = await container.quote_service.submit(
        body.model_dump(exclude={"recaptcha_token"})
    )
    return {"success": True, "quote": serialize_quote(quote)}


@router.post("/contacts", status_code=201)
async def submit_contact(
    body: ContactSubmission, request: Request
) -> dict[str, object]:
    """Accept a general inquiry from the contact form."""
    container: AppContainer = get_container(request)
    enforce(
        container.intake_rate_limiter,
        f"contact:{client_ip(request)}",
        "Too many contact requests. Please try again later.",
    )
    await container.captcha_verifier.ensure_human(
        body.recaptcha_token, "contact_form", client_ip(request)
    )
    contact = await container.contact_service.submit(
        body.model_dump(exclude={"recaptcha_token"})
    )
    return {"success": True, "contact": serialize_contact(contact)}


@router.patch("/quotes/{quote_id}/status")
async def update_quote_status(
    quote_id: UUID, body: QuoteStatusUpdate, request: Request
) -> dict[str, object]:
    """Move a quote to a new status using body credentials."""
    container: AppContainer = get_container(request)
    _check_credentials(container, body.admin_token, body.admin_email)
    result = container.quote_service.update_status(
        quote_id,
        body.status,
        actor_email=body.admin_email,
        note=body.admin_note,
        ip_address=client_ip(request),
        user_agent=user_agent(request),
    )
    return {
        "success": True,
        "quote": serialize_quote_with_status(result.quote),
        "statusChange": serialize_event(result.status_change),
        "statusHistory": [
            serialize_event(event) for event in result.quote.status_history
        ],
        "availableActions": result.quote.available_actions,
    }


@router.get("/quotes/{quote_id}/status", dependencies=[Depends(require_admin)])
async def get_quote_status(quote_id: UUID, request: Request) -> dict[str, object]:
    """Return a quote's current status, history and next actions."""
    container: AppContainer = get_container(request)
    quote = container.quote_service.get_with_status(quote_id)
    return {
        "success": True,
        "quote": serialize_quote_with_status(quote),
        "statusHistory": [serialize_event(event) for event in quote.status_history],
        "availableActions": quote.available_actions,
    }


def _check_credentials(container: AppContainer, token: str, email: str) -> None:
    expected = container.settings.admin_token
    if not hmac.compare_digest(token.encode(), expected.encode()):
        raise AuthError("Unauthorized. Invalid admin credentials.")
    allowed = parse_admin_emails(container.settings.admin_emails)
    if allowed is not None and email.strip().lower() not in allowed:
        raise ForbiddenError("Admin email is not allowed to change quote status")
