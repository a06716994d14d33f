"""Helpers for reading caller metadata from requests."""

from fastapi import Request

from charter_broker.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def client_ip(request: Request) -> str:
    """Return the caller IP, preferring proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    if request.client:
        return request.client.host
    return "unknown"


def user_agent(request: Request) -> str | None:
    return request.headers.get("user-agent")
