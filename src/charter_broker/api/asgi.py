"""ASGI entrypoint for the charter broker API."""

from charter_broker.api.app import create_app
from charter_broker.containers import build_container

app = create_app(build_container())
