"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from charter_broker.api.admin import router as admin_router
from charter_broker.api.airports import router as airports_router
from charter_broker.api.content import router as content_router
from charter_broker.api.quotes import router as quotes_router
from charter_broker.api.webhooks import router as webhooks_router
from charter_broker.api.whatsapp import router as whatsapp_router
from charter_broker.app_logging import configure_logging
from charter_broker.containers import AppContainer
from charter_broker.domain.errors import CharterError, ValidationError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)
    app.include_router(quotes_router)
    app.include_router(airports_router)
    app.include_router(webhooks_router)
    app.include_router(whatsapp_router)
    app.include_router(content_router)

    @app.exception_handler(CharterError)
    async def charter_error_handler(
        request: Request, exc: CharterError
    ) -> JSONResponse:
        if exc.status_code >= 500:  # noqa: PLR2004
            logger.error(
                "Request failed",
                extra={"path": request.url.path, "error": exc.message},
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = ValidationError(
            "Invalid request",
            details=[
                {
                    "field": ".".join(str(part) for part in item.get("loc", ())),
                    "message": item.get("msg", ""),
                }
                for item in exc.errors()
            ],
        )
        return JSONResponse(status_code=error.status_code, content=error.to_payload())

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
