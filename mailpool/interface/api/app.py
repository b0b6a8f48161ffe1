"""FastAPI application."""

from contextlib import asynccontextmanager

import logfire
from dishka import AsyncContainer
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mailpool.config import Settings
from mailpool.domain.error import UnavailableError
from mailpool.domain.service import ResourcePool
from mailpool.domain.value import ErrorKind
from mailpool.interface.api.routes import card_keys, health, invites, pool
from mailpool.interface.error import error_body
from mailpool.util.di.container import create_container, setup_di
from mailpool.util.observability import instrument_fastapi


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Warm the identity status cache, close the container on shutdown.

    A store that is down at startup does not stop the process; the cache
    hydrates lazily on first use instead.
    """
    container = app.state.dishka_container
    try:
        async with container() as request_container:
            resource_pool = await request_container.get(ResourcePool)
            await resource_pool.initialize()
    except UnavailableError:
        logfire.warn("Identity status cache warm-up skipped, store unavailable")
    yield
    await container.close()


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 validation errors."""
    errors = exc.errors()
    logfire.info(
        "Request validation failed", path=request.url.path, error_count=len(errors)
    )
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": error_body(ErrorKind.VALIDATION, message)},
    )


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.
    In tests, configure in conftest.py if needed.

    Args:
        container: DI container to serve from, production container if None

    Raises:
        ConfigurationError: If the sealing secret is missing or too short
    """
    settings = Settings()

    # Refuse to start without a usable sealing secret
    settings.crypto.require_secret()

    app_instance = FastAPI(
        title="Mailpool API",
        description="Invite and card-key redemption with pooled mailbox allocation",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    instrument_fastapi(app_instance)

    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=[
            settings.api.frontend_url,
            "http://localhost:3000",  # Local development
        ],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Origin"],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    app_instance.add_exception_handler(
        RequestValidationError, request_validation_handler
    )

    # Setup dependency injection
    # Settings are loaded from environment automatically
    setup_di(app_instance, container or create_container())

    # Register routes
    app_instance.include_router(health.router)
    app_instance.include_router(invites.router)
    app_instance.include_router(card_keys.router)
    app_instance.include_router(pool.router)

    return app_instance


# Create app instance for uvicorn
# Note: Logfire must be configured before this module is imported
# In production: start_app.py handles this
# In tests: configure in conftest.py
app = create_app()
