"""Observability configuration using Logfire.

Usage:
    import logfire

    logfire.info("Invite redeemed", invite_id=invite_id, user_id=user_id)

    with logfire.span("invite_registry.redeem", invite_id=invite_id):
        ...

Sealed tokens are bearer credentials. Log at most their first 8 characters;
attributes whose name matches SCRUBBED_ATTRIBUTES are redacted regardless.
"""

import logfire
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from mailpool.config import Settings

# Attribute names redacted on top of logfire's default patterns
SCRUBBED_ATTRIBUTES = ["card_keys?", "invite_token", "sealing_secret"]


def should_send_to_logfire(settings: Settings) -> bool:
    """Explicit setting wins, otherwise send only when a token is configured."""
    observability = settings.observability
    if observability.send_to_logfire is not None:
        return observability.send_to_logfire
    return bool(observability.logfire_token)


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for the API process and the migration runner.

    Set OBSERVABILITY__LOGFIRE_TOKEN to ship telemetry to Logfire cloud;
    OBSERVABILITY__SEND_TO_LOGFIRE overrides the decision either way.

    Args:
        settings: Application settings
    """
    send_to_logfire = should_send_to_logfire(settings)

    logfire.configure(
        service_name="mailpool",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        token=settings.observability.logfire_token,
        scrubbing=logfire.ScrubbingOptions(extra_patterns=SCRUBBED_ATTRIBUTES),
        console=logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    )

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        git_sha=settings.git_sha,
    )


def _request_attributes(request, attributes):
    # Validated values carry tokens and card keys; report validation errors only
    result = {"errors": attributes.get("errors", [])}
    route = request.scope.get("route")
    if route is not None:
        result["route"] = route.path
    if request.client:
        result["client_host"] = request.client.host
    return result


def instrument_fastapi(app: FastAPI) -> None:
    """Trace HTTP requests without headers or bodies.

    Args:
        app: FastAPI application instance
    """
    logfire.instrument_fastapi(
        app,
        capture_headers=False,
        request_attributes_mapper=_request_attributes,
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace SQL statements issued through the engine.

    Args:
        engine: SQLAlchemy async engine
    """
    logfire.instrument_sqlalchemy(engine=engine.sync_engine, enable_commenter=True)
