"""
Error reporting for the Fitness Admin API.

Events go to GlitchTip (Sentry-compatible) when ``GLITCHTIP_DSN`` is set;
otherwise the SDK is never initialized and captures are dropped by it.
"""

import sentry_sdk
import structlog
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from src.config.settings import settings
from src.domains.transfer.exceptions import TransferError

logger = structlog.get_logger(__name__)

_TRANSIENT_MESSAGES = ("connection refused", "connection reset", "broken pipe", "database is locked")


def init_observability() -> None:
    """Initialize GlitchTip/Sentry if a DSN is configured."""
    if not settings.GLITCHTIP_DSN:
        logger.info("observability_disabled", reason="no DSN configured")
        return

    sample_rate = 1.0 if settings.is_development else settings.GLITCHTIP_TRACES_SAMPLE_RATE
    profiles_rate = 1.0 if settings.is_development else settings.GLITCHTIP_PROFILES_SAMPLE_RATE

    sentry_sdk.init(
        dsn=settings.GLITCHTIP_DSN,
        environment=settings.APP_ENV,
        release=f"fitness-admin-api@{settings.APP_VERSION}",
        traces_sample_rate=sample_rate,
        profiles_sample_rate=profiles_rate,
        # Import payloads can hold arbitrary user content
        send_default_pii=False,
        max_request_body_size="never",
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        before_send=_before_send,
    )

    logger.info("observability_initialized", environment=settings.APP_ENV)


def _before_send(event: dict, hint: dict) -> dict | None:
    """Drop events that are not actionable server faults."""
    if "exc_info" not in hint:
        return event

    _, exc_value, _ = hint["exc_info"]

    # Bad payloads are reported back to the caller
    if isinstance(exc_value, TransferError):
        return None

    message = str(exc_value).lower()
    if any(fragment in message for fragment in _TRANSIENT_MESSAGES):
        return None

    return event


def capture_exception(
    exception: Exception,
    extra: dict | None = None,
    tags: dict[str, str] | None = None,
) -> str | None:
    """Capture an exception with optional context."""
    with sentry_sdk.new_scope() as scope:
        for key, value in (extra or {}).items():
            scope.set_extra(key, value)
        for key, value in (tags or {}).items():
            scope.set_tag(key, value)

        return sentry_sdk.capture_exception(exception)
