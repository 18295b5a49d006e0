"""Sentry integration for error tracking."""
from __future__ import annotations

import logging
import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.aiohttp import AioHttpIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)


def init_sentry(
    dsn: str | None,
    environment: str = "production",
    enable_logging: bool = True,
    sample_rate: float = 1.0,
    traces_sample_rate: float = 0.1,
) -> bool:
    """Initialize Sentry error tracking.

    Args:
        dsn: Sentry DSN; tracking stays off when empty
        environment: Environment name (production, staging, development)
        enable_logging: Turn ERROR log records into Sentry events
        sample_rate: Error sampling rate (1.0 = 100%)
        traces_sample_rate: Performance tracing rate (0.1 = 10%)

    Returns:
        True if Sentry was initialized
    """
    if not dsn:
        logger.info("SENTRY_DSN not set - error tracking disabled")
        return False

    integrations: list[Any] = [AioHttpIntegration()]
    if enable_logging:
        integrations.append(
            LoggingIntegration(
                level=logging.INFO,  # Breadcrumbs from INFO
                event_level=logging.ERROR,  # Events from ERROR
            )
        )

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        integrations=integrations,
        sample_rate=sample_rate,
        traces_sample_rate=traces_sample_rate,
        send_default_pii=False,
        release=os.getenv("GIT_COMMIT_SHA", "unknown"),
    )

    logger.info(f"Sentry initialized for {environment} environment")
    return True


def capture_exception(error: BaseException, **extra: Any) -> None:
    """Send an exception to Sentry with extra context; no-op when not initialized."""
    with sentry_sdk.new_scope() as scope:
        for key, value in extra.items():
            scope.set_extra(key, value)
        sentry_sdk.capture_exception(error)
