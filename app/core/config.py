"""Environment-driven configuration objects for the storefront core."""
from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from app.core.constants import (
    CONFETTI_DURATION_SECONDS,
    CONFETTI_INITIAL_PARTICLES,
    CONFETTI_INTERVAL_SECONDS,
    DEFAULT_API_BASE_URL,
    DEFAULT_API_TIMEOUT_SECONDS,
    DEFAULT_CURRENCY,
    DEFAULT_MERCHANT_NAME,
    DEFAULT_PAYMENT_DESCRIPTION,
    DEFAULT_THEME_COLOR,
    DEFAULT_WIDGET_TIMEOUT_SECONDS,
    SUCCESS_COUNTDOWN_SECONDS,
    SUCCESS_TICK_SECONDS,
)
from app.core.exceptions import ConfigurationException


def _get_float(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be a number, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationException(f"{name} must be >= {minimum}, got {value}")
    return value


def _get_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationException(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass(slots=True)
class CheckoutConfig:
    currency: str = DEFAULT_CURRENCY
    merchant_name: str = DEFAULT_MERCHANT_NAME
    description: str = DEFAULT_PAYMENT_DESCRIPTION
    theme_color: str = DEFAULT_THEME_COLOR
    prefill: dict[str, str] = field(default_factory=dict)
    # None waits for the widget forever
    widget_timeout: float | None = DEFAULT_WIDGET_TIMEOUT_SECONDS


@dataclass(slots=True)
class SuccessFlowConfig:
    countdown_seconds: int = SUCCESS_COUNTDOWN_SECONDS
    tick_interval: float = SUCCESS_TICK_SECONDS
    confetti_duration: float = CONFETTI_DURATION_SECONDS
    confetti_interval: float = CONFETTI_INTERVAL_SECONDS
    confetti_particles: int = CONFETTI_INITIAL_PARTICLES


@dataclass(slots=True)
class Settings:
    api_base_url: str
    request_timeout: float
    redis_url: str | None
    sentry_dsn: str | None
    environment: str
    log_level: str
    checkout: CheckoutConfig
    success_flow: SuccessFlowConfig

    @property
    def payment_base_url(self) -> str:
        """The payment endpoints live on the same backend host as the cart."""
        return self.api_base_url


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    base_url = os.getenv("FOOD_API_BASE_URL", DEFAULT_API_BASE_URL).strip()
    if not base_url:
        raise ConfigurationException("FOOD_API_BASE_URL must not be empty")
    if not base_url.startswith(("http://", "https://")):
        raise ConfigurationException(f"FOOD_API_BASE_URL must be an http(s) URL, got {base_url!r}")

    widget_timeout: float | None = _get_float(
        "PAYMENT_WIDGET_TIMEOUT", DEFAULT_WIDGET_TIMEOUT_SECONDS
    )
    if widget_timeout == 0:
        widget_timeout = None

    prefill = {
        key: value
        for key, value in (
            ("name", os.getenv("PAYMENT_PREFILL_NAME", "")),
            ("email", os.getenv("PAYMENT_PREFILL_EMAIL", "")),
            ("contact", os.getenv("PAYMENT_PREFILL_CONTACT", "")),
        )
        if value
    }

    checkout = CheckoutConfig(
        currency=os.getenv("PAYMENT_CURRENCY", DEFAULT_CURRENCY),
        merchant_name=os.getenv("MERCHANT_NAME", DEFAULT_MERCHANT_NAME),
        description=os.getenv("PAYMENT_DESCRIPTION", DEFAULT_PAYMENT_DESCRIPTION),
        theme_color=os.getenv("PAYMENT_THEME_COLOR", DEFAULT_THEME_COLOR),
        prefill=prefill,
        widget_timeout=widget_timeout,
    )

    success_flow = SuccessFlowConfig(
        countdown_seconds=_get_int("SUCCESS_COUNTDOWN_SECONDS", SUCCESS_COUNTDOWN_SECONDS, minimum=1),
    )

    return Settings(
        api_base_url=base_url.rstrip("/"),
        request_timeout=_get_float("API_TIMEOUT_SECONDS", DEFAULT_API_TIMEOUT_SECONDS, minimum=1),
        redis_url=os.getenv("REDIS_URL") or None,
        sentry_dsn=os.getenv("SENTRY_DSN") or None,
        environment=os.getenv("ENVIRONMENT", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        checkout=checkout,
        success_flow=success_flow,
    )
