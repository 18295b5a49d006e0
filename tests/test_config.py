import pytest

from app.core import config as config_module
from app.core.config import load_settings
from app.core.exceptions import ConfigurationException

ENV_VARS = (
    "FOOD_API_BASE_URL",
    "API_TIMEOUT_SECONDS",
    "REDIS_URL",
    "SENTRY_DSN",
    "ENVIRONMENT",
    "LOG_LEVEL",
    "PAYMENT_CURRENCY",
    "MERCHANT_NAME",
    "PAYMENT_DESCRIPTION",
    "PAYMENT_THEME_COLOR",
    "PAYMENT_WIDGET_TIMEOUT",
    "PAYMENT_PREFILL_NAME",
    "PAYMENT_PREFILL_EMAIL",
    "PAYMENT_PREFILL_CONTACT",
    "SUCCESS_COUNTDOWN_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # keep a developer's local .env out of the picture
    monkeypatch.setattr(config_module, "load_dotenv", lambda: False)


def test_defaults():
    settings = load_settings()

    assert settings.api_base_url == "https://fooddelight-back-end.onrender.com"
    assert settings.payment_base_url == settings.api_base_url
    assert settings.redis_url is None
    assert settings.sentry_dsn is None
    assert settings.checkout.currency == "INR"
    assert settings.checkout.merchant_name == "FoodDelights"
    assert settings.checkout.theme_color == "#5ced73"
    assert settings.checkout.prefill == {}
    assert settings.checkout.widget_timeout == 900
    assert settings.success_flow.countdown_seconds == 10


def test_overrides(monkeypatch):
    monkeypatch.setenv("FOOD_API_BASE_URL", "http://localhost:4000/")
    monkeypatch.setenv("API_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")
    monkeypatch.setenv("PAYMENT_CURRENCY", "USD")
    monkeypatch.setenv("PAYMENT_PREFILL_EMAIL", "guest@fooddelights.in")
    monkeypatch.setenv("PAYMENT_WIDGET_TIMEOUT", "0")
    monkeypatch.setenv("SUCCESS_COUNTDOWN_SECONDS", "5")

    settings = load_settings()

    assert settings.api_base_url == "http://localhost:4000"
    assert settings.request_timeout == 5.0
    assert settings.redis_url == "redis://localhost:6379/0"
    assert settings.checkout.currency == "USD"
    assert settings.checkout.prefill == {"email": "guest@fooddelights.in"}
    assert settings.checkout.widget_timeout is None
    assert settings.success_flow.countdown_seconds == 5


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("FOOD_API_BASE_URL", "ftp://example.com"),
        ("API_TIMEOUT_SECONDS", "soon"),
        ("API_TIMEOUT_SECONDS", "0"),
        ("PAYMENT_WIDGET_TIMEOUT", "-1"),
        ("SUCCESS_COUNTDOWN_SECONDS", "0"),
        ("SUCCESS_COUNTDOWN_SECONDS", "ten"),
    ],
)
def test_invalid_values_are_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationException):
        load_settings()
