"""Custom exceptions for the FoodDelights cart core."""
from __future__ import annotations

from typing import Any


class FoodDelightsException(Exception):
    """Base exception for all FoodDelights errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class RemoteServiceError(FoodDelightsException):
    """Remote API call failed.

    ``status`` is the HTTP status code, or None when the request never got a
    response (connection error, timeout).
    """

    def __init__(self, message: str, status: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    @property
    def is_transport_error(self) -> bool:
        return self.status is None


class CartServiceError(RemoteServiceError):
    """Cart Service request failed."""

    @property
    def is_duplicate_item(self) -> bool:
        return self.status == 400


class PaymentGatewayError(RemoteServiceError):
    """Payment gateway request failed or returned an unusable payload."""

    pass


class ValidationException(FoodDelightsException):
    """Input validation errors."""

    pass


class ConfigurationException(FoodDelightsException):
    """Configuration errors."""

    pass


class InvalidTransitionError(FoodDelightsException):
    """State machine transition not allowed."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Transition '{current} -> {target}' is not allowed")
        self.current = current
        self.target = target
