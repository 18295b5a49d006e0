"""
Razorpay payment integration.

Server side:
- GET  /razorpay/getkey           -> {"key": ...}
- POST /razorpay/payment/process  -> {"order": {"id": ...}}

Client side the Razorpay checkout widget is opened with the key, amount,
currency and order id, and reports completion through a ``handler`` callback
carrying ``razorpay_payment_id``.
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from app.core.constants import PAYMENT_KEY_PATH, PAYMENT_ORDER_PATH
from app.core.exceptions import PaymentGatewayError
from app.integrations.http_base import ApiClient
from logging_config import logger

PaymentHandler = Callable[[dict[str, Any]], Awaitable[None]]


class PaymentGatewayClient(ApiClient):
    """Key and order endpoints of the payment backend."""

    error_class = PaymentGatewayError
    service_name = "razorpay"

    async def get_key(self) -> str:
        body = await self._request("GET", PAYMENT_KEY_PATH)
        key = body.get("key") if isinstance(body, dict) else None
        if not key:
            raise PaymentGatewayError("Payment key response has no key", status=200, body=body)
        return str(key)

    async def create_order(self, amount: float) -> str:
        """Create a gateway order and return its id."""
        body = await self._request("POST", PAYMENT_ORDER_PATH, payload={"amount": amount})
        order = body.get("order") if isinstance(body, dict) else None
        order_id = order.get("id") if isinstance(order, dict) else None
        if not order_id:
            raise PaymentGatewayError("Order response has no order id", status=200, body=body)
        return str(order_id)


@dataclass
class WidgetOptions:
    """Options handed to the checkout widget."""

    key: str
    amount: float
    currency: str
    order_id: str
    handler: PaymentHandler
    name: str = ""
    description: str = ""
    prefill: dict[str, str] = field(default_factory=dict)
    theme_color: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serializable part of the options (without the handler)."""
        return {
            "key": self.key,
            "amount": self.amount,
            "currency": self.currency,
            "name": self.name,
            "description": self.description,
            "order_id": self.order_id,
            "prefill": dict(self.prefill),
            "theme": {"color": self.theme_color},
        }


class PaymentWidget(ABC):
    """Client-side payment widget."""

    @abstractmethod
    async def open(self, options: WidgetOptions) -> None:
        """Open the widget and return once it is closed (paid or not)."""


class CallbackPaymentWidget(PaymentWidget):
    """
    Widget whose completion is delivered from outside.

    ``open`` parks until ``deliver`` (gateway handler response) or ``dismiss``
    (user closed the widget) is called, typically from the payment callback
    routes. Only one widget can be open at a time.
    """

    def __init__(self):
        self._options: WidgetOptions | None = None
        self._closed: asyncio.Future[None] | None = None

    @property
    def is_open(self) -> bool:
        return self._closed is not None and not self._closed.done()

    @property
    def current_order_id(self) -> str | None:
        return self._options.order_id if self.is_open and self._options else None

    async def open(self, options: WidgetOptions) -> None:
        if self.is_open:
            raise PaymentGatewayError("Payment widget is already open")
        self._options = options
        self._closed = asyncio.get_running_loop().create_future()
        logger.info("Payment widget opened for order %s", options.order_id)
        try:
            await self._closed
        finally:
            self._options = None
            self._closed = None

    async def deliver(self, response: dict[str, Any]) -> bool:
        """Run the handler with a gateway response and close the widget."""
        if not self.is_open or self._options is None:
            logger.warning("Payment response received with no open widget")
            return False
        order_id = response.get("razorpay_order_id")
        if order_id and order_id != self._options.order_id:
            logger.warning(
                "Payment response for order %s ignored, widget is on %s",
                order_id,
                self._options.order_id,
            )
            return False
        try:
            await self._options.handler(response)
        finally:
            if self._closed is not None and not self._closed.done():
                self._closed.set_result(None)
        return True

    def dismiss(self) -> bool:
        """Close the widget without a payment."""
        if not self.is_open or self._closed is None:
            return False
        logger.info("Payment widget dismissed")
        self._closed.set_result(None)
        return True
