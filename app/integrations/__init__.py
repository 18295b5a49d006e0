"""Integrations package - clients for the remote cart and payment backends."""

from app.integrations.cart_client import CartSyncClient
from app.integrations.payment_gateway import (
    CallbackPaymentWidget,
    PaymentGatewayClient,
    PaymentWidget,
    WidgetOptions,
)

__all__ = [
    "CallbackPaymentWidget",
    "CartSyncClient",
    "PaymentGatewayClient",
    "PaymentWidget",
    "WidgetOptions",
]
