"""
Checkout: drive the Razorpay handshake for the current cart total.

    idle -> key_requested -> order_requested -> widget_open -> succeeded
                                                            -> abandoned
    (any error in a step)                                   -> failed

Every call to ``checkout`` works on a fresh PaymentSession; nothing is kept
between attempts.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from app.core.config import CheckoutConfig
from app.core.exceptions import PaymentGatewayError
from app.core.sentry_integration import capture_exception
from app.core.toasts import ToastNotifier
from app.domain.checkout_fsm import CHECKOUT_TRANSITIONS, CheckoutState, ensure_transition
from app.integrations.payment_gateway import PaymentGatewayClient, PaymentWidget, WidgetOptions
from app.services.cart_panel import CartPanel
from app.services.cart_store import CartStore
from app.services.success_flow import SuccessFlowController
from logging_config import logger

CHECKOUT_FAILED_MESSAGE = "Payment could not be completed. Please try again."
CHECKOUT_ABANDONED_MESSAGE = "Payment was not completed."


@dataclass
class PaymentSession:
    """State of a single checkout attempt."""

    amount: float
    key: str | None = None
    order_id: str | None = None
    payment_id: str | None = None
    state: str = CheckoutState.IDLE
    error: Exception | None = None
    history: list[str] = field(default_factory=lambda: [CheckoutState.IDLE])

    @property
    def succeeded(self) -> bool:
        return self.state == CheckoutState.SUCCEEDED

    def advance(self, target: str) -> None:
        self.state = ensure_transition(CHECKOUT_TRANSITIONS, self.state, target)
        self.history.append(target)


@dataclass
class CheckoutResult:
    ok: bool
    state: str
    error_key: str | None = None
    session: PaymentSession | None = None


class CheckoutOrchestrator:
    def __init__(
        self,
        *,
        store: CartStore,
        gateway: PaymentGatewayClient,
        widget: PaymentWidget,
        panel: CartPanel,
        success_flow: SuccessFlowController,
        toasts: ToastNotifier,
        config: CheckoutConfig | None = None,
    ):
        self._store = store
        self._gateway = gateway
        self._widget = widget
        self._panel = panel
        self._success_flow = success_flow
        self._toasts = toasts
        self._config = config or CheckoutConfig()

    async def checkout(self) -> CheckoutResult:
        session = PaymentSession(amount=self._store.total_price)
        if session.amount <= 0:
            session.advance(CheckoutState.ABANDONED)
            logger.info("Checkout skipped: cart is empty")
            return CheckoutResult(False, session.state, "empty_cart", session)

        try:
            session.advance(CheckoutState.KEY_REQUESTED)
            session.key = await self._gateway.get_key()

            session.advance(CheckoutState.ORDER_REQUESTED)
            session.order_id = await self._gateway.create_order(session.amount)

            session.advance(CheckoutState.WIDGET_OPEN)
            await self._open_widget(session)
        except asyncio.TimeoutError as e:
            if session.state != CheckoutState.WIDGET_OPEN:
                return await self._fail(session, e, error_key="unexpected_error")
            session.advance(CheckoutState.ABANDONED)
            logger.warning("Payment widget timed out for order %s", session.order_id)
            await self._toasts.info(CHECKOUT_ABANDONED_MESSAGE)
            return CheckoutResult(False, session.state, "widget_timeout", session)
        except PaymentGatewayError as e:
            return await self._fail(session, e)
        except Exception as e:
            return await self._fail(session, e, error_key="unexpected_error")

        if not session.payment_id:
            session.advance(CheckoutState.ABANDONED)
            logger.info("Payment widget closed without payment for order %s", session.order_id)
            await self._toasts.info(CHECKOUT_ABANDONED_MESSAGE)
            return CheckoutResult(False, session.state, "abandoned", session)

        session.advance(CheckoutState.SUCCEEDED)
        logger.info("Payment %s succeeded for order %s", session.payment_id, session.order_id)
        await self._on_success()
        return CheckoutResult(True, session.state, session=session)

    async def _open_widget(self, session: PaymentSession) -> None:
        async def handler(response: dict[str, Any]) -> None:
            payment_id = response.get("razorpay_payment_id")
            if payment_id:
                session.payment_id = str(payment_id)

        options = WidgetOptions(
            key=session.key or "",
            amount=session.amount,
            currency=self._config.currency,
            order_id=session.order_id or "",
            handler=handler,
            name=self._config.merchant_name,
            description=self._config.description,
            prefill=dict(self._config.prefill),
            theme_color=self._config.theme_color,
        )
        if self._config.widget_timeout is None:
            await self._widget.open(options)
        else:
            await asyncio.wait_for(self._widget.open(options), self._config.widget_timeout)

    async def _fail(
        self, session: PaymentSession, error: Exception, *, error_key: str = "gateway_error"
    ) -> CheckoutResult:
        session.error = error
        failed_step = session.state
        session.advance(CheckoutState.FAILED)
        logger.error("Checkout error during %s: %s", failed_step, error)
        capture_exception(error, checkout_step=failed_step, amount=session.amount)
        await self._toasts.error(CHECKOUT_FAILED_MESSAGE)
        return CheckoutResult(False, session.state, error_key, session)

    async def _on_success(self) -> None:
        await self._store.clear()
        self._panel.close()
        self._success_flow.show()
