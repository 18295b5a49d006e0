"""Application bootstrap wiring clients, event bus, cart store and checkout."""
from __future__ import annotations

from dataclasses import dataclass

from .config import Settings
from .notifications import EventBus, InMemoryPubSub, PubSubBackend, RedisPubSub
from .sentry_integration import init_sentry
from .toasts import ToastNotifier
from app.integrations.cart_client import CartSyncClient
from app.integrations.payment_gateway import CallbackPaymentWidget, PaymentGatewayClient
from app.services.cart_badge import CartBadgeCounter
from app.services.cart_panel import CartPanel
from app.services.cart_store import CartStore
from app.services.checkout import CheckoutOrchestrator
from app.services.success_flow import ConfettiScheduler, SuccessFlowController
from logging_config import logger, setup_logging


@dataclass
class Storefront:
    """Runtime components of the cart and checkout core."""

    settings: Settings
    bus: EventBus
    toasts: ToastNotifier
    cart_client: CartSyncClient
    gateway: PaymentGatewayClient
    widget: CallbackPaymentWidget
    store: CartStore
    badge: CartBadgeCounter
    panel: CartPanel
    success_flow: SuccessFlowController
    checkout: CheckoutOrchestrator

    async def start(self) -> None:
        """Subscribe the store to cart broadcasts and do the initial load."""
        await self.store.attach()
        await self.store.load()

    async def shutdown(self) -> None:
        """Cancel timers and release network resources."""
        await self.success_flow.close()
        await self.store.detach()
        self.badge.detach()
        await self.cart_client.close()
        await self.gateway.close()
        await self.bus.close()


def build_application(settings: Settings, *, backend: PubSubBackend | None = None) -> Storefront:
    """Create runtime components from configuration."""
    setup_logging(settings.log_level)
    init_sentry(settings.sentry_dsn, environment=settings.environment)

    if backend is None:
        if settings.redis_url:
            backend = RedisPubSub(settings.redis_url)
            logger.info("Using Redis pub/sub for cart broadcasts")
        else:
            backend = InMemoryPubSub()
            logger.info("Using in-memory pub/sub for cart broadcasts")

    bus = EventBus(backend)
    toasts = ToastNotifier(bus)
    cart_client = CartSyncClient(settings.api_base_url, timeout=settings.request_timeout)
    gateway = PaymentGatewayClient(settings.payment_base_url, timeout=settings.request_timeout)
    widget = CallbackPaymentWidget()

    store = CartStore(cart_client, bus, toasts)
    badge = CartBadgeCounter(store)
    panel = CartPanel()

    flow_config = settings.success_flow
    success_flow = SuccessFlowController(
        countdown_seconds=flow_config.countdown_seconds,
        tick_interval=flow_config.tick_interval,
        confetti=ConfettiScheduler(
            duration=flow_config.confetti_duration,
            interval=flow_config.confetti_interval,
            initial_particles=flow_config.confetti_particles,
        ),
    )

    checkout = CheckoutOrchestrator(
        store=store,
        gateway=gateway,
        widget=widget,
        panel=panel,
        success_flow=success_flow,
        toasts=toasts,
        config=settings.checkout,
    )

    return Storefront(
        settings=settings,
        bus=bus,
        toasts=toasts,
        cart_client=cart_client,
        gateway=gateway,
        widget=widget,
        store=store,
        badge=badge,
        panel=panel,
        success_flow=success_flow,
        checkout=checkout,
    )
