"""Services orchestrating the cart and checkout flow."""

from .cart_badge import CartBadgeCounter
from .cart_panel import CartPanel
from .cart_store import CartStore, MutationResult
from .checkout import CheckoutOrchestrator, CheckoutResult, PaymentSession
from .success_flow import ConfettiScheduler, ParticleBurst, SuccessFlowController

__all__ = [
    "CartBadgeCounter",
    "CartPanel",
    "CartStore",
    "CheckoutOrchestrator",
    "CheckoutResult",
    "ConfettiScheduler",
    "MutationResult",
    "ParticleBurst",
    "PaymentSession",
    "SuccessFlowController",
]
