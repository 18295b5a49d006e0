"""
Client-held cart kept in sync with the remote Cart Service.

Quantity updates, deletes and clears are applied locally before the remote
call returns. A failed update or delete is recovered by reloading the whole
cart from the server instead of undoing the local change. Adds are not
applied locally at all: the list picks them up on the next load.

Mutations are not sequenced against each other; whichever local write or
reload lands last is what the UI shows.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from app.core.exceptions import CartServiceError
from app.core.notifications import Event, EventBus
from app.core.sentry_integration import capture_exception
from app.core.toasts import ToastNotifier
from app.domain.cart import CartItem, Product, calc_item_count, calc_total_price
from app.domain.checkout_fsm import MUTATION_TRANSITIONS, MutationState, ensure_transition
from app.integrations.cart_client import CartSyncClient
from logging_config import logger

ADD_SUCCESS_MESSAGE = "Item added to cart successfully"
ADD_DUPLICATE_MESSAGE = "Item already exists in cart"
ADD_FAILED_MESSAGE = "Failed to add item to cart"

CartListener = Callable[[list[CartItem]], None]


@dataclass
class MutationResult:
    """Outcome of one cart mutation."""

    operation: str
    state: str = MutationState.IDLE
    error: CartServiceError | None = None
    history: list[str] = field(default_factory=lambda: [MutationState.IDLE])

    @property
    def ok(self) -> bool:
        return self.state == MutationState.COMMITTED

    def advance(self, target: str) -> None:
        self.state = ensure_transition(MUTATION_TRANSITIONS, self.state, target)
        self.history.append(target)


def _server_message(body: Any, default: str) -> str:
    if isinstance(body, str) and body.strip():
        return body.strip()
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return default


class CartStore:
    """Single source of truth for what the UI renders as the cart."""

    def __init__(
        self,
        client: CartSyncClient,
        bus: EventBus,
        toasts: ToastNotifier,
    ):
        self._client = client
        self._bus = bus
        self._toasts = toasts
        self._items: list[CartItem] = []
        self._listeners: list[CartListener] = []
        self._adding: set[int] = set()
        self._attached = False
        self._loads_in_flight = 0

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def items(self) -> list[CartItem]:
        return list(self._items)

    @property
    def loading(self) -> bool:
        return self._loads_in_flight > 0

    @property
    def item_count(self) -> int:
        return calc_item_count(self._items)

    @property
    def total_price(self) -> float:
        return calc_total_price(self._items)

    def find(self, item_id: str) -> CartItem | None:
        return next((item for item in self._items if item.id == item_id), None)

    def is_adding(self, product_id: int) -> bool:
        return product_id in self._adding

    def add_listener(self, listener: CartListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: CartListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _set_items(self, items: list[CartItem]) -> None:
        self._items = items
        snapshot = self.items
        for listener in list(self._listeners):
            listener(snapshot)

    # ------------------------------------------------------------------
    # Broadcast subscription
    # ------------------------------------------------------------------

    async def _on_cart_updated(self, _event: Event) -> None:
        await self.load()

    async def attach(self) -> None:
        """Reload whenever another component reports a remote cart change."""
        if self._attached:
            return
        await self._bus.subscribe_cart_updated(self._on_cart_updated)
        self._attached = True

    async def detach(self) -> None:
        if not self._attached:
            return
        await self._bus.unsubscribe_cart_updated(self._on_cart_updated)
        self._attached = False

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """Replace local state with the server's cart."""
        self._loads_in_flight += 1
        try:
            items = await self._client.fetch_cart()
        except CartServiceError as e:
            logger.error("Failed to fetch cart items: %s", e)
            return False
        finally:
            self._loads_in_flight -= 1
        self._set_items(items)
        return True

    async def reconcile(self, result: MutationResult) -> MutationResult:
        """Recover from a failed optimistic mutation by refetching the cart."""
        logger.info("Reconciling cart after failed %s", result.operation)
        if await self.load():
            result.advance(MutationState.RECONCILED_VIA_RELOAD)
        else:
            logger.error("Reload after failed %s also failed, cart may be stale", result.operation)
            result.advance(MutationState.FAILED)
        return result

    async def add(self, product: Product, discount_price: float) -> MutationResult:
        """Send a catalog product to the Cart Service without touching the local list."""
        result = MutationResult("add")
        item = CartItem.from_product(product, discount_price)
        self._adding.add(product.id)
        result.advance(MutationState.PENDING)
        try:
            body = await self._client.add_item(item)
        except CartServiceError as e:
            result.error = e
            result.advance(MutationState.FAILED)
            if e.is_duplicate_item:
                await self._toasts.info(_server_message(e.body, ADD_DUPLICATE_MESSAGE))
            else:
                await self._toasts.error(ADD_FAILED_MESSAGE)
            logger.error("Error adding item to cart: %s", e)
            return result
        finally:
            self._adding.discard(product.id)

        result.advance(MutationState.COMMITTED)
        await self._toasts.success(_server_message(body, ADD_SUCCESS_MESSAGE))
        await self._bus.publish_cart_updated()
        return result

    async def update_quantity(self, item_id: str, quantity: int) -> MutationResult:
        """Set a line's quantity; values below 1 are ignored."""
        result = MutationResult("update_quantity")
        if quantity < 1:
            return result

        item = self.find(item_id)
        if item is not None:
            item.quantity = quantity
            self._set_items(self._items)
        result.advance(MutationState.PENDING)
        try:
            await self._client.update_quantity(item_id, quantity)
        except CartServiceError as e:
            logger.error("Error updating item quantity: %s", e)
            result.error = e
            return await self.reconcile(result)
        result.advance(MutationState.COMMITTED)
        return result

    async def delete(self, name: str) -> MutationResult:
        """Remove a line by name."""
        result = MutationResult("delete")
        self._set_items([item for item in self._items if item.name != name])
        result.advance(MutationState.PENDING)
        try:
            await self._client.delete_item(name)
        except CartServiceError as e:
            logger.error("Failed to delete item from cart: %s", e)
            result.error = e
            return await self.reconcile(result)
        result.advance(MutationState.COMMITTED)
        return result

    async def clear(self) -> MutationResult:
        """Empty the cart locally, then remotely; a remote failure is not reconciled."""
        result = MutationResult("clear")
        self._set_items([])
        result.advance(MutationState.PENDING)
        try:
            await self._client.clear_cart()
        except CartServiceError as e:
            logger.error("Failed to clear remote cart: %s", e)
            capture_exception(e, operation="clear_cart", status=e.status)
            result.error = e
            result.advance(MutationState.FAILED)
            return result
        result.advance(MutationState.COMMITTED)
        return result
