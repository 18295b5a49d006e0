"""Always-visible cart badge: total quantity across all lines."""
from __future__ import annotations

from app.domain.cart import CartItem, calc_item_count
from app.services.cart_store import CartStore


class CartBadgeCounter:
    def __init__(self, store: CartStore):
        self._store = store
        self.count = calc_item_count(store.items)
        store.add_listener(self._recompute)

    def _recompute(self, items: list[CartItem]) -> None:
        self.count = calc_item_count(items)

    def detach(self) -> None:
        self._store.remove_listener(self._recompute)
