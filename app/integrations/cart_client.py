"""Request layer for the remote Cart Service."""
from __future__ import annotations

from typing import Any
from urllib.parse import quote

from app.core.constants import (
    CART_ADD_PATH,
    CART_CLEAR_PATH,
    CART_DELETE_PATH,
    CART_GET_PATH,
    CART_UPDATE_QUANTITY_PATH,
)
from app.core.exceptions import CartServiceError, ValidationException
from app.domain.cart import CartItem
from app.integrations.http_base import ApiClient
from logging_config import logger


class CartSyncClient(ApiClient):
    """Stateless wrapper over the Cart Service endpoints."""

    error_class = CartServiceError
    service_name = "cart"

    async def fetch_cart(self) -> list[CartItem]:
        """GET the whole cart."""
        body = await self._request("GET", CART_GET_PATH)
        if not isinstance(body, dict):
            return []
        raw_items = body.get("Cart_Items") or []
        try:
            return [CartItem.from_dict(raw) for raw in raw_items if isinstance(raw, dict)]
        except (TypeError, ValueError, ValidationException) as e:
            logger.warning("cart GET %s returned a malformed item: %s", CART_GET_PATH, e)
            raise CartServiceError(f"Malformed cart payload: {e}", status=200, body=body) from e

    async def add_item(self, item: CartItem) -> Any:
        """POST a new line; the service answers 400 for a duplicate name."""
        return await self._request("POST", CART_ADD_PATH, payload=item.to_payload())

    async def delete_item(self, name: str) -> Any:
        path = CART_DELETE_PATH.format(name=quote(name, safe=""))
        return await self._request("DELETE", path)

    async def update_quantity(self, item_id: str, quantity: int) -> Any:
        return await self._request(
            "PATCH",
            CART_UPDATE_QUANTITY_PATH,
            payload={"_id": item_id, "quantity": int(quantity)},
        )

    async def clear_cart(self) -> Any:
        return await self._request("DELETE", CART_CLEAR_PATH)
