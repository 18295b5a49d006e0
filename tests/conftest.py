"""Shared pytest fixtures: fake backend, in-memory cart client, manual clock."""
from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from app.core.exceptions import CartServiceError
from app.core.notifications import Event, EventBus, InMemoryPubSub
from app.core.toasts import Toast, ToastNotifier
from app.domain.cart import CartItem


def make_item(name: str, *, quantity: int = 1, price: float = 100.0, discount: float = 90.0, item_id: str | None = None) -> CartItem:
    return CartItem(
        id=item_id or f"id-{name.lower().replace(' ', '-')}",
        name=name,
        image=f"https://img.example/{name}.jpg",
        category="Main Course",
        description=f"{name} description",
        quantity=quantity,
        original_price=price,
        discount_price=discount,
    )


class FakeBackend:
    """In-process stand-in for the cart + razorpay backend."""

    def __init__(self) -> None:
        self.items: list[dict[str, Any]] = []
        self.failures: dict[str, tuple[int, Any]] = {}
        self.requests: list[tuple[str, str, Any]] = []
        self.payment_key = "rzp_test_key"
        self.orders: list[dict[str, Any]] = []
        self.base_url = ""
        self._next_id = 1

    def seed(self, name: str, **fields: Any) -> dict[str, Any]:
        item = {
            "_id": f"srv-{self._next_id}",
            "name": name,
            "image": "",
            "category": "Dessert",
            "description": "",
            "quantity": 1,
            "original_price": 100.0,
            "discount_price": 80.0,
        }
        item.update(fields)
        self._next_id += 1
        self.items.append(item)
        return item

    def fail(self, route: str, status: int, body: Any = None) -> None:
        self.failures[route] = (status, body)

    def _failure(self, route: str) -> web.Response | None:
        if route not in self.failures:
            return None
        status, body = self.failures[route]
        if isinstance(body, bytes):
            # raw error page without a charset
            return web.Response(body=body, status=status, content_type="text/html")
        if isinstance(body, str):
            return web.Response(text=body, status=status)
        return web.json_response(body or {"error": "forced failure"}, status=status)

    def build_app(self) -> web.Application:
        async def get_cart(request: web.Request) -> web.Response:
            self.requests.append(("GET", request.path, None))
            failure = self._failure("get")
            if failure is not None:
                return failure
            return web.json_response({"Cart_Items": self.items})

        async def add_item(request: web.Request) -> web.Response:
            payload = await request.json()
            self.requests.append(("POST", request.path, payload))
            failure = self._failure("add")
            if failure is not None:
                return failure
            if any(item["name"] == payload["name"] for item in self.items):
                return web.Response(text="Item already exists in cart", status=400)
            self.seed(**payload)
            return web.json_response({"message": f"{payload['name']} added to cart"})

        async def delete_item(request: web.Request) -> web.Response:
            name = request.match_info["name"]
            self.requests.append(("DELETE", request.path, name))
            failure = self._failure("delete")
            if failure is not None:
                return failure
            before = len(self.items)
            self.items = [item for item in self.items if item["name"] != name]
            if len(self.items) == before:
                return web.json_response({"error": "not found"}, status=404)
            return web.Response(status=204)

        async def update_quantity(request: web.Request) -> web.Response:
            payload = await request.json()
            self.requests.append(("PATCH", request.path, payload))
            failure = self._failure("update")
            if failure is not None:
                return failure
            for item in self.items:
                if item["_id"] == payload["_id"]:
                    item["quantity"] = payload["quantity"]
                    return web.json_response({})
            return web.json_response({"error": "not found"}, status=404)

        async def clear_cart(request: web.Request) -> web.Response:
            self.requests.append(("DELETE", request.path, None))
            failure = self._failure("clear")
            if failure is not None:
                return failure
            self.items = []
            return web.json_response({"message": "Cart cleared"})

        async def get_key(request: web.Request) -> web.Response:
            self.requests.append(("GET", request.path, None))
            failure = self._failure("key")
            if failure is not None:
                return failure
            return web.json_response({"key": self.payment_key})

        async def process_payment(request: web.Request) -> web.Response:
            payload = await request.json()
            self.requests.append(("POST", request.path, payload))
            failure = self._failure("order")
            if failure is not None:
                return failure
            order = {"id": f"order_{len(self.orders) + 1}", "amount": payload["amount"]}
            self.orders.append(order)
            return web.json_response({"success": True, "order": order})

        app = web.Application()
        app.router.add_get("/cart/get_cart_items", get_cart)
        app.router.add_post("/cart/add_item", add_item)
        app.router.add_delete("/cart/delete_cart_item/{name}", delete_item)
        app.router.add_patch("/cart/update_cart_quantity", update_quantity)
        app.router.add_delete("/cart/clear_cart", clear_cart)
        app.router.add_get("/razorpay/getkey", get_key)
        app.router.add_post("/razorpay/payment/process", process_payment)
        return app


@pytest.fixture()
async def fake_backend():
    """Fake backend served on a local port."""
    backend = FakeBackend()
    server = TestServer(backend.build_app())
    await server.start_server()
    backend.base_url = str(server.make_url(""))
    try:
        yield backend
    finally:
        await server.close()


class FakeCartClient:
    """In-memory CartSyncClient replacement with injectable failures."""

    def __init__(self, items: list[CartItem] | None = None) -> None:
        self.server_items: list[CartItem] = [replace(item) for item in items or []]
        self.errors: dict[str, CartServiceError] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.on_add = None
        self._next_id = 100

    def _maybe_fail(self, operation: str) -> None:
        error = self.errors.get(operation)
        if error is not None:
            raise error

    async def fetch_cart(self) -> list[CartItem]:
        self.calls.append(("fetch",))
        self._maybe_fail("fetch")
        return [replace(item) for item in self.server_items]

    async def add_item(self, item: CartItem) -> Any:
        self.calls.append(("add", item.name))
        if self.on_add is not None:
            self.on_add(item)
        self._maybe_fail("add")
        if any(existing.name == item.name for existing in self.server_items):
            raise CartServiceError("duplicate", status=400, body="Item already exists")
        self.server_items.append(replace(item, id=f"srv-{self._next_id}"))
        self._next_id += 1
        return {"message": f"{item.name} added"}

    async def delete_item(self, name: str) -> Any:
        self.calls.append(("delete", name))
        self._maybe_fail("delete")
        self.server_items = [item for item in self.server_items if item.name != name]
        return None

    async def update_quantity(self, item_id: str, quantity: int) -> Any:
        self.calls.append(("update", item_id, quantity))
        self._maybe_fail("update")
        for item in self.server_items:
            if item.id == item_id:
                item.quantity = quantity
        return {}

    async def clear_cart(self) -> Any:
        self.calls.append(("clear",))
        self._maybe_fail("clear")
        self.server_items = []
        return None

    def called(self, operation: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == operation]


@pytest.fixture()
def bus() -> EventBus:
    return EventBus(InMemoryPubSub())


@pytest.fixture()
def toasts(bus: EventBus) -> ToastNotifier:
    return ToastNotifier(bus)


@pytest.fixture()
async def toast_log(bus: EventBus) -> list[Toast]:
    """Every toast published on the bus, in order."""
    received: list[Toast] = []

    async def _collect(event: Event) -> None:
        received.append(Toast.from_dict(event.data))

    await bus.subscribe_toasts(_collect)
    return received


class ManualClock:
    """Virtual time for timer-driven components."""

    def __init__(self) -> None:
        self.now = 0.0
        self._waiters: list[tuple[float, asyncio.Future]] = []

    def time(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        future = asyncio.get_running_loop().create_future()
        self._waiters.append((self.now + delay, future))
        await future

    @staticmethod
    async def _settle() -> None:
        for _ in range(5):
            await asyncio.sleep(0)

    async def advance(self, seconds: float) -> None:
        target = self.now + seconds
        await self._settle()
        while True:
            due = [waiter for waiter in self._waiters if waiter[0] <= target]
            if not due:
                break
            deadline, future = min(due, key=lambda waiter: waiter[0])
            self._waiters.remove((deadline, future))
            self.now = deadline
            if not future.done():
                future.set_result(None)
            await self._settle()
        self.now = target
        await self._settle()


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()
