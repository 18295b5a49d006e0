"""Payment widget callback routes for the aiohttp server."""
from __future__ import annotations

from typing import Any

from aiohttp import web

from app.integrations.payment_gateway import CallbackPaymentWidget
from logging_config import logger

RAZORPAY_CALLBACK_PATH = "/razorpay/callback"
RAZORPAY_DISMISS_PATH = "/razorpay/dismiss"


async def _read_payload(request: web.Request) -> dict[str, Any]:
    if request.content_type == "application/json":
        try:
            data = await request.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
    form = await request.post()
    return {key: str(value) for key, value in form.items()}


def build_razorpay_callback(widget: CallbackPaymentWidget):
    async def api_razorpay_callback(request: web.Request) -> web.Response:
        """POST /razorpay/callback - widget handler response."""
        payload = await _read_payload(request)
        if not payload.get("razorpay_payment_id"):
            logger.warning("Razorpay callback without payment id: %s", sorted(payload))
        delivered = await widget.deliver(payload)
        if not delivered:
            return web.json_response({"ok": False, "error": "no_open_widget"}, status=409)
        return web.json_response({"ok": True})

    return api_razorpay_callback


def build_razorpay_dismiss(widget: CallbackPaymentWidget):
    async def api_razorpay_dismiss(request: web.Request) -> web.Response:
        """POST /razorpay/dismiss - widget closed without payment."""
        if not widget.dismiss():
            return web.json_response({"ok": False, "error": "no_open_widget"}, status=409)
        return web.json_response({"ok": True})

    return api_razorpay_dismiss


def setup_payment_callback_routes(app: web.Application, widget: CallbackPaymentWidget) -> None:
    app.router.add_post(RAZORPAY_CALLBACK_PATH, build_razorpay_callback(widget))
    app.router.add_post(RAZORPAY_DISMISS_PATH, build_razorpay_dismiss(widget))


def create_callback_app(widget: CallbackPaymentWidget) -> web.Application:
    app = web.Application()
    setup_payment_callback_routes(app, widget)
    return app
