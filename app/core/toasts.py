"""Transient toast notifications shown by the storefront UI."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from app.core.constants import TOAST_AUTO_CLOSE_MS
from app.core.notifications import EventBus
from logging_config import logger


class ToastLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Toast:
    level: ToastLevel
    message: str
    auto_close_ms: int = TOAST_AUTO_CLOSE_MS
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level.value,
            "message": self.message,
            "auto_close_ms": self.auto_close_ms,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Toast:
        return cls(
            level=ToastLevel(data["level"]),
            message=data["message"],
            auto_close_ms=int(data.get("auto_close_ms", TOAST_AUTO_CLOSE_MS)),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


class ToastNotifier:
    """Publishes toasts on the event bus toast channel."""

    def __init__(self, bus: EventBus):
        self._bus = bus

    async def show(self, level: ToastLevel, message: str) -> Toast:
        toast = Toast(level=level, message=message)
        logger.debug("Toast [%s]: %s", level.value, message)
        await self._bus.publish_toast(toast.to_dict())
        return toast

    async def success(self, message: str) -> Toast:
        return await self.show(ToastLevel.SUCCESS, message)

    async def info(self, message: str) -> Toast:
        return await self.show(ToastLevel.INFO, message)

    async def error(self, message: str) -> Toast:
        return await self.show(ToastLevel.ERROR, message)
