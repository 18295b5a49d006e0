"""Visibility of the cart slide-over panel."""
from __future__ import annotations


class CartPanel:
    def __init__(self) -> None:
        self.visible = False

    def open(self) -> None:
        self.visible = True

    def close(self) -> None:
        self.visible = False

    def toggle(self) -> bool:
        self.visible = not self.visible
        return self.visible
