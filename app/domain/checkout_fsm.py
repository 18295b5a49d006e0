"""Checkout, cart mutation and success overlay state machines."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from app.core.exceptions import InvalidTransitionError


class CheckoutState:
    """Payment handshake lifecycle."""

    IDLE = "idle"
    KEY_REQUESTED = "key_requested"
    ORDER_REQUESTED = "order_requested"
    WIDGET_OPEN = "widget_open"
    SUCCEEDED = "succeeded"
    ABANDONED = "abandoned"
    FAILED = "failed"


class MutationState:
    """Lifecycle of a single cart mutation."""

    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    RECONCILED_VIA_RELOAD = "reconciled_via_reload"
    FAILED = "failed"


class OverlayState:
    HIDDEN = "hidden"
    VISIBLE = "visible"


CHECKOUT_TRANSITIONS: Mapping[str, frozenset[str]] = {
    CheckoutState.IDLE: frozenset(
        {
            CheckoutState.KEY_REQUESTED,
            CheckoutState.ABANDONED,
        }
    ),
    CheckoutState.KEY_REQUESTED: frozenset(
        {
            CheckoutState.ORDER_REQUESTED,
            CheckoutState.FAILED,
        }
    ),
    CheckoutState.ORDER_REQUESTED: frozenset(
        {
            CheckoutState.WIDGET_OPEN,
            CheckoutState.FAILED,
        }
    ),
    CheckoutState.WIDGET_OPEN: frozenset(
        {
            CheckoutState.SUCCEEDED,
            CheckoutState.ABANDONED,
            CheckoutState.FAILED,
        }
    ),
    CheckoutState.SUCCEEDED: frozenset(),
    CheckoutState.ABANDONED: frozenset(),
    CheckoutState.FAILED: frozenset(),
}

CHECKOUT_TERMINAL_STATES = frozenset(
    {
        CheckoutState.SUCCEEDED,
        CheckoutState.ABANDONED,
        CheckoutState.FAILED,
    }
)

MUTATION_TRANSITIONS: Mapping[str, frozenset[str]] = {
    MutationState.IDLE: frozenset({MutationState.PENDING}),
    MutationState.PENDING: frozenset(
        {
            MutationState.COMMITTED,
            MutationState.RECONCILED_VIA_RELOAD,
            MutationState.FAILED,
        }
    ),
    MutationState.COMMITTED: frozenset(),
    MutationState.RECONCILED_VIA_RELOAD: frozenset(),
    MutationState.FAILED: frozenset(),
}


@dataclass(frozen=True, slots=True)
class TransitionValidationResult:
    allowed: bool
    reason: str | None = None


def validate_transition(
    transitions: Mapping[str, frozenset[str]], current: str, target: str
) -> TransitionValidationResult:
    """Check ``current -> target`` against a transition table."""
    if target not in transitions:
        return TransitionValidationResult(False, f"Unsupported state: {target}")
    if current not in transitions:
        return TransitionValidationResult(False, f"Unsupported current state: {current}")
    if target not in transitions[current]:
        return TransitionValidationResult(False, f"Transition '{current} -> {target}' is not allowed")
    return TransitionValidationResult(True)


def ensure_transition(transitions: Mapping[str, frozenset[str]], current: str, target: str) -> str:
    result = validate_transition(transitions, current, target)
    if not result.allowed:
        raise InvalidTransitionError(current, target)
    return target
