"""
Transition checks — pure functions over Order.
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from printly._types import ErrorKind, PrintlyError
from printly.domain import Order, OrderStatus
from printly.machine._table import TRANSITIONS, TERMINAL, CANCELLABLE


def allowed_targets(status: OrderStatus) -> frozenset[OrderStatus]:
    """Targets reachable from status. Unknown statuses have none."""
    return TRANSITIONS.get(status, frozenset())


def can_transition(status: OrderStatus, target: OrderStatus) -> bool:
    return target in allowed_targets(status)


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL


def is_active(order: Order) -> bool:
    return not is_terminal(order.status)


def can_cancel(order: Order) -> bool:
    """Only orders that have not been paid for can be cancelled by the owner."""
    return order.status in CANCELLABLE


def transition(order: Order, target: OrderStatus) -> Result[Order, PrintlyError]:
    """
    Apply a status change.

    Returns the order with the new status; persisting it (together with
    updated_by/updated_at) is the caller's job.

    Example:
        match transition(order, OrderStatus.PAID):
            case Ok(paid):
                await store.update(paid.id, {"status": paid.status, ...})
            case Error(e):
                print(e.kind)  # ErrorKind.INVALID_TRANSITION
    """
    if not can_transition(order.status, target):
        return Error(PrintlyError(
            ErrorKind.INVALID_TRANSITION,
            f"cannot move order {order.code or order.id} "
            f"from {order.status.value} to {target.value}",
        ))
    return Ok(order.with_changes(status=target))


__all__ = (
    "allowed_targets",
    "can_transition",
    "is_terminal",
    "is_active",
    "can_cancel",
    "transition",
)
