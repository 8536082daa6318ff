"""
Machine — order status transitions.

    from printly import machine as M

    M.can_transition(OrderStatus.PAID, OrderStatus.READY_TO_PRINT)  # True
    result = M.transition(order, OrderStatus.CANCELLED)

No side effects: every function here is a pure computation over statuses.
"""

from printly.machine._table import TRANSITIONS, TERMINAL, CANCELLABLE
from printly.machine._transition import (
    allowed_targets,
    can_transition,
    is_terminal,
    is_active,
    can_cancel,
    transition,
)

__all__ = (
    "TRANSITIONS",
    "TERMINAL",
    "CANCELLABLE",
    "allowed_targets",
    "can_transition",
    "is_terminal",
    "is_active",
    "can_cancel",
    "transition",
)
