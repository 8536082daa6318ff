"""
Order transition table.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from printly.domain import OrderStatus as S

# ═══════════════════════════════════════════════════════════════════════════════
# Transitions — source → allowed targets
# ═══════════════════════════════════════════════════════════════════════════════

TRANSITIONS: Mapping[S, frozenset[S]] = MappingProxyType({
    S.CREATED: frozenset({S.AWAITING_DOCUMENT, S.CANCELLED}),
    S.AWAITING_DOCUMENT: frozenset({S.PENDING_PAYMENT, S.CANCELLED}),
    S.PENDING_PAYMENT: frozenset({S.PAID, S.CANCELLED, S.FAILED}),
    S.PAID: frozenset({S.AWAITING_USER, S.READY_TO_PRINT, S.CANCELLED}),
    S.AWAITING_USER: frozenset({S.READY_TO_PRINT, S.CANCELLED}),
    S.READY_TO_PRINT: frozenset({S.PRINTING, S.CANCELLED}),
    S.PRINTING: frozenset({S.PRINTED, S.FAILED}),
    S.PRINTED: frozenset({S.READY_FOR_PICKUP}),
    S.READY_FOR_PICKUP: frozenset({S.COMPLETED}),
    # Terminal states
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
    S.FAILED: frozenset(),
})

TERMINAL: frozenset[S] = frozenset(s for s, targets in TRANSITIONS.items() if not targets)

CANCELLABLE: frozenset[S] = frozenset({S.PENDING_PAYMENT, S.AWAITING_DOCUMENT})


__all__ = ("TRANSITIONS", "TERMINAL", "CANCELLABLE")
