"""
Pickup code generation with store-backed uniqueness.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable, Awaitable

from kungfu import Result, Ok, Error

from printly._types import ErrorKind, PrintlyError
from printly.pickup._policy import CodePolicy
from printly.store import StoreError

logger = logging.getLogger(__name__)

type ExistsFn = Callable[[str], Awaitable[Result[bool, StoreError]]]
"""Uniqueness check against the authoritative order store."""


# ═══════════════════════════════════════════════════════════════════════════════
# Drawing
# ═══════════════════════════════════════════════════════════════════════════════


def _draw_modulo(policy: CodePolicy) -> str:
    alphabet = policy.alphabet
    raw = secrets.token_bytes(policy.length)
    return "".join(alphabet[b % len(alphabet)] for b in raw)


def _draw_rejection(policy: CodePolicy) -> str:
    alphabet = policy.alphabet
    limit = 256 - 256 % len(alphabet)
    out: list[str] = []
    while len(out) < policy.length:
        for b in secrets.token_bytes(policy.length - len(out)):
            if b < limit:
                out.append(alphabet[b % len(alphabet)])
    return "".join(out)


def draw_code(policy: CodePolicy = CodePolicy()) -> str:
    """Draw one candidate code. No uniqueness check."""
    if policy.unbiased:
        return _draw_rejection(policy)
    return _draw_modulo(policy)


def is_valid_code(code: str, policy: CodePolicy = CodePolicy()) -> bool:
    return len(code) == policy.length and all(c in policy.alphabet for c in code)


# ═══════════════════════════════════════════════════════════════════════════════
# generate() — bounded retry on collisions
# ═══════════════════════════════════════════════════════════════════════════════


async def generate(
    exists: ExistsFn,
    policy: CodePolicy = CodePolicy(),
) -> Result[str, PrintlyError]:
    """
    Generate a code no stored order uses yet.

    Collisions are retried up to policy.max_attempts, then RESOURCE_EXHAUSTED.
    A failing uniqueness check stops immediately with INTERNAL.

    Example:
        code = await P.generate(store.code_exists)
    """
    for attempt in range(1, policy.max_attempts + 1):
        code = draw_code(policy)
        match await exists(code):
            case Ok(False):
                return Ok(code)
            case Ok(_):
                logger.debug("pickup code collision on attempt %d", attempt)
            case Error(store_error):
                return Error(PrintlyError(
                    ErrorKind.INTERNAL,
                    "failed to check pickup code uniqueness",
                    store_error,
                ))

    return Error(PrintlyError(
        ErrorKind.RESOURCE_EXHAUSTED,
        f"failed to generate a unique pickup code after {policy.max_attempts} attempts",
    ))


__all__ = ("ExistsFn", "draw_code", "is_valid_code", "generate")
