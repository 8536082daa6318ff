"""
Pickup code policy — alphabet, length and retry bound.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, replace

DEFAULT_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True, slots=True)
class CodePolicy:
    """
    Pickup code configuration.

    Example:
        policy = CodePolicy().with_length(8).with_max_attempts(20)

    Note: unbiased=False keeps the byte-modulo mapping (256 is not a multiple
    of 36, so the first 4 symbols are slightly more likely). unbiased=True
    switches to rejection sampling, which changes the output distribution.
    """

    alphabet: str = DEFAULT_ALPHABET
    length: int = 6
    max_attempts: int = 10
    unbiased: bool = False

    def __post_init__(self) -> None:
        if len(self.alphabet) < 2 or len(self.alphabet) > 256:
            raise ValueError("alphabet must hold between 2 and 256 symbols")
        if self.length < 1:
            raise ValueError("length must be positive")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be positive")

    def with_alphabet(self, alphabet: str) -> CodePolicy:
        return replace(self, alphabet=alphabet)

    def with_length(self, length: int) -> CodePolicy:
        return replace(self, length=length)

    def with_max_attempts(self, attempts: int) -> CodePolicy:
        return replace(self, max_attempts=attempts)

    def with_unbiased(self, unbiased: bool = True) -> CodePolicy:
        return replace(self, unbiased=unbiased)


__all__ = ("DEFAULT_ALPHABET", "CodePolicy")
