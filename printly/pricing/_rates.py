"""
Pricing rates.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Rates:
    """
    Integer pricing constants, all in minor currency units.

    bytes_per_page is a size proxy for page count until real page
    extraction exists: pages = ceil(size / bytes_per_page), minimum 1.
    """

    per_page: int = 10
    bytes_per_page: int = 50_000
    color_multiplier: int = 3
    double_sided_numerator: int = 6
    double_sided_denominator: int = 10

    def __post_init__(self) -> None:
        if self.bytes_per_page <= 0 or self.double_sided_denominator <= 0:
            raise ValueError("bytes_per_page and double_sided_denominator must be positive")

    def with_per_page(self, per_page: int) -> Rates:
        return replace(self, per_page=per_page)


__all__ = ("Rates",)
