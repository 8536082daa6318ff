"""
Cost estimation — deterministic integer arithmetic.

Order of operations per document is fixed:
    pages → rate → color → double-sided (truncating) → copies
Moving the truncating double-sided step after copies changes results.
"""

from __future__ import annotations

from collections.abc import Iterable

from printly.domain import ColorMode, Document, Order, PrintOptions
from printly.pricing._rates import Rates


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


def estimate_pages(size: int, rates: Rates = Rates()) -> int:
    return max(1, _ceil_div(size, rates.bytes_per_page))


def estimate_document_cost(
    size: int,
    options: PrintOptions,
    rates: Rates = Rates(),
) -> int:
    """
    Cost of one document in minor currency units.

    Example:
        # 100_000 bytes, color, double-sided, 2 copies, 10/page
        # 2 pages → 20 → 60 → 36 → 72
        estimate_document_cost(100_000, PrintOptions(copies=2, color=ColorMode.COLOR))
    """
    cost = estimate_pages(size, rates) * rates.per_page

    if options.color is ColorMode.COLOR:
        cost = cost * rates.color_multiplier

    if options.double_sided:
        cost = cost * rates.double_sided_numerator // rates.double_sided_denominator

    if options.copies > 1:
        cost = cost * options.copies

    return cost


def estimate_order_cost(
    order: Order | Iterable[Document],
    rates: Rates = Rates(),
) -> int:
    """Sum of independently computed document costs."""
    documents = order.documents if isinstance(order, Order) else order
    return sum(
        estimate_document_cost(doc.size, doc.print_options, rates)
        for doc in documents
    )


__all__ = ("estimate_pages", "estimate_document_cost", "estimate_order_cost")
