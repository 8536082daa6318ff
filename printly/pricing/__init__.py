"""
Pricing — order cost estimation.

    from printly import pricing

    total = pricing.estimate_order_cost(order, pricing.Rates(per_page=10))
"""

from printly.pricing._rates import Rates
from printly.pricing._estimate import (
    estimate_pages,
    estimate_document_cost,
    estimate_order_cost,
)

__all__ = (
    "Rates",
    "estimate_pages",
    "estimate_document_cost",
    "estimate_order_cost",
)
