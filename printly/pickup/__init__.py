"""
Pickup — short public codes customers present to collect an order.

    from printly import pickup as P

    async def exists(code):
        return (await orders.find_by_code(code)).map(lambda o: o is not None)

    result = await P.generate(exists, P.CodePolicy(length=8))
"""

from printly.pickup._policy import DEFAULT_ALPHABET, CodePolicy
from printly.pickup._generate import ExistsFn, draw_code, is_valid_code, generate

__all__ = (
    "DEFAULT_ALPHABET",
    "CodePolicy",
    "ExistsFn",
    "draw_code",
    "is_valid_code",
    "generate",
)
