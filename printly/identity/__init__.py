"""
Identity — external account provider.

    from printly import identity as I

    provider = I.MemoryIdentityProvider()
    uid = await provider.create_account(profile, "s3cret!")
"""

from printly.identity._types import IdentityError, IdentityNotFound, IdentityProvider
from printly.identity._memory import MemoryIdentityProvider

__all__ = (
    "IdentityError",
    "IdentityNotFound",
    "IdentityProvider",
    "MemoryIdentityProvider",
)
