"""
Accounts — registration and removal across identity provider and local store.

    from printly.accounts import AccountService

    accounts = AccountService(provider, users)
    result = await accounts.register(profile, secret)
"""

from printly.accounts._service import AccountService

__all__ = ("AccountService",)
