"""
printly — order lifecycle and dual-system consistency core for print shops.

    from printly import machine as M   # Order status transitions
    from printly import pickup as P    # Pickup codes
    from printly import pricing        # Cost estimation
    from printly import saga as S      # Compensating dual writes
"""

from printly import domain
from printly import machine
from printly import pickup
from printly import pricing
from printly import store
from printly import storage
from printly import identity
from printly import saga
from printly import ingest
from printly._types import (
    Result,
    Ok,
    Error,
    ErrorKind,
    PrintlyError,
    Errors,
)
from printly.config import Settings
from printly.accounts import AccountService
from printly.centers import CenterService
from printly.orders import OrderService, DocumentRequest

__version__ = "0.1.0"

__all__ = (
    "domain",
    "machine",
    "pickup",
    "pricing",
    "store",
    "storage",
    "identity",
    "saga",
    "ingest",
    "Result",
    "Ok",
    "Error",
    "ErrorKind",
    "PrintlyError",
    "Errors",
    "Settings",
    "AccountService",
    "CenterService",
    "OrderService",
    "DocumentRequest",
)
