"""
Remote Services Package

Endpoint-level services built on the API client.
"""

from focusfi.services.remote.account_service import AccountService
from focusfi.services.remote.transaction_service import TransactionService

__all__ = [
    "AccountService",
    "TransactionService",
]
