"""
Data Models Package

This package contains all Pydantic models used in FocusFi.
All data flowing through the system must conform to these schemas.
"""

from focusfi.models.local import (
    BankAccount,
    Transaction,
    TransactionType,
)
from focusfi.models.remote import (
    AccountBalances,
    AccountsResponse,
    APIAccount,
    APIErrorBody,
    APIExpense,
    APIIncome,
    APITransaction,
    DeleteResponse,
    TransactionRequest,
    TransactionUpdateRequest,
)
from focusfi.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Local models
    "BankAccount",
    "Transaction",
    "TransactionType",
    # Remote models
    "AccountBalances",
    "AccountsResponse",
    "APIAccount",
    "APIErrorBody",
    "APIExpense",
    "APIIncome",
    "APITransaction",
    "DeleteResponse",
    "TransactionRequest",
    "TransactionUpdateRequest",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
