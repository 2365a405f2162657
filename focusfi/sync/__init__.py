"""
Sync Package

Pure reconciliation of remote snapshots into local collections.
"""

from focusfi.sync.reconciler import (
    AccountChanges,
    SyncPlan,
    TransactionChanges,
    account_fields_from_remote,
    build_sync_plan,
    reconcile_accounts,
    reconcile_transactions,
    transaction_from_expense,
    transaction_from_income,
)

__all__ = [
    "AccountChanges",
    "SyncPlan",
    "TransactionChanges",
    "account_fields_from_remote",
    "build_sync_plan",
    "reconcile_accounts",
    "reconcile_transactions",
    "transaction_from_expense",
    "transaction_from_income",
]
