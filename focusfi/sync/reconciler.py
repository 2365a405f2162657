"""
Reconciler

Merges fresh remote records into the current local collections.

The reconciler is a pure transform: it reads the local records it is
given, decides what to insert, update and delete, and returns a plan
together with the resulting collections. Nothing here touches the
network or the store.

TRANSACTIONS: every transaction that carries a remote id is replaced by
the freshly mapped remote set. Locally created transactions (no remote
id) survive unless `keep_unsynced` is turned off.

ACCOUNTS: matched by remote id and updated in place so the user's
favorite and include-in-total choices survive a sync. Local accounts
without a matching remote id are removed.
"""

from typing import Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, Field

from focusfi.banks import infer_bank_name
from focusfi.dates import first_available, parse_api_date_or_now
from focusfi.models.local import BankAccount, Transaction, TransactionType
from focusfi.models.remote import APIAccount, APIExpense, APIIncome


logger = structlog.get_logger(__name__)


# =============================================================================
# PLAN
# =============================================================================

class TransactionChanges(BaseModel):
    """What a sync does to the transaction collection."""

    inserts: list[Transaction] = Field(default_factory=list)
    deletes: list[UUID] = Field(default_factory=list)
    result: list[Transaction] = Field(
        default_factory=list,
        description="The collection after applying the changes"
    )


class AccountChanges(BaseModel):
    """What a sync does to the bank account collection."""

    inserts: list[BankAccount] = Field(default_factory=list)
    updates: list[BankAccount] = Field(default_factory=list)
    deletes: list[UUID] = Field(default_factory=list)
    result: list[BankAccount] = Field(
        default_factory=list,
        description="The collection after applying the changes"
    )


class SyncPlan(BaseModel):
    """Both halves of one reconciliation."""

    transactions: Optional[TransactionChanges] = None
    accounts: Optional[AccountChanges] = None


# =============================================================================
# MAPPING
# =============================================================================

def _title_or(title: Optional[str], default: str) -> str:
    # Local titles must not be blank.
    if title is None or not title.strip():
        return default
    return title


def transaction_from_expense(expense: APIExpense) -> Transaction:
    """Map a remote expense onto a local expense transaction."""
    return Transaction(
        remote_id=expense.id,
        title=_title_or(expense.name, "Expense"),
        details=first_available(
            expense.vendor,
            expense.notes,
            expense.group_name,
            expense.internal_category,
        ) or "",
        amount=abs(expense.amount),
        date=parse_api_date_or_now(
            first_available(expense.payment_date, expense.due_date),
            field="expense.date",
        ),
        type=TransactionType.EXPENSE,
    )


def transaction_from_income(income: APIIncome) -> Transaction:
    """Map a remote income record onto a local income transaction."""
    return Transaction(
        remote_id=income.id,
        title=_title_or(first_available(income.client, income.invoice_number), "Income"),
        details=first_available(
            income.invoice_number,
            income.notes,
            income.payment_processor,
        ) or "",
        amount=abs(income.invoice_total),
        date=parse_api_date_or_now(
            first_available(income.received_date, income.expected_by_date),
            field="income.date",
        ),
        type=TransactionType.INCOME,
    )


def account_fields_from_remote(remote: APIAccount) -> dict:
    """The fields a sync owns on a local account."""
    return {
        "bank_name": infer_bank_name(remote.name, fallback=remote.type.title()),
        "account_name": remote.name,
        "available_balance": remote.available_balance,
        "current_balance": remote.current_balance,
        "is_credit": remote.is_credit,
        "institution_id": remote.item_id,
        "remote_id": remote.account_id,
    }


# =============================================================================
# RECONCILIATION
# =============================================================================

def reconcile_transactions(
    local: list[Transaction],
    expenses: list[APIExpense],
    incomes: list[APIIncome],
    keep_unsynced: bool = True,
) -> TransactionChanges:
    """
    Replace synced transactions with the remote snapshot.

    Args:
        local: Current local transactions
        expenses: Remote expenses
        incomes: Remote income records
        keep_unsynced: Keep local transactions that have no remote id

    Returns:
        The changes and the resulting collection
    """
    kept = [t for t in local if not t.is_synced] if keep_unsynced else []
    kept_ids = {t.id for t in kept}
    deletes = [t.id for t in local if t.id not in kept_ids]

    inserts = [transaction_from_expense(e) for e in expenses]
    inserts += [transaction_from_income(i) for i in incomes]

    logger.debug(
        "transactions_reconciled",
        kept=len(kept),
        deleted=len(deletes),
        inserted=len(inserts),
    )
    return TransactionChanges(
        inserts=inserts,
        deletes=deletes,
        result=kept + inserts,
    )


def reconcile_accounts(
    local: list[BankAccount],
    remote_accounts: list[APIAccount],
) -> AccountChanges:
    """
    Bring local accounts in line with the remote list.

    Existing accounts keep their local id, favorite flag and
    include-in-total flag. New accounts are counted in the total unless
    they are credit accounts. A remote id listed twice counts once, with
    the values of its last occurrence.
    """
    latest: dict[str, APIAccount] = {}
    for remote in remote_accounts:
        latest[remote.account_id] = remote

    deletes: list[UUID] = []
    by_remote_id: dict[str, BankAccount] = {}
    for account in local:
        if account.remote_id in latest and account.remote_id not in by_remote_id:
            by_remote_id[account.remote_id] = account
        else:
            deletes.append(account.id)

    inserts: list[BankAccount] = []
    updates: list[BankAccount] = []
    for remote in latest.values():
        fields = account_fields_from_remote(remote)
        existing = by_remote_id.get(remote.account_id)
        if existing is not None:
            updates.append(existing.model_copy(update=fields))
        else:
            inserts.append(
                BankAccount(
                    include_in_total=not remote.is_credit,
                    is_favorite=False,
                    **fields,
                )
            )

    logger.debug(
        "accounts_reconciled",
        inserted=len(inserts),
        updated=len(updates),
        deleted=len(deletes),
    )
    return AccountChanges(
        inserts=inserts,
        updates=updates,
        deletes=deletes,
        result=updates + inserts,
    )


def build_sync_plan(
    local_transactions: list[Transaction],
    local_accounts: list[BankAccount],
    expenses: Optional[list[APIExpense]] = None,
    incomes: Optional[list[APIIncome]] = None,
    remote_accounts: Optional[list[APIAccount]] = None,
    keep_unsynced: bool = True,
) -> SyncPlan:
    """
    Reconcile whichever remote snapshots were fetched.

    Transactions are reconciled only when both expenses and incomes are
    given; accounts only when the account list is given.
    """
    plan = SyncPlan()
    if expenses is not None and incomes is not None:
        plan.transactions = reconcile_transactions(
            local_transactions,
            expenses,
            incomes,
            keep_unsynced=keep_unsynced,
        )
    if remote_accounts is not None:
        plan.accounts = reconcile_accounts(local_accounts, remote_accounts)
    return plan
