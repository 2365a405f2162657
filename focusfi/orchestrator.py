"""
Main Orchestrator for FocusFi

This module ties together all the components and defines the
end-to-end flows for:
1. Sync (fetch expenses, income and accounts → reconcile → persist)
2. Local edits (add / delete transactions, account flags, clear data)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is written locally until every remote fetch has succeeded
- API and storage failures become a message on the result, never a crash
- Every step is audited

This is the "glue" that ensures the system works correctly
even when individual components might behave unexpectedly.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Union
from uuid import UUID

import structlog
from pydantic import BaseModel, Field

from focusfi.audit import AuditLogger, create_correlation_id
from focusfi.config import get_settings
from focusfi.models.local import BankAccount, Transaction, TransactionType
from focusfi.models.remote import APIAccount, APIExpense, APIIncome
from focusfi.queries import DashboardQueries
from focusfi.services.api import APIClient, APIError, DecodingError, describe_api_error
from focusfi.services.auth import AuthProvider, SupabaseAuthService
from focusfi.services.remote import AccountService, TransactionService
from focusfi.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryStorage,
    LocalStorageInterface,
    SQLiteAuditStorage,
    SQLiteDatabase,
    SQLiteStorage,
    StorageError,
)
from focusfi.services.storage import NotFoundError as RecordNotFoundError
from focusfi.sync import SyncPlan, build_sync_plan


logger = structlog.get_logger(__name__)


class SyncResult(BaseModel):
    """Outcome of one sync, shown to the user."""

    correlation_id: UUID
    success: bool
    error_message: Optional[str] = None
    transactions_inserted: int = 0
    transactions_deleted: int = 0
    accounts_inserted: int = 0
    accounts_updated: int = 0
    accounts_deleted: int = 0
    transaction_count: int = Field(default=0, description="Transactions after the sync")
    account_count: int = Field(default=0, description="Accounts after the sync")


class SyncFlow:
    """
    Orchestrates a refresh from the backend.

    Flow:
    1. Fetch expenses and income (concurrently)
    2. Fetch linked accounts
    3. Reconcile against the local collections
    4. Persist the plan

    A failure in steps 1-2 leaves local data untouched.
    """

    def __init__(
        self,
        transaction_service: TransactionService,
        account_service: AccountService,
        storage: LocalStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        keep_unsynced: Optional[bool] = None,
    ):
        self._transaction_service = transaction_service
        self._account_service = account_service
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        if keep_unsynced is None:
            keep_unsynced = get_settings().app.keep_unsynced
        self._keep_unsynced = keep_unsynced

    async def refresh(self, correlation_id: Optional[UUID] = None) -> SyncResult:
        """
        Run one sync.

        Returns:
            SyncResult; `success` is False and `error_message` is set when
            any step failed
        """
        correlation_id = correlation_id or create_correlation_id()
        await self._audit_logger.log_sync_started(correlation_id)

        # Steps 1-2: fetch
        try:
            expenses, incomes = await self._transaction_service.fetch_expenses_and_income()
        except APIError as e:
            return await self._api_failure(e, "/expenses, /income", "fetching transactions", correlation_id)

        try:
            remote_accounts = await self._account_service.fetch_accounts()
        except APIError as e:
            return await self._api_failure(e, "/plaid/accounts", "fetching accounts", correlation_id)

        # Steps 3-4: reconcile and persist
        try:
            plan = await self._reconcile(expenses, incomes, remote_accounts)
            await self._persist(plan)
        except StorageError as e:
            message = f"Failed to save synced data: {e}"
            logger.error("sync_persist_failed", error=str(e), correlation_id=str(correlation_id))
            await self._audit_logger.log_save_failed("sync", str(e), correlation_id)
            await self._audit_logger.log_sync_failed(correlation_id, "saving", message)
            return SyncResult(
                correlation_id=correlation_id,
                success=False,
                error_message=message,
            )
        except Exception as e:
            await self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"stage": "reconciling"},
                correlation_id=correlation_id,
            )
            raise

        transactions, accounts = plan.transactions, plan.accounts
        await self._audit_logger.log_reconciled(
            "transaction",
            inserted=len(transactions.inserts),
            updated=0,
            deleted=len(transactions.deletes),
            correlation_id=correlation_id,
        )
        await self._audit_logger.log_reconciled(
            "account",
            inserted=len(accounts.inserts),
            updated=len(accounts.updates),
            deleted=len(accounts.deletes),
            correlation_id=correlation_id,
        )
        await self._audit_logger.log_sync_completed(
            correlation_id,
            transaction_count=len(transactions.result),
            account_count=len(accounts.result),
        )

        return SyncResult(
            correlation_id=correlation_id,
            success=True,
            transactions_inserted=len(transactions.inserts),
            transactions_deleted=len(transactions.deletes),
            accounts_inserted=len(accounts.inserts),
            accounts_updated=len(accounts.updates),
            accounts_deleted=len(accounts.deletes),
            transaction_count=len(transactions.result),
            account_count=len(accounts.result),
        )

    async def _reconcile(
        self,
        expenses: list[APIExpense],
        incomes: list[APIIncome],
        remote_accounts: list[APIAccount],
    ) -> SyncPlan:
        local_transactions = await self._storage.list_transactions()
        local_accounts = await self._storage.list_accounts()
        return build_sync_plan(
            local_transactions,
            local_accounts,
            expenses=expenses,
            incomes=incomes,
            remote_accounts=remote_accounts,
            keep_unsynced=self._keep_unsynced,
        )

    async def _persist(self, plan: SyncPlan) -> None:
        await self._storage.apply_transaction_changes(
            inserts=plan.transactions.inserts,
            deletes=plan.transactions.deletes,
        )
        await self._storage.apply_account_changes(
            inserts=plan.accounts.inserts,
            updates=plan.accounts.updates,
            deletes=plan.accounts.deletes,
        )

    async def _api_failure(
        self,
        error: APIError,
        endpoint: str,
        stage: str,
        correlation_id: UUID,
    ) -> SyncResult:
        message = describe_api_error(error)
        field_path = error.field_path if isinstance(error, DecodingError) else None
        await self._audit_logger.log_api_error(
            endpoint=endpoint,
            error_message=message,
            correlation_id=correlation_id,
            field_path=field_path,
        )
        await self._audit_logger.log_sync_failed(correlation_id, stage, message)
        return SyncResult(
            correlation_id=correlation_id,
            success=False,
            error_message=message,
        )


def parse_amount(value: Union[str, Decimal, int, float]) -> Decimal:
    """
    Parse a user-entered amount.

    Accepts an optional leading `$` and thousands separators.

    Raises:
        ValueError: If the value is not a non-negative number
    """
    text = str(value).strip().lstrip("$").replace(",", "")
    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {value!r}") from e
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Amount must be a non-negative number: {value!r}")
    return amount


class LedgerFlow:
    """
    Orchestrates the user's edits to local data.

    Transactions added here have no remote id; they stay local until the
    backend knows about them.
    """

    def __init__(
        self,
        storage: LocalStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()

    async def add_transaction(
        self,
        title: str,
        amount: Union[str, Decimal],
        transaction_type: TransactionType,
        transaction_date: Optional[date] = None,
        details: str = "",
    ) -> Transaction:
        """
        Record a transaction entered by the user.

        Raises:
            ValueError: If the title is empty or the amount is invalid
            StorageError: If the save fails
        """
        if not title or not title.strip():
            raise ValueError("Title is required")

        transaction = Transaction(
            title=title.strip(),
            details=(details or "").strip(),
            amount=parse_amount(amount),
            date=transaction_date or date.today(),
            type=transaction_type,
        )
        await self._storage.save_transaction(transaction)

        await self._audit_logger.log_transaction_added(
            transaction_id=transaction.id,
            title=transaction.title,
            amount=str(transaction.amount),
            transaction_type=transaction.type.value,
        )
        return transaction

    async def delete_transaction(self, transaction_id: UUID) -> bool:
        """Delete a transaction. Returns False when it was already gone."""
        existing = await self._storage.get_transaction(transaction_id)
        if existing is None:
            return False

        deleted = await self._storage.delete_transaction(transaction_id)
        if deleted:
            await self._audit_logger.log_transaction_deleted(transaction_id, existing.title)
        return deleted

    async def set_favorite(self, account_id: UUID, is_favorite: bool) -> BankAccount:
        return await self._update_account_flag(account_id, "is_favorite", is_favorite)

    async def set_include_in_total(self, account_id: UUID, include: bool) -> BankAccount:
        return await self._update_account_flag(account_id, "include_in_total", include)

    async def _update_account_flag(
        self,
        account_id: UUID,
        field: str,
        value: bool,
    ) -> BankAccount:
        account = await self._storage.get_account(account_id)
        if account is None:
            raise RecordNotFoundError(f"Account not found: {account_id}")

        updated = account.model_copy(update={field: value})
        await self._storage.update_account(updated)

        await self._audit_logger.log_account_updated(
            account_id=account_id,
            account_name=account.account_name,
            changes={field: value},
        )
        return updated

    async def clear_all_data(self) -> tuple[int, int]:
        """
        Delete every local transaction and account.

        Returns:
            (transactions deleted, accounts deleted)
        """
        transaction_count, account_count = await self._storage.clear_all()
        await self._audit_logger.log_data_cleared(transaction_count, account_count)
        return transaction_count, account_count


def create_app_components(
    use_storage: bool = True,
    auth: Optional[AuthProvider] = None,
    api_client: Optional[APIClient] = None,
) -> tuple[SyncFlow, LedgerFlow, DashboardQueries, AuthProvider]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to open the SQLite database.
                    Set to False to keep everything in memory.
        auth: Auth provider; defaults to Supabase from the environment
        api_client: API client; defaults to one built on `auth`

    Returns:
        (sync_flow, ledger_flow, dashboard_queries, auth)
    """
    auth = auth or SupabaseAuthService()
    api_client = api_client or APIClient(auth)

    storage: LocalStorageInterface
    audit_storage: AuditStorageInterface

    if use_storage:
        database = SQLiteDatabase()
        try:
            database.get_connection()
            storage = SQLiteStorage(database)
            audit_storage = SQLiteAuditStorage(database)
        except StorageError as e:
            # Database unavailable - continue in memory
            logger.warning("storage_unavailable", error=str(e))
            storage = InMemoryStorage()
            audit_storage = InMemoryAuditStorage()
    else:
        storage = InMemoryStorage()
        audit_storage = InMemoryAuditStorage()

    audit_logger = AuditLogger(audit_storage)

    sync_flow = SyncFlow(
        transaction_service=TransactionService(api_client),
        account_service=AccountService(api_client),
        storage=storage,
        audit_logger=audit_logger,
    )
    ledger_flow = LedgerFlow(
        storage=storage,
        audit_logger=audit_logger,
    )
    dashboard = DashboardQueries(storage)

    return sync_flow, ledger_flow, dashboard, auth
