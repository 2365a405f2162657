"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for local storage.
This allows us to:
1. Keep the reconciler and flows independent of SQLite
2. Use in-memory storage for testing
3. Swap the on-device store later without touching business logic

The interface is intentionally simple - we're not building a full ORM.
Just the operations the dashboard, the local edits and the sync need.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional
from uuid import UUID

from focusfi.models.audit import AuditEvent
from focusfi.models.local import BankAccount, Transaction


class LocalStorageInterface(ABC):
    """
    Abstract interface for the on-device record store.

    Transactions and bank accounts are independent collections.
    """

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_transactions(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Transaction]:
        """
        List transactions, newest first.

        Args:
            date_from: Only transactions on or after this date
            date_to: Only transactions on or before this date

        Returns:
            List of matching transactions
        """
        pass

    @abstractmethod
    async def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        """
        Retrieve a transaction by its local id.

        Returns:
            The transaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def save_transaction(self, transaction: Transaction) -> bool:
        """
        Insert a new transaction.

        Raises:
            StorageError: If the save fails
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: UUID) -> bool:
        """
        Delete a transaction by local id.

        Returns:
            True if a row was deleted, False if none matched
        """
        pass

    @abstractmethod
    async def apply_transaction_changes(
        self,
        inserts: list[Transaction],
        deletes: list[UUID],
    ) -> None:
        """
        Apply a reconciliation result in one unit of work.

        Deletions are applied before insertions.

        Raises:
            StorageError: If any part fails; nothing is applied then
        """
        pass

    # -------------------------------------------------------------------------
    # Bank accounts
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_accounts(self) -> list[BankAccount]:
        """List all bank accounts ordered by bank name, then account name."""
        pass

    @abstractmethod
    async def get_account(self, account_id: UUID) -> Optional[BankAccount]:
        pass

    @abstractmethod
    async def update_account(self, account: BankAccount) -> bool:
        """
        Overwrite an existing account.

        Raises:
            NotFoundError: If the account doesn't exist
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    async def apply_account_changes(
        self,
        inserts: list[BankAccount],
        updates: list[BankAccount],
        deletes: list[UUID],
    ) -> None:
        """
        Apply a reconciliation result in one unit of work.

        Raises:
            StorageError: If any part fails; nothing is applied then
        """
        pass

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    @abstractmethod
    async def clear_all(self) -> tuple[int, int]:
        """
        Delete every transaction and bank account.

        Returns:
            (transactions deleted, accounts deleted)
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one sync).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StorageConnectionError(StorageError):
    """Could not open the storage backend."""
    pass
