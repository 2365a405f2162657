"""In-memory storage, used by tests and when no database path is configured."""

from datetime import date
from typing import Optional
from uuid import UUID

from focusfi.models.audit import AuditEvent
from focusfi.models.local import BankAccount, Transaction
from focusfi.services.storage.interface import (
    AuditStorageInterface,
    LocalStorageInterface,
    NotFoundError,
)


class InMemoryStorage(LocalStorageInterface):
    """Dict-backed record store. Records are copied in and out."""

    def __init__(self):
        self._transactions: dict[UUID, Transaction] = {}
        self._accounts: dict[UUID, BankAccount] = {}

    async def list_transactions(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Transaction]:
        results = [
            t.model_copy()
            for t in self._transactions.values()
            if (date_from is None or t.date >= date_from)
            and (date_to is None or t.date <= date_to)
        ]
        results.sort(key=lambda t: t.title)
        results.sort(key=lambda t: t.date, reverse=True)
        return results

    async def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        found = self._transactions.get(transaction_id)
        return found.model_copy() if found else None

    async def save_transaction(self, transaction: Transaction) -> bool:
        self._transactions[transaction.id] = transaction.model_copy()
        return True

    async def delete_transaction(self, transaction_id: UUID) -> bool:
        return self._transactions.pop(transaction_id, None) is not None

    async def apply_transaction_changes(
        self,
        inserts: list[Transaction],
        deletes: list[UUID],
    ) -> None:
        for transaction_id in deletes:
            self._transactions.pop(transaction_id, None)
        for transaction in inserts:
            self._transactions[transaction.id] = transaction.model_copy()

    async def list_accounts(self) -> list[BankAccount]:
        return sorted(
            (a.model_copy() for a in self._accounts.values()),
            key=lambda a: (a.bank_name, a.account_name),
        )

    async def get_account(self, account_id: UUID) -> Optional[BankAccount]:
        found = self._accounts.get(account_id)
        return found.model_copy() if found else None

    async def update_account(self, account: BankAccount) -> bool:
        if account.id not in self._accounts:
            raise NotFoundError(f"Account not found: {account.id}")
        self._accounts[account.id] = account.model_copy()
        return True

    async def apply_account_changes(
        self,
        inserts: list[BankAccount],
        updates: list[BankAccount],
        deletes: list[UUID],
    ) -> None:
        for account_id in deletes:
            self._accounts.pop(account_id, None)
        for account in updates + inserts:
            self._accounts[account.id] = account.model_copy()

    async def clear_all(self) -> tuple[int, int]:
        counts = (len(self._transactions), len(self._accounts))
        self._transactions.clear()
        self._accounts.clear()
        return counts


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self.events if e.correlation_id == correlation_id]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]
