"""
SQLite Storage Implementation

DESIGN DECISION: Local data lives in a single SQLite file because:
1. It ships with Python - nothing to install or run
2. One file is easy to back up or delete
3. Reconciliation results can be applied atomically

Money is stored as TEXT so Decimal values round-trip exactly. Dates are
ISO `YYYY-MM-DD` strings, ids are UUID strings, flags are 0/1 integers.
"""

import json
import sqlite3
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from focusfi.config import get_settings
from focusfi.models.audit import AuditEvent, AuditEventType, AuditSeverity
from focusfi.models.local import BankAccount, Transaction, TransactionType
from focusfi.services.storage.interface import (
    AuditStorageInterface,
    LocalStorageInterface,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)


logger = structlog.get_logger(__name__)


SCHEMA = """
    CREATE TABLE IF NOT EXISTS transactions (
        id          TEXT PRIMARY KEY,
        remote_id   TEXT,
        title       TEXT NOT NULL,
        details     TEXT NOT NULL DEFAULT '',
        amount      TEXT NOT NULL,
        date        TEXT NOT NULL,
        type        TEXT NOT NULL CHECK(type IN ('income','expense'))
    );

    CREATE INDEX IF NOT EXISTS idx_transactions_date ON transactions(date);
    CREATE INDEX IF NOT EXISTS idx_transactions_remote ON transactions(remote_id);

    CREATE TABLE IF NOT EXISTS bank_accounts (
        id                TEXT PRIMARY KEY,
        bank_name         TEXT NOT NULL,
        account_name      TEXT NOT NULL,
        available_balance TEXT NOT NULL DEFAULT '0',
        current_balance   TEXT NOT NULL DEFAULT '0',
        include_in_total  INTEGER NOT NULL DEFAULT 1,
        is_favorite       INTEGER NOT NULL DEFAULT 0,
        is_credit         INTEGER NOT NULL DEFAULT 0,
        institution_id    TEXT,
        remote_id         TEXT
    );

    CREATE TABLE IF NOT EXISTS audit_log (
        event_id        TEXT PRIMARY KEY,
        timestamp       TEXT NOT NULL,
        event_type      TEXT NOT NULL,
        severity        TEXT NOT NULL,
        entity_type     TEXT,
        entity_id       TEXT,
        correlation_id  TEXT,
        description     TEXT NOT NULL,
        details_json    TEXT NOT NULL DEFAULT '',
        error_message   TEXT,
        is_user_action  INTEGER NOT NULL DEFAULT 0
    );

    CREATE INDEX IF NOT EXISTS idx_audit_correlation ON audit_log(correlation_id);
"""

TRANSACTION_COLUMNS = "id, remote_id, title, details, amount, date, type"
ACCOUNT_COLUMNS = (
    "id, bank_name, account_name, available_balance, current_balance, "
    "include_in_total, is_favorite, is_credit, institution_id, remote_id"
)
AUDIT_COLUMNS = (
    "event_id, timestamp, event_type, severity, entity_type, entity_id, "
    "correlation_id, description, details_json, error_message, is_user_action"
)


class SQLiteDatabase:
    """
    Owns the SQLite connection and the schema.

    The connection is opened lazily and shared by both stores.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or get_settings().storage.db_path
        self._conn: Optional[sqlite3.Connection] = None

    @retry(
        retry=retry_if_exception_type(sqlite3.OperationalError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        reraise=True,
    )
    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        try:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode = WAL")
            conn.executescript(SCHEMA)
            conn.commit()
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                self._conn = self._open()
            except sqlite3.Error as e:
                raise StorageConnectionError(
                    f"Failed to open database {self.db_path}: {e}"
                ) from e
            logger.info("database_opened", db_path=self.db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


# =============================================================================
# Row mapping
# =============================================================================

def _transaction_to_row(transaction: Transaction) -> tuple:
    return (
        str(transaction.id),
        transaction.remote_id,
        transaction.title,
        transaction.details,
        str(transaction.amount),
        transaction.date.isoformat(),
        transaction.type.value,
    )


def _row_to_transaction(row: sqlite3.Row) -> Transaction:
    return Transaction(
        id=UUID(row["id"]),
        remote_id=row["remote_id"],
        title=row["title"],
        details=row["details"],
        amount=Decimal(row["amount"]),
        date=date.fromisoformat(row["date"]),
        type=TransactionType(row["type"]),
    )


def _account_to_row(account: BankAccount) -> tuple:
    return (
        str(account.id),
        account.bank_name,
        account.account_name,
        str(account.available_balance),
        str(account.current_balance),
        int(account.include_in_total),
        int(account.is_favorite),
        int(account.is_credit),
        account.institution_id,
        account.remote_id,
    )


def _row_to_account(row: sqlite3.Row) -> BankAccount:
    return BankAccount(
        id=UUID(row["id"]),
        bank_name=row["bank_name"],
        account_name=row["account_name"],
        available_balance=Decimal(row["available_balance"]),
        current_balance=Decimal(row["current_balance"]),
        include_in_total=bool(row["include_in_total"]),
        is_favorite=bool(row["is_favorite"]),
        is_credit=bool(row["is_credit"]),
        institution_id=row["institution_id"],
        remote_id=row["remote_id"],
    )


def _row_to_event(row: sqlite3.Row) -> AuditEvent:
    return AuditEvent(
        event_id=UUID(row["event_id"]),
        timestamp=datetime.fromisoformat(row["timestamp"]),
        event_type=AuditEventType(row["event_type"]),
        severity=AuditSeverity(row["severity"]),
        entity_type=row["entity_type"],
        entity_id=row["entity_id"],
        correlation_id=UUID(row["correlation_id"]) if row["correlation_id"] else None,
        description=row["description"],
        details=json.loads(row["details_json"]) if row["details_json"] else {},
        error_message=row["error_message"],
        is_user_action=bool(row["is_user_action"]),
    )


# =============================================================================
# Stores
# =============================================================================

class SQLiteStorage(LocalStorageInterface):
    """SQLite implementation of the local record store."""

    def __init__(self, database: Optional[SQLiteDatabase] = None):
        self._db = database or SQLiteDatabase()

    async def list_transactions(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Transaction]:
        sql = f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE 1=1"
        params: list = []
        if date_from:
            sql += " AND date >= ?"
            params.append(date_from.isoformat())
        if date_to:
            sql += " AND date <= ?"
            params.append(date_to.isoformat())
        sql += " ORDER BY date DESC, title ASC"

        try:
            rows = self._db.get_connection().execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list transactions: {e}") from e
        return [_row_to_transaction(r) for r in rows]

    async def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        try:
            row = self._db.get_connection().execute(
                f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE id = ?",
                (str(transaction_id),),
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get transaction: {e}") from e
        return _row_to_transaction(row) if row else None

    async def save_transaction(self, transaction: Transaction) -> bool:
        conn = self._db.get_connection()
        try:
            with conn:
                conn.execute(
                    f"INSERT INTO transactions ({TRANSACTION_COLUMNS}) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?)",
                    _transaction_to_row(transaction),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to save transaction: {e}") from e
        return True

    async def delete_transaction(self, transaction_id: UUID) -> bool:
        conn = self._db.get_connection()
        try:
            with conn:
                cursor = conn.execute(
                    "DELETE FROM transactions WHERE id = ?",
                    (str(transaction_id),),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete transaction: {e}") from e
        return cursor.rowcount > 0

    async def apply_transaction_changes(
        self,
        inserts: list[Transaction],
        deletes: list[UUID],
    ) -> None:
        conn = self._db.get_connection()
        try:
            with conn:
                conn.executemany(
                    "DELETE FROM transactions WHERE id = ?",
                    [(str(i),) for i in deletes],
                )
                conn.executemany(
                    f"INSERT INTO transactions ({TRANSACTION_COLUMNS}) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?)",
                    [_transaction_to_row(t) for t in inserts],
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to save synced transactions: {e}") from e

    async def list_accounts(self) -> list[BankAccount]:
        try:
            rows = self._db.get_connection().execute(
                f"SELECT {ACCOUNT_COLUMNS} FROM bank_accounts "
                "ORDER BY bank_name ASC, account_name ASC"
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list accounts: {e}") from e
        return [_row_to_account(r) for r in rows]

    async def get_account(self, account_id: UUID) -> Optional[BankAccount]:
        try:
            row = self._db.get_connection().execute(
                f"SELECT {ACCOUNT_COLUMNS} FROM bank_accounts WHERE id = ?",
                (str(account_id),),
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get account: {e}") from e
        return _row_to_account(row) if row else None

    async def update_account(self, account: BankAccount) -> bool:
        conn = self._db.get_connection()
        try:
            with conn:
                cursor = conn.execute(
                    "UPDATE bank_accounts SET bank_name = ?, account_name = ?, "
                    "available_balance = ?, current_balance = ?, include_in_total = ?, "
                    "is_favorite = ?, is_credit = ?, institution_id = ?, remote_id = ? "
                    "WHERE id = ?",
                    _account_to_row(account)[1:] + (str(account.id),),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to update account: {e}") from e
        if cursor.rowcount == 0:
            raise NotFoundError(f"Account not found: {account.id}")
        return True

    async def apply_account_changes(
        self,
        inserts: list[BankAccount],
        updates: list[BankAccount],
        deletes: list[UUID],
    ) -> None:
        conn = self._db.get_connection()
        try:
            with conn:
                conn.executemany(
                    "DELETE FROM bank_accounts WHERE id = ?",
                    [(str(i),) for i in deletes],
                )
                conn.executemany(
                    "UPDATE bank_accounts SET bank_name = ?, account_name = ?, "
                    "available_balance = ?, current_balance = ?, include_in_total = ?, "
                    "is_favorite = ?, is_credit = ?, institution_id = ?, remote_id = ? "
                    "WHERE id = ?",
                    [_account_to_row(a)[1:] + (str(a.id),) for a in updates],
                )
                conn.executemany(
                    f"INSERT INTO bank_accounts ({ACCOUNT_COLUMNS}) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    [_account_to_row(a) for a in inserts],
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to save synced accounts: {e}") from e

    async def clear_all(self) -> tuple[int, int]:
        conn = self._db.get_connection()
        try:
            with conn:
                transactions = conn.execute("DELETE FROM transactions").rowcount
                accounts = conn.execute("DELETE FROM bank_accounts").rowcount
        except sqlite3.Error as e:
            raise StorageError(f"Failed to clear data: {e}") from e
        return transactions, accounts


class SQLiteAuditStorage(AuditStorageInterface):
    """SQLite implementation of the audit log."""

    def __init__(self, database: Optional[SQLiteDatabase] = None):
        self._db = database or SQLiteDatabase()

    async def append_event(self, event: AuditEvent) -> bool:
        conn = self._db.get_connection()
        try:
            with conn:
                conn.execute(
                    f"INSERT INTO audit_log ({AUDIT_COLUMNS}) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    event.to_row(),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to append audit event: {e}") from e
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        try:
            rows = self._db.get_connection().execute(
                f"SELECT {AUDIT_COLUMNS} FROM audit_log "
                "WHERE correlation_id = ? ORDER BY timestamp ASC, rowid ASC",
                (str(correlation_id),),
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get audit events: {e}") from e
        return [_row_to_event(r) for r in rows]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        try:
            rows = self._db.get_connection().execute(
                f"SELECT {AUDIT_COLUMNS} FROM audit_log "
                "ORDER BY timestamp DESC, rowid DESC LIMIT ?",
                (limit,),
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get audit events: {e}") from e
        return [_row_to_event(r) for r in rows]
