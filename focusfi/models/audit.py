"""
Audit Models for FocusFi

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of what each sync changed
2. Debugging information when the backend misbehaves
3. A history of user edits to local data

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Sync
    SYNC_STARTED = "sync_started"
    SYNC_COMPLETED = "sync_completed"
    SYNC_FAILED = "sync_failed"
    TRANSACTIONS_RECONCILED = "transactions_reconciled"
    ACCOUNTS_RECONCILED = "accounts_reconciled"

    # Remote API
    API_ERROR = "api_error"
    DECODING_FAILED = "decoding_failed"

    # Local edits
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    ACCOUNT_UPDATED = "account_updated"
    DATA_CLEARED = "data_cleared"

    # Persistence
    SAVE_FAILED = "save_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = Field(default=AuditSeverity.INFO)

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'account', 'sync')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Local or remote id of the entity"
    )

    # Correlation - all events of one sync share an id
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_row(self) -> tuple:
        """
        Convert to a row for the local `audit_log` table.

        Columns, in order:
        (event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action)
        """
        return (
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type,
            self.entity_id,
            str(self.correlation_id) if self.correlation_id else None,
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message,
            int(self.is_user_action),
        )


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.sync_started(correlation_id)
        event = AuditEventBuilder.transaction_deleted(transaction_id, title)
    """

    @staticmethod
    def sync_started(correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_STARTED,
            entity_type="sync",
            correlation_id=correlation_id,
            description="Sync with backend started",
            is_user_action=True,
        )

    @staticmethod
    def sync_completed(
        correlation_id: UUID,
        transaction_count: int,
        account_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_COMPLETED,
            entity_type="sync",
            correlation_id=correlation_id,
            description=(
                f"Sync completed: {transaction_count} transactions, "
                f"{account_count} accounts"
            ),
            details={
                "transaction_count": transaction_count,
                "account_count": account_count,
            },
        )

    @staticmethod
    def sync_failed(
        correlation_id: UUID,
        stage: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="sync",
            correlation_id=correlation_id,
            description=f"Sync failed while {stage}",
            error_message=error_message,
            details={"stage": stage},
        )

    @staticmethod
    def reconciled(
        entity_type: str,
        inserted: int,
        updated: int,
        deleted: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.TRANSACTIONS_RECONCILED
            if entity_type == "transaction"
            else AuditEventType.ACCOUNTS_RECONCILED
        )
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description=(
                f"Reconciled {entity_type}s: {inserted} inserted, "
                f"{updated} updated, {deleted} deleted"
            ),
            details={
                "inserted": inserted,
                "updated": updated,
                "deleted": deleted,
            },
        )

    @staticmethod
    def api_error(
        endpoint: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
        field_path: Optional[str] = None,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.DECODING_FAILED
            if field_path is not None
            else AuditEventType.API_ERROR
        )
        details = {"endpoint": endpoint}
        if field_path is not None:
            details["field_path"] = field_path
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.ERROR,
            entity_type="api",
            correlation_id=correlation_id,
            description=f"Backend request failed: {endpoint}",
            error_message=error_message,
            details=details,
        )

    @staticmethod
    def transaction_added(
        transaction_id: UUID,
        title: str,
        amount: str,
        transaction_type: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            description=f"{transaction_type.capitalize()} added: {title} - ${amount}",
            details={
                "title": title,
                "amount": amount,
                "type": transaction_type,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(transaction_id: UUID, title: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            description=f"Transaction deleted: {title}",
            is_user_action=True,
        )

    @staticmethod
    def account_updated(
        account_id: UUID,
        account_name: str,
        changes: dict[str, Any],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_UPDATED,
            entity_type="account",
            entity_id=str(account_id),
            description=f"Account updated: {account_name}",
            details=changes,
            is_user_action=True,
        )

    @staticmethod
    def data_cleared(transaction_count: int, account_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_CLEARED,
            severity=AuditSeverity.WARNING,
            description="All local data cleared",
            details={
                "transaction_count": transaction_count,
                "account_count": account_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        entity_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description=f"Failed to save {entity_type} data locally",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
