"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of what each sync changed
2. Debugging information when the backend misbehaves
3. A history of user edits to local data

The audit logger:
- Is async so it fits the flows that call it
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace the events of one sync
"""

import logging
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from focusfi.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from focusfi.services.storage import AuditStorageInterface, StorageError


def configure_logging(debug: bool = False) -> None:
    """Configure stdlib logging and structlog for JSON output."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog for local logging
configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The local audit_log table (when storage is configured)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("focusfi.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    # -------------------------------------------------------------------------
    # Sync
    # -------------------------------------------------------------------------

    async def log_sync_started(self, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.sync_started(correlation_id))

    async def log_sync_completed(
        self,
        correlation_id: UUID,
        transaction_count: int,
        account_count: int,
    ) -> None:
        event = AuditEventBuilder.sync_completed(
            correlation_id=correlation_id,
            transaction_count=transaction_count,
            account_count=account_count,
        )
        await self.log(event)

    async def log_sync_failed(
        self,
        correlation_id: UUID,
        stage: str,
        error_message: str,
    ) -> None:
        event = AuditEventBuilder.sync_failed(
            correlation_id=correlation_id,
            stage=stage,
            error_message=error_message,
        )
        await self.log(event)

    async def log_reconciled(
        self,
        entity_type: str,
        inserted: int,
        updated: int,
        deleted: int,
        correlation_id: UUID,
    ) -> None:
        """Log a reconciliation summary for one collection."""
        event = AuditEventBuilder.reconciled(
            entity_type=entity_type,
            inserted=inserted,
            updated=updated,
            deleted=deleted,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_api_error(
        self,
        endpoint: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
        field_path: Optional[str] = None,
    ) -> None:
        """Log a failed backend call. A field path marks a decoding failure."""
        event = AuditEventBuilder.api_error(
            endpoint=endpoint,
            error_message=error_message,
            correlation_id=correlation_id,
            field_path=field_path,
        )
        await self.log(event)

    async def log_save_failed(
        self,
        entity_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.save_failed(
            entity_type=entity_type,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    # -------------------------------------------------------------------------
    # Local edits
    # -------------------------------------------------------------------------

    async def log_transaction_added(
        self,
        transaction_id: UUID,
        title: str,
        amount: str,
        transaction_type: str,
    ) -> None:
        event = AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            title=title,
            amount=amount,
            transaction_type=transaction_type,
        )
        await self.log(event)

    async def log_transaction_deleted(self, transaction_id: UUID, title: str) -> None:
        await self.log(AuditEventBuilder.transaction_deleted(transaction_id, title))

    async def log_account_updated(
        self,
        account_id: UUID,
        account_name: str,
        changes: dict[str, Any],
    ) -> None:
        event = AuditEventBuilder.account_updated(
            account_id=account_id,
            account_name=account_name,
            changes=changes,
        )
        await self.log(event)

    async def log_data_cleared(self, transaction_count: int, account_count: int) -> None:
        await self.log(AuditEventBuilder.data_cleared(transaction_count, account_count))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a sync).
    Pass it through all subsequent operations.
    """
    return uuid4()
