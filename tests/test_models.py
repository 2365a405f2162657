"""
Tests for FocusFi models

Test strategy:
1. Unit tests for individual components (models, parsers, reconciler)
2. Integration tests for flows (with in-memory storage and mock transports)
3. No real API calls in tests
"""

import json
import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from focusfi.models.local import BankAccount, Transaction, TransactionType
from focusfi.models.remote import (
    AccountsResponse,
    APIAccount,
    APIExpense,
    APIIncome,
    APITransaction,
    TransactionRequest,
    TransactionUpdateRequest,
)
from focusfi.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestLocalModels:
    """Tests for the locally persisted records."""

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        transaction = Transaction(
            title="Groceries",
            amount=Decimal("42.50"),
            date=date(2024, 1, 15),
            type=TransactionType.EXPENSE,
        )
        assert transaction.title == "Groceries"
        assert transaction.details == ""
        assert transaction.remote_id is None

    def test_transaction_keeps_text_as_given(self):
        """Test that titles and details are stored without trimming."""
        transaction = Transaction(
            title="  Rent  ",
            details=" January ",
            amount=Decimal("1000"),
            date=date(2024, 1, 1),
            type=TransactionType.EXPENSE,
        )
        assert transaction.title == "  Rent  "
        assert transaction.details == " January "

    def test_transaction_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Transaction(
                title="Refund",
                amount=Decimal("-5"),
                date=date(2024, 1, 1),
                type=TransactionType.INCOME,
            )

    def test_transaction_rejects_blank_title(self):
        """Test that a title of only spaces is rejected."""
        with pytest.raises(ValidationError):
            Transaction(
                title="   ",
                amount=Decimal("5"),
                date=date(2024, 1, 1),
                type=TransactionType.INCOME,
            )

    def test_is_synced_follows_remote_id(self):
        """Test that a transaction is synced exactly when it has a remote id."""
        local = Transaction(
            title="Cash",
            amount=Decimal("5"),
            date=date(2024, 1, 1),
            type=TransactionType.INCOME,
        )
        synced = local.model_copy(update={"remote_id": "r-1"})
        assert not local.is_synced
        assert synced.is_synced

    def test_signed_amount(self):
        """Test that expenses count negative and income positive."""
        expense = Transaction(
            title="Coffee",
            amount=Decimal("4.25"),
            date=date(2024, 1, 1),
            type=TransactionType.EXPENSE,
        )
        income = expense.model_copy(update={"type": TransactionType.INCOME})
        assert expense.signed_amount == Decimal("-4.25")
        assert income.signed_amount == Decimal("4.25")

    def test_content_key_ignores_local_id(self):
        """Test that two copies with different ids compare equal by content."""
        first = Transaction(
            remote_id="r-1",
            title="Coffee",
            amount=Decimal("4.25"),
            date=date(2024, 1, 1),
            type=TransactionType.EXPENSE,
        )
        second = first.model_copy(update={"id": uuid4()})
        assert first.id != second.id
        assert first.content_key() == second.content_key()

    def test_bank_account_defaults(self):
        """Test BankAccount default flags and balances."""
        account = BankAccount(bank_name="Selco", account_name="Selco Checking")
        assert account.include_in_total is True
        assert account.is_favorite is False
        assert account.is_credit is False
        assert account.current_balance == Decimal("0")


class TestRemoteModels:
    """Tests for backend payload models."""

    def test_expense_from_camel_case(self):
        """Test that expenses decode from camelCase keys."""
        expense = APIExpense.model_validate({
            "id": "e1",
            "name": "Rent",
            "amount": -42.50,
            "internalCategory": "Housing",
            "paymentDate": "2024-01-15",
            "isPaid": True,
        })
        assert expense.amount == Decimal("-42.5")
        assert expense.internal_category == "Housing"
        assert expense.payment_date == "2024-01-15"
        assert expense.is_paid is True

    def test_expense_requires_amount(self):
        """Test that an expense without an amount fails to decode."""
        with pytest.raises(ValidationError):
            APIExpense.model_validate({"id": "e1"})

    def test_income_from_camel_case(self):
        """Test that income records decode from camelCase keys."""
        income = APIIncome.model_validate({
            "id": "i1",
            "client": "Acme",
            "invoiceNumber": "INV-7",
            "invoiceTotal": "1500.00",
            "dependsOnCompletion": "after launch",
            "receivedDate": "2024-02-01T10:00:00Z",
        })
        assert income.invoice_total == Decimal("1500.00")
        assert income.invoice_number == "INV-7"
        assert income.depends_on_completion == "after launch"

    def test_api_transaction_title_fills_name(self):
        """Test that `title` and `name` are interchangeable."""
        transaction = APITransaction.model_validate({
            "id": "t1",
            "transactionId": "p1",
            "accountId": "a1",
            "amount": 12.5,
            "date": "2024-02-01",
            "title": "Coffee",
            "merchant_name": "Blue Bottle",
            "pending": False,
            "type": "expense",
        })
        assert transaction.name == "Coffee"
        assert transaction.title == "Coffee"
        assert transaction.details == "Blue Bottle"
        assert transaction.merchant_name == "Blue Bottle"
        assert transaction.transaction_type == TransactionType.EXPENSE

    def test_api_transaction_name_fills_title(self):
        """Test that a payload with only `name` also sets `title`."""
        transaction = APITransaction.model_validate({
            "id": "t2",
            "transactionId": "p2",
            "accountId": "a1",
            "amount": 900,
            "date": "2024-02-01",
            "name": "Payroll",
            "merchantName": "Employer Inc",
            "details": "February salary",
            "pending": False,
            "type": "income",
        })
        assert transaction.title == "Payroll"
        assert transaction.details == "February salary"
        assert transaction.transaction_type == TransactionType.INCOME

    def test_transaction_request_payload(self):
        """Test that request bodies send an absolute amount and ISO date."""
        request = TransactionRequest(
            title="Rent",
            amount=Decimal("-100.00"),
            date=date(2024, 3, 1),
            type=TransactionType.EXPENSE,
        )
        assert request.amount == Decimal("100.00")
        assert request.to_payload() == {
            "title": "Rent",
            "amount": 100.0,
            "date": "2024-03-01",
            "type": "expense",
        }

    def test_update_request_sends_only_given_fields(self):
        """Test that unset update fields are left out of the body."""
        request = TransactionUpdateRequest(amount=Decimal("-42.50"))
        assert request.to_payload() == {"amount": 42.5}

    def test_account_balances_fallbacks(self):
        """Test current falls back to available, and available to zero."""
        only_available = APIAccount.model_validate({
            "account_id": "a1",
            "name": "Savings",
            "type": "depository",
            "balances": {"available": 250.0},
        })
        empty = APIAccount.model_validate({
            "account_id": "a2",
            "name": "Card",
            "type": "credit",
            "balances": {},
        })
        assert only_available.current_balance == Decimal("250")
        assert empty.available_balance == Decimal("0")
        assert empty.current_balance == Decimal("0")
        assert empty.is_credit is True
        assert only_available.is_credit is False

    def test_accounts_envelope(self):
        """Test decoding of the accounts envelope."""
        response = AccountsResponse.model_validate({"accounts": []})
        assert response.accounts == []


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.SYNC_STARTED,
            description="Sync started",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to a structured log dict."""
        correlation_id = uuid4()
        event = AuditEventBuilder.sync_started(correlation_id)
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "sync_started"
        assert log_dict["correlation_id"] == str(correlation_id)
        assert log_dict["is_user_action"] is True

    def test_audit_event_to_row(self):
        """Test conversion to an audit_log row."""
        event = AuditEventBuilder.reconciled(
            "transaction",
            inserted=3,
            updated=0,
            deleted=2,
            correlation_id=uuid4(),
        )
        row = event.to_row()
        assert len(row) == 11
        assert row[2] == "transactions_reconciled"
        assert json.loads(row[8]) == {"inserted": 3, "updated": 0, "deleted": 2}
        assert row[10] == 0

    def test_reconciled_accounts_event_type(self):
        """Test that non-transaction reconciliation is an account event."""
        event = AuditEventBuilder.reconciled("account", 1, 2, 0, uuid4())
        assert event.event_type == AuditEventType.ACCOUNTS_RECONCILED

    def test_api_error_with_field_path_is_decoding_failure(self):
        """Test that a field path turns an API error into a decoding failure."""
        event = AuditEventBuilder.api_error(
            endpoint="/expenses",
            error_message="Missing key: 0.amount",
            field_path="0.amount",
        )
        assert event.event_type == AuditEventType.DECODING_FAILED
        assert event.details["field_path"] == "0.amount"
        assert event.severity == AuditSeverity.ERROR

    def test_data_cleared_is_warning(self):
        """Test that clearing data is logged as a warning."""
        event = AuditEventBuilder.data_cleared(4, 2)
        assert event.severity == AuditSeverity.WARNING
        assert event.details == {"transaction_count": 4, "account_count": 2}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
