"""Tests for merging remote snapshots into local collections."""

import pytest
from datetime import date
from decimal import Decimal

from focusfi.models.local import BankAccount, Transaction, TransactionType
from focusfi.models.remote import APIAccount, APIExpense, APIIncome
from focusfi.sync import (
    build_sync_plan,
    reconcile_accounts,
    reconcile_transactions,
    transaction_from_expense,
    transaction_from_income,
)


def make_expense(**overrides) -> APIExpense:
    data = {"id": "e1", "name": "Rent", "amount": "-100.00", "paymentDate": "2024-01-05"}
    data.update(overrides)
    return APIExpense.model_validate(data)


def make_income(**overrides) -> APIIncome:
    data = {"id": "i1", "client": "Acme", "invoiceTotal": "1500", "receivedDate": "2024-01-10"}
    data.update(overrides)
    return APIIncome.model_validate(data)


def make_account(account_id: str = "a1", **overrides) -> APIAccount:
    data = {
        "account_id": account_id,
        "name": "Chase Personal Checking",
        "type": "depository",
        "balances": {"available": 100.0, "current": 120.0},
        "item_id": "item-1",
    }
    data.update(overrides)
    return APIAccount.model_validate(data)


def local_transaction(remote_id=None, title="Cash gift") -> Transaction:
    return Transaction(
        remote_id=remote_id,
        title=title,
        amount=Decimal("20"),
        date=date(2024, 1, 2),
        type=TransactionType.INCOME,
    )


class TestTransactionMapping:
    """Tests for remote record → local transaction mapping."""

    def test_expense_amount_is_normalized(self):
        """Test -42.50 → 42.50 and -100.00 → 100.00."""
        assert transaction_from_expense(make_expense(amount="-42.50")).amount == Decimal("42.50")
        assert transaction_from_expense(make_expense(amount="-100.00")).amount == Decimal("100.00")

    def test_expense_fields(self):
        """Test title, details and date of a mapped expense."""
        transaction = transaction_from_expense(
            make_expense(notes="January", groupName="Home")
        )
        assert transaction.remote_id == "e1"
        assert transaction.title == "Rent"
        assert transaction.details == "January"
        assert transaction.date == date(2024, 1, 5)
        assert transaction.type == TransactionType.EXPENSE

    def test_expense_date_falls_back_to_due_date(self):
        """Test that a missing payment date uses the due date."""
        transaction = transaction_from_expense(
            make_expense(paymentDate=None, dueDate="2024-02-01T00:00:00.000Z")
        )
        assert transaction.date == date(2024, 2, 1)

    def test_expense_without_dates_is_today(self):
        """Test that an expense with no usable date lands on today."""
        transaction = transaction_from_expense(make_expense(paymentDate="soon"))
        assert transaction.date == date.today()

    def test_empty_strings_are_values(self):
        """Test that an empty field is used as is rather than skipped."""
        transaction = transaction_from_expense(
            make_expense(vendor="", notes="Note", paymentDate="", dueDate="2024-02-01")
        )
        assert transaction.details == ""
        assert transaction.date == date.today()

    def test_remote_text_is_not_trimmed(self):
        """Test that titles and details keep the backend's exact text."""
        transaction = transaction_from_expense(make_expense(name=" Rent ", vendor="Landlord "))
        assert transaction.title == " Rent "
        assert transaction.details == "Landlord "

    def test_expense_defaults(self):
        """Test the default title and empty details."""
        transaction = transaction_from_expense(make_expense(name="  "))
        assert transaction.title == "Expense"
        assert transaction.details == ""

    def test_income_fields(self):
        """Test title, details and date of mapped income."""
        transaction = transaction_from_income(
            make_income(invoiceNumber="INV-9", invoiceTotal="-250.5")
        )
        assert transaction.title == "Acme"
        assert transaction.details == "INV-9"
        assert transaction.amount == Decimal("250.5")
        assert transaction.date == date(2024, 1, 10)
        assert transaction.type == TransactionType.INCOME

    def test_income_title_falls_back_to_invoice_number(self):
        """Test that an income without a client is titled by invoice number."""
        transaction = transaction_from_income(
            make_income(client=None, invoiceNumber="INV-9", receivedDate=None,
                        expectedByDate="2024-03-01")
        )
        assert transaction.title == "INV-9"
        assert transaction.date == date(2024, 3, 1)

    def test_empty_income_client_gets_default_title(self):
        """Test that an empty client is not replaced by the invoice number."""
        transaction = transaction_from_income(make_income(client="", invoiceNumber="INV-9"))
        assert transaction.title == "Income"
        assert transaction.details == "INV-9"

    def test_income_defaults(self):
        """Test the default title of an anonymous income."""
        transaction = transaction_from_income(make_income(client=None, paymentProcessor="Stripe"))
        assert transaction.title == "Income"
        assert transaction.details == "Stripe"


class TestReconcileTransactions:
    """Tests for the transaction replacement policy."""

    def test_synced_transactions_are_replaced(self):
        """Test that every remote-id transaction is deleted and the snapshot inserted."""
        stale = local_transaction(remote_id="old")
        changes = reconcile_transactions([stale], [make_expense()], [make_income()])

        assert changes.deletes == [stale.id]
        assert {t.remote_id for t in changes.inserts} == {"e1", "i1"}
        assert {t.remote_id for t in changes.result} == {"e1", "i1"}

    def test_unsynced_transactions_are_kept(self):
        """Test that local-only transactions survive by default."""
        mine = local_transaction()
        changes = reconcile_transactions([mine], [make_expense()], [])

        assert changes.deletes == []
        assert mine in changes.result
        assert len(changes.result) == 2

    def test_unsynced_transactions_dropped_when_asked(self):
        """Test that keep_unsynced=False deletes everything."""
        mine = local_transaction()
        changes = reconcile_transactions([mine], [make_expense()], [], keep_unsynced=False)

        assert changes.deletes == [mine.id]
        assert [t.remote_id for t in changes.result] == ["e1"]

    def test_empty_snapshot_clears_synced(self):
        """Test that an empty remote snapshot removes all synced transactions."""
        stale = local_transaction(remote_id="old")
        changes = reconcile_transactions([stale], [], [])
        assert changes.deletes == [stale.id]
        assert changes.result == []

    def test_idempotent(self):
        """Test that applying the same snapshot twice gives the same content."""
        expenses = [make_expense(), make_expense(id="e2", amount="-5")]
        incomes = [make_income()]

        first = reconcile_transactions([local_transaction()], expenses, incomes)
        second = reconcile_transactions(first.result, expenses, incomes)

        assert sorted(repr(t.content_key()) for t in first.result) == sorted(
            repr(t.content_key()) for t in second.result
        )


class TestReconcileAccounts:
    """Tests for bank account reconciliation."""

    def test_new_account_is_inserted(self):
        """Test mapping of a new remote account."""
        changes = reconcile_accounts([], [make_account()])

        assert len(changes.inserts) == 1
        account = changes.inserts[0]
        assert account.remote_id == "a1"
        assert account.bank_name == "Chase Personal"
        assert account.account_name == "Chase Personal Checking"
        assert account.available_balance == Decimal("100")
        assert account.current_balance == Decimal("120")
        assert account.institution_id == "item-1"
        assert account.include_in_total is True
        assert account.is_favorite is False

    def test_new_credit_account_excluded_from_total(self):
        """Test that new credit accounts start outside the total."""
        changes = reconcile_accounts(
            [],
            [make_account(name="Mystery Card", type="credit", balances={"current": -50})],
        )
        account = changes.inserts[0]
        assert account.is_credit is True
        assert account.include_in_total is False
        assert account.bank_name == "Credit"

    def test_existing_account_keeps_user_flags(self):
        """Test that an update preserves id, favorite and include-in-total."""
        existing = BankAccount(
            bank_name="Old",
            account_name="Old name",
            remote_id="a1",
            is_favorite=True,
            include_in_total=False,
        )
        changes = reconcile_accounts([existing], [make_account()])

        assert changes.inserts == []
        assert changes.deletes == []
        updated = changes.updates[0]
        assert updated.id == existing.id
        assert updated.is_favorite is True
        assert updated.include_in_total is False
        assert updated.account_name == "Chase Personal Checking"
        assert updated.current_balance == Decimal("120")

    def test_missing_accounts_are_deleted(self):
        """Test that accounts absent remotely, or without remote id, are deleted."""
        gone = BankAccount(bank_name="X", account_name="Gone", remote_id="zzz")
        manual = BankAccount(bank_name="Y", account_name="Manual")
        changes = reconcile_accounts([gone, manual], [make_account()])

        assert set(changes.deletes) == {gone.id, manual.id}
        assert [a.remote_id for a in changes.result] == ["a1"]

    def test_duplicate_remote_ids_collapse(self):
        """Test that a remote id listed twice yields one account with the last values."""
        changes = reconcile_accounts(
            [],
            [make_account(name="First"), make_account(name="Second")],
        )
        assert len(changes.inserts) == 1
        assert changes.inserts[0].account_name == "Second"

    def test_idempotent(self):
        """Test that a second sync only updates, with identical results."""
        remote = [make_account(), make_account("a2", name="Selco Savings")]
        first = reconcile_accounts([], remote)
        second = reconcile_accounts(first.result, remote)

        assert second.inserts == []
        assert second.deletes == []
        assert sorted(a.model_dump_json() for a in second.updates) == sorted(
            a.model_dump_json() for a in first.result
        )


class TestBuildSyncPlan:
    """Tests for combining both reconciliations."""

    def test_only_fetched_snapshots_are_reconciled(self):
        """Test that missing snapshots leave that half of the plan empty."""
        plan = build_sync_plan([], [], remote_accounts=[make_account()])
        assert plan.transactions is None
        assert plan.accounts is not None

    def test_full_plan(self):
        """Test a plan with both halves."""
        plan = build_sync_plan(
            [local_transaction()],
            [],
            expenses=[make_expense()],
            incomes=[],
            remote_accounts=[],
            keep_unsynced=False,
        )
        assert len(plan.transactions.deletes) == 1
        assert plan.accounts.result == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
