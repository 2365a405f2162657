"""
Dashboard Queries

DESIGN DECISION: Everything the dashboard shows is computed here from
local storage, never from the API. The UI renders the results and owns
no arithmetic of its own.

Covers:
1. Income / expense totals for a date range and progress against forecasts
2. Sorted income and expense lists
3. Bank accounts grouped by institution with per-group and overall totals
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from focusfi.config import get_settings
from focusfi.dates import month_range
from focusfi.models.local import BankAccount, Transaction, TransactionType
from focusfi.services.storage import LocalStorageInterface


# =============================================================================
# TRANSACTIONS
# =============================================================================

def filter_by_date(
    transactions: list[Transaction],
    start: date,
    end: date,
) -> list[Transaction]:
    """Transactions whose date falls in [start, end]."""
    return [t for t in transactions if start <= t.date <= end]


def total_of(transactions: list[Transaction], transaction_type: TransactionType) -> Decimal:
    return sum(
        (t.amount for t in transactions if t.type == transaction_type),
        Decimal("0"),
    )


def forecast_progress(current: Decimal, forecast: Decimal) -> float:
    """Fraction of the forecast reached, capped at 1. Zero when there is no forecast."""
    if forecast <= 0:
        return 0.0
    return float(min(current / forecast, Decimal("1")))


def sorted_income(transactions: list[Transaction], by_date: bool = False) -> list[Transaction]:
    """Income, largest first (or newest first)."""
    income = [t for t in transactions if t.type == TransactionType.INCOME]
    if by_date:
        return sorted(income, key=lambda t: t.date, reverse=True)
    return sorted(income, key=lambda t: t.amount, reverse=True)


def sorted_expenses(transactions: list[Transaction], by_date: bool = False) -> list[Transaction]:
    """Expenses, smallest first (or newest first)."""
    expenses = [t for t in transactions if t.type == TransactionType.EXPENSE]
    if by_date:
        return sorted(expenses, key=lambda t: t.date, reverse=True)
    return sorted(expenses, key=lambda t: t.amount)


# =============================================================================
# ACCOUNTS
# =============================================================================

class AccountGroup(BaseModel):
    """All accounts of one institution, in display order."""

    bank_name: str
    accounts: list[BankAccount] = Field(default_factory=list)

    @property
    def is_credit_only(self) -> bool:
        return bool(self.accounts) and all(a.is_credit for a in self.accounts)

    @property
    def total(self) -> Decimal:
        """Current balance of the accounts counted in the total."""
        return sum(
            (a.current_balance for a in self.accounts if a.include_in_total),
            Decimal("0"),
        )


def group_accounts(accounts: list[BankAccount]) -> list[AccountGroup]:
    """
    Group accounts by bank name.

    Groups made only of credit accounts come last; otherwise groups are
    ordered by name. Inside a group: favorites, then non-credit accounts,
    then by account name.
    """
    grouped: dict[str, list[BankAccount]] = {}
    for account in accounts:
        grouped.setdefault(account.bank_name, []).append(account)

    groups = [
        AccountGroup(
            bank_name=bank_name,
            accounts=sorted(
                members,
                key=lambda a: (not a.is_favorite, a.is_credit, a.account_name),
            ),
        )
        for bank_name, members in grouped.items()
    ]
    groups.sort(key=lambda g: (g.is_credit_only, g.bank_name))
    return groups


def total_funds(accounts: list[BankAccount]) -> Decimal:
    """Sum of current balances of every include-in-total account."""
    return sum(
        (a.current_balance for a in accounts if a.include_in_total),
        Decimal("0"),
    )


# =============================================================================
# SUMMARY
# =============================================================================

class DashboardSummary(BaseModel):
    """Everything the dashboard renders for one date range."""

    start: date
    end: date
    total_income: Decimal
    total_expenses: Decimal
    forecasted_income: Decimal
    forecasted_expenses: Decimal
    income_progress: float
    expense_progress: float
    income: list[Transaction]
    expenses: list[Transaction]
    account_groups: list[AccountGroup]
    total_funds: Decimal

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expenses


class DashboardQueries:
    """Reads local storage and builds dashboard summaries."""

    def __init__(self, storage: LocalStorageInterface):
        self._storage = storage

    async def summary(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        forecasted_income: Optional[Decimal] = None,
        forecasted_expenses: Optional[Decimal] = None,
        income_by_date: bool = False,
        expenses_by_date: bool = False,
    ) -> DashboardSummary:
        """
        Build the dashboard for a date range.

        Args:
            start: First day (defaults to the start of the current month)
            end: Last day, inclusive (defaults to the end of the current month)
            forecasted_income: Defaults to the configured forecast
            forecasted_expenses: Defaults to the configured forecast
            income_by_date: Sort income newest first instead of by amount
            expenses_by_date: Sort expenses newest first instead of by amount
        """
        app_settings = get_settings().app
        if start is None or end is None:
            month_start, month_end = month_range(date.today())
            start = start or month_start
            end = end or month_end
        if forecasted_income is None:
            forecasted_income = app_settings.forecasted_income
        if forecasted_expenses is None:
            forecasted_expenses = app_settings.forecasted_expenses

        transactions = await self._storage.list_transactions(date_from=start, date_to=end)
        accounts = await self._storage.list_accounts()

        income_total = total_of(transactions, TransactionType.INCOME)
        expense_total = total_of(transactions, TransactionType.EXPENSE)
        groups = group_accounts(accounts)

        return DashboardSummary(
            start=start,
            end=end,
            total_income=income_total,
            total_expenses=expense_total,
            forecasted_income=forecasted_income,
            forecasted_expenses=forecasted_expenses,
            income_progress=forecast_progress(income_total, forecasted_income),
            expense_progress=forecast_progress(expense_total, forecasted_expenses),
            income=sorted_income(transactions, by_date=income_by_date),
            expenses=sorted_expenses(transactions, by_date=expenses_by_date),
            account_groups=groups,
            total_funds=total_funds(accounts),
        )
