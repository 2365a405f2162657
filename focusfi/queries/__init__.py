"""Dashboard query package."""

from focusfi.queries.dashboard import (
    AccountGroup,
    DashboardQueries,
    DashboardSummary,
    filter_by_date,
    forecast_progress,
    group_accounts,
    sorted_expenses,
    sorted_income,
    total_funds,
    total_of,
)

__all__ = [
    "AccountGroup",
    "DashboardQueries",
    "DashboardSummary",
    "filter_by_date",
    "forecast_progress",
    "group_accounts",
    "sorted_expenses",
    "sorted_income",
    "total_funds",
    "total_of",
]
