"""
Transaction Service

Typed wrappers around the backend's expense, income and transaction
endpoints. This service only talks to the API; turning the results into
local records is the reconciler's job.
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Optional

import structlog

from focusfi.dates import format_api_date
from focusfi.models.local import TransactionType
from focusfi.models.remote import (
    APIExpense,
    APIIncome,
    APITransaction,
    DeleteResponse,
    TransactionRequest,
    TransactionUpdateRequest,
)
from focusfi.services.api import APIClient


logger = structlog.get_logger(__name__)


class TransactionService:
    """CRUD and bulk fetches for transactions."""

    def __init__(self, api_client: APIClient):
        self._api = api_client

    async def fetch_expenses_and_income(self) -> tuple[list[APIExpense], list[APIIncome]]:
        """
        Fetch all expenses and all income records.

        Both requests run concurrently and both are awaited before
        returning. If either fails, the first failure (expenses before
        income) is raised and neither result is returned.
        """
        logger.info("fetch_expenses_and_income_started")

        expenses, income = await asyncio.gather(
            self._api.get("/expenses", list[APIExpense]),
            self._api.get("/income", list[APIIncome]),
            return_exceptions=True,
        )
        for result in (expenses, income):
            if isinstance(result, BaseException):
                raise result

        total_expenses = sum((e.amount for e in expenses), Decimal("0"))
        total_income = sum((i.invoice_total for i in income), Decimal("0"))
        logger.info(
            "fetch_expenses_and_income_completed",
            expense_count=len(expenses),
            income_count=len(income),
            total_expenses=str(total_expenses),
            total_income=str(total_income),
        )
        return expenses, income

    async def fetch_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
        account_id: Optional[str] = None,
    ) -> list[APITransaction]:
        """Fetch transactions, optionally filtered. Only given filters are sent."""
        params: dict[str, str] = {}
        if start_date:
            params["start_date"] = format_api_date(start_date)
        if end_date:
            params["end_date"] = format_api_date(end_date)
        if transaction_type:
            params["type"] = transaction_type.value
        if account_id:
            params["account_id"] = account_id

        return await self._api.get(
            "/transactions",
            list[APITransaction],
            params=params or None,
        )

    async def fetch_transaction(self, transaction_id: str) -> APITransaction:
        return await self._api.get(f"/transactions/{transaction_id}", APITransaction)

    async def create_transaction(
        self,
        title: str,
        amount: Decimal,
        transaction_date: date,
        transaction_type: TransactionType,
        details: Optional[str] = None,
    ) -> APITransaction:
        """Create a transaction on the backend. The amount is sent unsigned."""
        request = TransactionRequest(
            title=title,
            details=details,
            amount=amount,
            date=transaction_date,
            type=transaction_type,
        )
        return await self._api.post("/transactions", request, APITransaction)

    async def update_transaction(
        self,
        transaction_id: str,
        title: Optional[str] = None,
        details: Optional[str] = None,
        amount: Optional[Decimal] = None,
        transaction_date: Optional[date] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> APITransaction:
        """Update the given fields of a backend transaction."""
        request = TransactionUpdateRequest(
            title=title,
            details=details,
            amount=amount,
            date=transaction_date,
            type=transaction_type,
        )
        return await self._api.put(
            f"/transactions/{transaction_id}",
            request,
            APITransaction,
        )

    async def delete_transaction(self, transaction_id: str) -> bool:
        result: DeleteResponse = await self._api.delete(
            f"/transactions/{transaction_id}",
            DeleteResponse,
        )
        return result.success
