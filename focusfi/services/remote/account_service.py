"""Account Service - linked bank accounts from the backend's Plaid proxy."""

from decimal import Decimal

import structlog

from focusfi.models.remote import AccountsResponse, APIAccount
from focusfi.services.api import APIClient


logger = structlog.get_logger(__name__)


class AccountService:
    """Reads linked accounts and their balances."""

    def __init__(self, api_client: APIClient):
        self._api = api_client

    async def fetch_accounts(self) -> list[APIAccount]:
        result: AccountsResponse = await self._api.get("/plaid/accounts", AccountsResponse)
        logger.info("accounts_fetched", account_count=len(result.accounts))
        return result.accounts

    @staticmethod
    def total_balance(accounts: list[APIAccount]) -> Decimal:
        """Sum of current balances, falling back to available, then zero."""
        total = Decimal("0")
        for account in accounts:
            if account.balances.current is not None:
                total += account.balances.current
            elif account.balances.available is not None:
                total += account.balances.available
        return total
