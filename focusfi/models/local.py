"""
Local Record Models

These are the records FocusFi keeps on the device. They are what the
dashboard reads and what the reconciler writes.

DESIGN DECISION: Every local record may carry a `remote_id`.
- Transactions created by the user have none until they are synced
- Records created by reconciliation always have one
The remote id is the ONLY key used to correlate local and remote data.
"""

import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


class TransactionType(str, Enum):
    """Direction of a transaction. Amounts are unsigned; this carries the sign."""
    INCOME = "income"
    EXPENSE = "expense"


class Transaction(BaseModel):
    """
    A recorded income or expense.

    INVARIANT: amount is never negative.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Local identifier"
    )
    remote_id: Optional[str] = Field(
        default=None,
        description="Backend identifier, when the record came from (or went to) the API"
    )
    title: str = Field(
        ...,
        min_length=1,
        description="Short label shown in lists"
    )
    details: str = Field(
        default="",
        description="Free-text description"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Unsigned amount"
    )
    date: datetime.date = Field(
        ...,
        description="Calendar date of the transaction"
    )
    type: TransactionType

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Reject blank titles. Text is stored exactly as given."""
        if not v.strip():
            raise ValueError("title must not be blank")
        return v

    @property
    def is_synced(self) -> bool:
        """A transaction is synced exactly when it has a remote id."""
        return self.remote_id is not None

    @property
    def signed_amount(self) -> Decimal:
        if self.type == TransactionType.EXPENSE:
            return -self.amount
        return self.amount

    def content_key(self) -> tuple:
        """Everything except the local id, for comparing sync results."""
        return (
            self.remote_id,
            self.title,
            self.details,
            self.amount,
            self.date,
            self.type,
        )


class BankAccount(BaseModel):
    """
    A linked bank account and its last known balances.

    Only `is_favorite` and `include_in_total` are owned by the user;
    every other field is overwritten on each sync.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Local identifier"
    )
    bank_name: str = Field(
        ...,
        description="Display grouping key, derived from the account name"
    )
    account_name: str = Field(
        ...,
        description="Raw account name from the backend"
    )
    available_balance: Decimal = Field(default=Decimal("0"))
    current_balance: Decimal = Field(default=Decimal("0"))
    include_in_total: bool = Field(
        default=True,
        description="Count this account in the funds total"
    )
    is_favorite: bool = Field(
        default=False,
        description="Pinned to the top of its bank group"
    )
    is_credit: bool = Field(
        default=False,
        description="Credit card / credit line"
    )
    institution_id: Optional[str] = None
    remote_id: Optional[str] = Field(
        default=None,
        description="Plaid account id"
    )
