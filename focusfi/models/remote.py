"""
Remote Record Models

These models describe records exactly as the finance backend returns
them. They are deliberately loose:
1. Almost every descriptive field is optional
2. Dates stay as text (the backend mixes several formats)
3. Unknown fields are ignored

They are converted to local records by the reconciler; nothing else in
the system should depend on their shape.

Expense, income and transaction payloads use camelCase keys; the Plaid
account payload uses snake_case keys.
"""

import datetime
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from focusfi.models.local import TransactionType


# Outgoing amounts are JSON numbers, not strings
JsonAmount = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


class CamelModel(BaseModel):
    """Base for payloads keyed in camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# EXPENSES & INCOME
# =============================================================================

class APIExpense(CamelModel):
    """An expense as returned by `GET /expenses`."""

    id: str
    name: Optional[str] = None
    amount: Decimal
    vendor: Optional[str] = None
    internal_category: Optional[str] = None
    due_date: Optional[str] = None
    frequency: Optional[str] = None
    recurrence_pattern: Optional[str] = None
    is_paid: Optional[bool] = None
    is_recurring: Optional[bool] = None
    is_shared: Optional[bool] = None
    payment_date: Optional[str] = None
    payment_account: Optional[str] = None
    linked_debt_id: Optional[str] = None
    linked_transaction_id: Optional[str] = None
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    notes: Optional[str] = None
    is_recurring_instance: Optional[bool] = None
    original_id: Optional[str] = None
    suspension_period_value: Optional[int] = None
    suspension_period_unit: Optional[str] = None


class APIIncome(CamelModel):
    """An income record (invoice) as returned by `GET /income`."""

    id: str
    client: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_link: Optional[str] = None
    invoice_total: Decimal
    paid_to_date: Optional[Decimal] = None
    expected_by_date: Optional[str] = None
    # The backend sends a free-text description here, not a flag
    depends_on_completion: Optional[str] = None
    is_paid: Optional[bool] = None
    is_recurring: Optional[bool] = None
    is_shared: Optional[bool] = None
    recurrence_pattern: Optional[str] = None
    notes: Optional[str] = None
    received_date: Optional[str] = None
    payment_processor: Optional[str] = None
    group_id: Optional[str] = None
    is_recurring_instance: Optional[bool] = None
    original_id: Optional[str] = None


# =============================================================================
# GENERIC TRANSACTIONS
# =============================================================================

class APITransaction(CamelModel):
    """
    A transaction as returned by the `/transactions` endpoints.

    `name` and `title` are interchangeable on the wire; `details` falls
    back to the merchant name, which may arrive as `merchant_name` or
    `merchantName`.
    """

    id: str
    transaction_id: str
    account_id: str
    amount: Decimal
    date: str
    name: str = ""
    title: str = ""
    details: str = ""
    merchant_name: Optional[str] = None
    category: Optional[list[str]] = None
    pending: bool
    type: str
    created_at: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def fill_aliases(cls, data: Any) -> Any:
        """Resolve the interchangeable name/title and details fields."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        name = data.get("name")
        title = data.get("title")
        data["name"] = name if name is not None else (title or "")
        data["title"] = title if title is not None else (name or "")

        merchant = data.get("merchant_name")
        if merchant is None:
            merchant = data.get("merchantName")
        data["merchantName"] = merchant
        data.pop("merchant_name", None)

        details = data.get("details")
        data["details"] = details if details is not None else (merchant or "")
        return data

    @property
    def transaction_type(self) -> TransactionType:
        """Anything that is not explicitly income counts as an expense."""
        if self.type == TransactionType.INCOME.value:
            return TransactionType.INCOME
        return TransactionType.EXPENSE


class TransactionRequest(CamelModel):
    """
    Body for `POST /transactions`.

    The amount is always sent as a positive number; the type carries
    the sign.
    """

    title: str = Field(..., min_length=1)
    details: Optional[str] = None
    amount: JsonAmount
    date: datetime.date
    type: TransactionType
    account_id: Optional[str] = None
    category: Optional[list[str]] = None
    pending: Optional[bool] = None

    @field_validator('amount')
    @classmethod
    def absolute_amount(cls, v: Decimal) -> Decimal:
        return abs(v)

    def to_payload(self) -> dict:
        """JSON body with camelCase keys; unset fields are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TransactionUpdateRequest(CamelModel):
    """Body for `PUT /transactions/{id}`. Only provided fields are sent."""

    title: Optional[str] = None
    details: Optional[str] = None
    amount: Optional[JsonAmount] = None
    date: Optional[datetime.date] = None
    type: Optional[TransactionType] = None

    @field_validator('amount')
    @classmethod
    def absolute_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return abs(v) if v is not None else None

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DeleteResponse(BaseModel):
    """Response of `DELETE /transactions/{id}`."""

    success: bool
    id: str


class APIErrorBody(BaseModel):
    """Error envelope the backend uses for non-2xx responses."""

    error: str


# =============================================================================
# ACCOUNTS (Plaid)
# =============================================================================

class AccountBalances(BaseModel):
    available: Optional[Decimal] = None
    current: Optional[Decimal] = None


class APIAccount(BaseModel):
    """A linked bank account as returned by `GET /plaid/accounts`."""

    account_id: str
    name: str
    type: str
    subtype: Optional[str] = None
    balances: AccountBalances
    item_id: Optional[str] = None

    @property
    def is_credit(self) -> bool:
        return "credit" in self.type.lower()

    @property
    def available_balance(self) -> Decimal:
        if self.balances.available is None:
            return Decimal("0")
        return self.balances.available

    @property
    def current_balance(self) -> Decimal:
        if self.balances.current is None:
            return self.available_balance
        return self.balances.current


class AccountsResponse(BaseModel):
    """Envelope of `GET /plaid/accounts`."""

    accounts: list[APIAccount] = Field(default_factory=list)
