from pydantic import BaseModel, Field, model_validator
from datetime import date as Date, datetime
from typing import Annotated, ClassVar, List, Literal, Optional


AccountType = Literal["checking", "savings", "credit_card", "cash"]
Recurrence = Literal["monthly", "yearly", "once", "bi-monthly", "weekly", "bi-weekly"]

# Money columns are BIGINT; the last month must still have a following month
MAX_CENTS = 2 ** 63 - 1
MAX_YEAR = 9998

Cents = Annotated[int, Field(ge=-MAX_CENTS, le=MAX_CENTS)]


class PartialUpdate(BaseModel):
    """Update payload where an omitted field is left alone and an explicit
    null clears the column. Fields in ``required_fields`` may be omitted
    but never nulled."""

    required_fields: ClassVar[tuple] = ()

    @model_validator(mode="after")
    def reject_null_required(self):
        for name in self.required_fields:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


# ----- Accounts -----

class AccountBase(BaseModel):
    name: str = Field(min_length=1)
    type: AccountType


class AccountCreate(AccountBase):
    starting_balance: Cents = 0
    is_savings_bucket: bool = False
    sort_order: Optional[int] = None


class AccountUpdate(PartialUpdate):
    required_fields: ClassVar[tuple] = ("name", "type", "starting_balance", "is_savings_bucket", "sort_order")

    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[AccountType] = None
    starting_balance: Optional[Cents] = None
    is_savings_bucket: Optional[bool] = None
    sort_order: Optional[int] = None


class Account(AccountBase):
    id: str
    starting_balance: int
    is_savings_bucket: bool
    sort_order: int
    created_at: Optional[datetime] = None
    computed_balance: int
    cleared_balance: int

    class Config:
        from_attributes = True


# ----- Category groups -----

class CategoryGroupCreate(BaseModel):
    name: str = Field(min_length=1)
    sort_order: Optional[int] = None


class CategoryGroupUpdate(PartialUpdate):
    required_fields: ClassVar[tuple] = ("name", "sort_order")

    name: Optional[str] = Field(default=None, min_length=1)
    sort_order: Optional[int] = None


class CategoryGroup(BaseModel):
    id: str
    name: str
    sort_order: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ----- Categories -----

class CategoryCreate(BaseModel):
    group_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    is_savings: bool = False
    sort_order: Optional[int] = None
    due_day: Optional[int] = Field(default=None, ge=1, le=31)
    recurrence: Optional[Recurrence] = None
    target_amount: Optional[int] = Field(default=None, ge=0, le=MAX_CENTS)
    notes: Optional[str] = None


class CategoryUpdate(PartialUpdate):
    """Schema for updating an existing category."""
    required_fields: ClassVar[tuple] = ("name", "group_id", "is_savings", "sort_order")

    name: Optional[str] = Field(default=None, min_length=1)
    group_id: Optional[str] = Field(default=None, min_length=1)
    is_savings: Optional[bool] = None
    sort_order: Optional[int] = None
    due_day: Optional[int] = Field(default=None, ge=1, le=31)
    recurrence: Optional[Recurrence] = None
    target_amount: Optional[int] = Field(default=None, ge=0, le=MAX_CENTS)
    notes: Optional[str] = None


class Category(BaseModel):
    id: str
    group_id: str
    group_name: Optional[str] = None
    name: str
    is_savings: bool
    sort_order: int
    due_day: Optional[int] = None
    recurrence: Optional[str] = None
    target_amount: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ----- Transactions -----

class TransactionCreate(BaseModel):
    account_id: str = Field(min_length=1)
    category_id: Optional[str] = None
    payee_name: Optional[str] = None
    amount: Cents
    date: Date
    memo: Optional[str] = None
    cleared: bool = False


class TransactionUpdate(PartialUpdate):
    required_fields: ClassVar[tuple] = ("account_id", "amount", "date", "cleared")

    account_id: Optional[str] = Field(default=None, min_length=1)
    category_id: Optional[str] = None
    payee_name: Optional[str] = None
    amount: Optional[Cents] = None
    date: Optional[Date] = None
    memo: Optional[str] = None
    cleared: Optional[bool] = None


class Transaction(BaseModel):
    id: str
    account_id: str
    account_name: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    category_group_name: Optional[str] = None
    payee_id: Optional[str] = None
    payee_name: Optional[str] = None
    amount: int
    date: Date
    memo: Optional[str] = None
    cleared: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Payee(BaseModel):
    id: str
    name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SetupResult(BaseModel):
    success: bool = True
    seeded: bool
    message: str
