# models/ledger.py
"""SQLAlchemy models for the budget ledger.

All money columns hold integer cents. Ids are UUID strings generated in
Python so the schema is identical on PostgreSQL and SQLite.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from ..database import Base


def utc_now():
    """Return current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


def new_id():
    return str(uuid.uuid4())


ACCOUNT_TYPES = ("checking", "savings", "credit_card", "cash")
RECURRENCES = ("monthly", "yearly", "once", "bi-monthly", "weekly", "bi-weekly")


class Account(Base):
    """A bank account, card or cash envelope that transactions post to."""
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)  # one of ACCOUNT_TYPES
    starting_balance = Column(BigInteger, nullable=False, default=0)
    is_savings_bucket = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    transactions = relationship("Transaction", back_populates="account", cascade="all, delete-orphan")


class CategoryGroup(Base):
    """Display grouping of categories (e.g., 'Monthly Bills')."""
    __tablename__ = "category_groups"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    categories = relationship("Category", back_populates="group", cascade="all, delete-orphan")


class Category(Base):
    """A budget line money is assigned to each month (e.g., 'Groceries')."""
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=new_id)
    group_id = Column(String(36), ForeignKey("category_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    is_savings = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)
    due_day = Column(Integer, nullable=True)  # 1-31
    recurrence = Column(String, nullable=True)  # one of RECURRENCES
    target_amount = Column(BigInteger, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    group = relationship("CategoryGroup", back_populates="categories")
    allocations = relationship("CategoryMonth", back_populates="category", cascade="all, delete-orphan")
    # Not cascaded: deleting a category uncategorizes its transactions
    transactions = relationship("Transaction", back_populates="category")

    @property
    def group_name(self):
        return self.group.name if self.group is not None else None


class CategoryMonth(Base):
    """Amount assigned to one category for one month. Missing row means 0."""
    __tablename__ = "category_months"
    __table_args__ = (
        UniqueConstraint("category_id", "year", "month", name="uq_category_month"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    allocated = Column(BigInteger, nullable=False, default=0)

    category = relationship("Category", back_populates="allocations")


class Payee(Base):
    """Merchant or person, deduplicated by name for autocomplete."""
    __tablename__ = "payees"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)


class Transaction(Base):
    """Money in (positive amount) or out (negative amount) of an account."""
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=new_id)
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    payee_id = Column(String(36), ForeignKey("payees.id", ondelete="SET NULL"), nullable=True)
    payee_name = Column(String, nullable=True)
    amount = Column(BigInteger, nullable=False)
    date = Column(Date, nullable=False, index=True)
    memo = Column(Text, nullable=True)
    cleared = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")
    payee = relationship("Payee")

    @property
    def account_name(self):
        return self.account.name if self.account is not None else None

    @property
    def category_name(self):
        return self.category.name if self.category is not None else None

    @property
    def category_group_name(self):
        return self.category.group_name if self.category is not None else None
