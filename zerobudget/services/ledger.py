# services/ledger.py
"""CRUD primitives for accounts, category groups, categories, transactions and payees.

The HTTP controllers and the assistant tools both call these functions;
there is no separate write path for either. Deletes carry out their
cascades here so the behaviour does not depend on database FK settings.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import extract, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..database import dialect_insert
from ..errors import NotFoundError, ValidationError
from ..models.ledger import new_id
from ..schemas import ledger as schemas
from ..schemas.ledger import MAX_YEAR
from .balances import AccountBalance, account_balances
from .budget import month_bounds

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 500

DEFAULT_CATEGORIES = [
    ("Monthly Bills", False, ["Rent / Mortgage", "Internet", "Phone", "Utilities"]),
    ("Everyday Expenses", False, ["Groceries", "Dining Out", "Transportation", "Entertainment", "Personal Care"]),
    ("Savings Goals", True, ["Emergency Fund", "Vacation", "New Car"]),
]


def _commit(db: Session):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def _next_sort_order(db: Session, column, *criteria) -> int:
    current = db.query(func.max(column)).filter(*criteria).scalar()
    return 0 if current is None else current + 1


# ============= ACCOUNTS =============

def account_summary(account: models.Account, balance: Optional[AccountBalance] = None) -> schemas.Account:
    balance = balance or AccountBalance.from_sums(account.starting_balance)
    return schemas.Account(
        id=account.id,
        name=account.name,
        type=account.type,
        starting_balance=account.starting_balance,
        is_savings_bucket=account.is_savings_bucket,
        sort_order=account.sort_order,
        created_at=account.created_at,
        computed_balance=balance.computed_balance,
        cleared_balance=balance.cleared_balance,
    )


def list_accounts(db: Session) -> List[schemas.Account]:
    balances = account_balances(db)
    accounts = db.query(models.Account).order_by(models.Account.sort_order, models.Account.created_at)
    return [account_summary(a, balances.get(a.id)) for a in accounts]


def get_account(db: Session, account_id: str) -> models.Account:
    account = db.get(models.Account, account_id) if account_id else None
    if account is None:
        raise NotFoundError("Account", account_id)
    return account


def create_account(db: Session, data: schemas.AccountCreate) -> schemas.Account:
    logger.info(f"Creating account: {data.name} ({data.type})")
    values = data.model_dump()
    if values["sort_order"] is None:
        values["sort_order"] = _next_sort_order(db, models.Account.sort_order)
    account = models.Account(**values)
    db.add(account)
    _commit(db)
    db.refresh(account)
    return account_summary(account)


def update_account(db: Session, account_id: str, data: schemas.AccountUpdate) -> schemas.Account:
    account = get_account(db, account_id)
    logger.info(f"Updating account {account_id}")
    for name, value in data.changes().items():
        setattr(account, name, value)
    _commit(db)
    db.refresh(account)
    return account_summary(account, account_balances(db, account.id).get(account.id))


def delete_account(db: Session, account_id: str) -> schemas.Account:
    """Delete an account and every transaction posted to it."""
    account = get_account(db, account_id)
    logger.info(f"Deleting account: {account_id}")
    snapshot = account_summary(account)
    db.delete(account)
    _commit(db)
    return snapshot


# ============= CATEGORY GROUPS =============

def list_groups(db: Session) -> List[models.CategoryGroup]:
    return db.query(models.CategoryGroup).order_by(
        models.CategoryGroup.sort_order, models.CategoryGroup.created_at
    ).all()


def get_group(db: Session, group_id: str) -> models.CategoryGroup:
    group = db.get(models.CategoryGroup, group_id) if group_id else None
    if group is None:
        raise NotFoundError("Category group", group_id)
    return group


def create_group(db: Session, data: schemas.CategoryGroupCreate) -> models.CategoryGroup:
    logger.info(f"Creating category group: {data.name}")
    sort_order = data.sort_order
    if sort_order is None:
        sort_order = _next_sort_order(db, models.CategoryGroup.sort_order)
    group = models.CategoryGroup(name=data.name, sort_order=sort_order)
    db.add(group)
    _commit(db)
    db.refresh(group)
    return group


def update_group(db: Session, group_id: str, data: schemas.CategoryGroupUpdate) -> models.CategoryGroup:
    group = get_group(db, group_id)
    logger.info(f"Updating category group {group_id}")
    for name, value in data.changes().items():
        setattr(group, name, value)
    _commit(db)
    db.refresh(group)
    return group


def delete_group(db: Session, group_id: str) -> schemas.CategoryGroup:
    """Delete a group together with all of its categories."""
    group = get_group(db, group_id)
    logger.info(f"Deleting category group: {group_id}")
    # Cascades to categories and their allocations; their transactions become uncategorized
    snapshot = schemas.CategoryGroup.model_validate(group)
    db.delete(group)
    _commit(db)
    return snapshot


# ============= CATEGORIES =============

def list_categories(db: Session) -> List[models.Category]:
    return db.query(models.Category).join(models.CategoryGroup).order_by(
        models.CategoryGroup.sort_order, models.Category.sort_order, models.Category.created_at
    ).all()


def get_category(db: Session, category_id: str) -> models.Category:
    category = db.get(models.Category, category_id) if category_id else None
    if category is None:
        raise NotFoundError("Category", category_id)
    return category


def create_category(db: Session, data: schemas.CategoryCreate) -> models.Category:
    get_group(db, data.group_id)
    logger.info(f"Creating category: {data.name} in group {data.group_id}")
    values = data.model_dump()
    if values["sort_order"] is None:
        values["sort_order"] = _next_sort_order(
            db, models.Category.sort_order, models.Category.group_id == data.group_id
        )
    category = models.Category(**values)
    db.add(category)
    _commit(db)
    db.refresh(category)
    return category


def update_category(db: Session, category_id: str, data: schemas.CategoryUpdate) -> models.Category:
    """Apply only the sent fields; an explicit null clears due_day, recurrence, target_amount or notes."""
    category = get_category(db, category_id)
    changes = data.changes()
    if "group_id" in changes:
        get_group(db, changes["group_id"])

    logger.info(f"Updating category {category_id}: {sorted(changes)}")
    for name, value in changes.items():
        setattr(category, name, value)
    _commit(db)
    db.refresh(category)
    return category


def delete_category(db: Session, category_id: str) -> schemas.Category:
    """Delete a category; its transactions stay but become uncategorized."""
    category = get_category(db, category_id)
    logger.info(f"Deleting category: {category_id}")
    snapshot = schemas.Category.model_validate(category)
    db.delete(category)
    _commit(db)
    return snapshot


# ============= PAYEES =============

def list_payees(db: Session) -> List[models.Payee]:
    return db.query(models.Payee).order_by(models.Payee.name).all()


def upsert_payee(db: Session, name: Optional[str]) -> Optional[str]:
    """Return the id of the payee called ``name``, creating it on first use."""
    name = (name or "").strip()
    if not name:
        return None
    insert = dialect_insert(db)
    stmt = insert(models.Payee).values(id=new_id(), name=name).on_conflict_do_nothing(
        index_elements=["name"]
    )
    db.execute(stmt)
    return db.query(models.Payee.id).filter(models.Payee.name == name).scalar()


# ============= TRANSACTIONS =============

def list_transactions(
    db: Session,
    account_id: Optional[str] = None,
    category_id: Optional[str] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
    limit: int = DEFAULT_LIST_LIMIT,
) -> List[models.Transaction]:
    """Newest first, optionally narrowed to an account, category, year and/or month."""
    if month is not None and not 1 <= month <= 12:
        raise ValidationError("Invalid month")
    if year is not None and not 1 <= year <= MAX_YEAR:
        raise ValidationError("Invalid year")

    query = db.query(models.Transaction)
    if account_id:
        query = query.filter(models.Transaction.account_id == account_id)
    if category_id:
        query = query.filter(models.Transaction.category_id == category_id)
    if year is not None and month is not None:
        start, end = month_bounds(year, month)
        query = query.filter(models.Transaction.date >= start, models.Transaction.date < end)
    elif year is not None:
        query = query.filter(
            models.Transaction.date >= date(year, 1, 1),
            models.Transaction.date < date(year + 1, 1, 1),
        )
    elif month is not None:
        query = query.filter(extract("month", models.Transaction.date) == month)

    logger.debug(f"Listing transactions (account={account_id}, category={category_id}, {year}/{month})")
    return query.order_by(
        models.Transaction.date.desc(), models.Transaction.created_at.desc()
    ).limit(limit).all()


def get_transaction(db: Session, transaction_id: str) -> models.Transaction:
    transaction = db.get(models.Transaction, transaction_id) if transaction_id else None
    if transaction is None:
        raise NotFoundError("Transaction", transaction_id)
    return transaction


def create_transaction(db: Session, data: schemas.TransactionCreate) -> models.Transaction:
    get_account(db, data.account_id)
    if data.category_id is not None:
        get_category(db, data.category_id)

    logger.info(f"Creating transaction: {data.payee_name or 'no payee'} ({data.amount}) on {data.date}")
    values = data.model_dump()
    values["payee_name"] = (data.payee_name or "").strip() or None
    values["payee_id"] = upsert_payee(db, data.payee_name)
    transaction = models.Transaction(**values)
    db.add(transaction)
    _commit(db)
    db.refresh(transaction)
    return transaction


def update_transaction(db: Session, transaction_id: str, data: schemas.TransactionUpdate) -> models.Transaction:
    transaction = get_transaction(db, transaction_id)
    changes = data.changes()
    if "account_id" in changes:
        get_account(db, changes["account_id"])
    if changes.get("category_id") is not None:
        get_category(db, changes["category_id"])
    if "payee_name" in changes:
        changes["payee_name"] = (changes["payee_name"] or "").strip() or None
        changes["payee_id"] = upsert_payee(db, changes["payee_name"])

    logger.info(f"Updating transaction {transaction_id}: {sorted(changes)}")
    for name, value in changes.items():
        setattr(transaction, name, value)
    _commit(db)
    db.refresh(transaction)
    return transaction


def delete_transaction(db: Session, transaction_id: str) -> schemas.Transaction:
    transaction = get_transaction(db, transaction_id)
    logger.info(f"Deleting transaction: {transaction_id}")
    snapshot = schemas.Transaction.model_validate(transaction)
    db.delete(transaction)
    _commit(db)
    return snapshot


# ============= SETUP =============

def seed_defaults(db: Session) -> bool:
    """Create the default groups and categories when the store has none.

    Returns True when anything was created.
    """
    if db.query(models.CategoryGroup.id).first() is not None:
        return False

    logger.info("Seeding default category groups")
    for group_order, (group_name, is_savings, names) in enumerate(DEFAULT_CATEGORIES):
        group = models.CategoryGroup(name=group_name, sort_order=group_order)
        db.add(group)
        db.flush()  # Generate ID
        for order, name in enumerate(names):
            db.add(models.Category(group_id=group.id, name=name, sort_order=order, is_savings=is_savings))
    _commit(db)
    return True
