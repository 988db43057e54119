# services/allocations.py
"""Write path for monthly allocations.

Every write is an upsert keyed on (category_id, year, month) that replaces
the previous value, so callers never need to know whether a row existed.
The derived tools (cover overspent, fund targets, copy previous month) read
the budget first and then apply a single bulk assign.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..database import dialect_insert
from ..errors import NotFoundError, ValidationError
from ..models.ledger import new_id
from ..schemas.ledger import MAX_CENTS
from .budget import get_budget_month, previous_month, validate_period

logger = logging.getLogger(__name__)


@dataclass
class BulkResult:
    updated: int = 0
    skipped: List[str] = field(default_factory=list)


def _is_cents(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and -MAX_CENTS <= value <= MAX_CENTS


def _check_item(index, item) -> Tuple[str, int]:
    try:
        category_id, amount = item
    except (TypeError, ValueError):
        raise ValidationError(f"assignments[{index}] must be a (category_id, allocated) pair")
    if not isinstance(category_id, str) or not category_id:
        raise ValidationError(f"assignments[{index}].category_id is required")
    if not _is_cents(amount):
        raise ValidationError(f"assignments[{index}].allocated must be an integer number of cents within the BIGINT range")
    return category_id, amount


def _upsert(db: Session, category_id: str, year: int, month: int, amount: int):
    insert = dialect_insert(db)
    stmt = insert(models.CategoryMonth).values(
        id=new_id(),
        category_id=category_id,
        year=year,
        month=month,
        allocated=amount,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["category_id", "year", "month"],
        set_={"allocated": stmt.excluded.allocated},
    )
    db.execute(stmt)


def assign(db: Session, year: int, month: int, category_id: str, amount: int) -> models.CategoryMonth:
    """Set one category's allocation for a month to exactly ``amount`` cents."""
    validate_period(year, month)
    category_id, amount = _check_item(0, (category_id, amount))
    if db.get(models.Category, category_id) is None:
        raise NotFoundError("Category", category_id)

    logger.info(f"Assigning {amount} to category {category_id} for {year}/{month}")
    try:
        _upsert(db, category_id, year, month, amount)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    return db.query(models.CategoryMonth).filter(
        models.CategoryMonth.category_id == category_id,
        models.CategoryMonth.year == year,
        models.CategoryMonth.month == month,
    ).one()


def bulk_assign(db: Session, year: int, month: int, assignments: Iterable) -> BulkResult:
    """Apply many (category_id, amount) upserts for one month.

    Every item's shape is checked before anything is written; one bad item
    rejects the whole batch. The upserts then run in a single storage
    transaction. Items naming a category that does not exist are skipped
    and reported rather than failing the batch.
    """
    validate_period(year, month)
    items = [_check_item(i, item) for i, item in enumerate(assignments)]
    result = BulkResult()
    if not items:
        return result

    wanted = {category_id for category_id, _ in items}
    known = {
        row[0] for row in db.query(models.Category.id).filter(models.Category.id.in_(wanted))
    }

    logger.info(f"Bulk assigning {len(items)} categories for {year}/{month}")
    try:
        for category_id, amount in items:
            if category_id not in known:
                result.skipped.append(category_id)
                continue
            _upsert(db, category_id, year, month, amount)
            result.updated += 1
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    if result.skipped:
        logger.warning(f"Skipped unknown categories: {result.skipped}")
    return result


def reset_month(db: Session, year: int, month: int) -> int:
    """Drop every allocation row for the month; all categories read as 0 again."""
    validate_period(year, month)
    logger.info(f"Resetting allocations for {year}/{month}")
    try:
        deleted = db.query(models.CategoryMonth).filter(
            models.CategoryMonth.year == year,
            models.CategoryMonth.month == month,
        ).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return deleted


def cover_overspent(db: Session, year: int, month: int) -> BulkResult:
    """Raise each overspent category's allocation until available is 0."""
    budget = get_budget_month(db, year, month)
    plan = [(c.id, c.allocated - c.available) for c in budget.categories() if c.available < 0]
    return bulk_assign(db, year, month, plan)


def fund_targets(db: Session, year: int, month: int) -> BulkResult:
    """Allocate each category's target amount where it is above the current allocation."""
    budget = get_budget_month(db, year, month)
    plan = [
        (c.id, c.target_amount)
        for c in budget.categories()
        if c.target_amount is not None and c.target_amount > c.allocated
    ]
    return bulk_assign(db, year, month, plan)


def copy_previous_month(db: Session, year: int, month: int) -> BulkResult:
    """Make this month's plan match last month's, writing only the differences."""
    validate_period(year, month)
    if (year, month) == (1, 1):
        raise ValidationError("January of year 1 has no previous month to copy")
    current = get_budget_month(db, year, month)
    previous = get_budget_month(db, *previous_month(year, month))
    before = {c.id: c.allocated for c in previous.categories()}
    plan = [
        (c.id, before.get(c.id, 0))
        for c in current.categories()
        if before.get(c.id, 0) != c.allocated
    ]
    return bulk_assign(db, year, month, plan)
