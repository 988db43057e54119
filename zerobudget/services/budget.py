# services/budget.py
"""Monthly budget tree: allocated, activity and available per category.

``available = allocated + activity`` for every category and month. A
missing allocation row reads as 0 and an untouched category has 0
activity; neither is an error. ``ready_to_assign`` is global and does not
depend on the month being viewed.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models
from ..errors import ValidationError
from ..schemas import budget as schemas
from ..schemas.ledger import MAX_YEAR

logger = logging.getLogger(__name__)


def validate_period(year, month) -> Tuple[int, int]:
    for value in (year, month):
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValidationError("Invalid year or month")
    if not 1 <= year <= MAX_YEAR or not 1 <= month <= 12:
        raise ValidationError("Invalid year or month")
    return year, month


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First day of the month and first day of the following month."""
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


def previous_month(year: int, month: int) -> Tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def ready_to_assign(db: Session) -> int:
    """Money never assigned to any category, across all time.

    Starting balances and every inflow ever recorded fund the pool; every
    allocation in any month draws from it. Negative means over-assigned.
    """
    starting = db.query(func.coalesce(func.sum(models.Account.starting_balance), 0)).scalar()
    inflow = db.query(func.coalesce(func.sum(models.Transaction.amount), 0)).filter(
        models.Transaction.amount > 0
    ).scalar()
    allocated = db.query(func.coalesce(func.sum(models.CategoryMonth.allocated), 0)).scalar()
    return int(starting) + int(inflow) - int(allocated)


def month_allocations(db: Session, year: int, month: int) -> Dict[str, int]:
    rows = db.query(models.CategoryMonth.category_id, models.CategoryMonth.allocated).filter(
        models.CategoryMonth.year == year,
        models.CategoryMonth.month == month,
    )
    return {category_id: int(allocated) for category_id, allocated in rows}


def month_activity(db: Session, year: int, month: int) -> Dict[str, int]:
    """Signed sum of each category's transactions dated within the month."""
    start, end = month_bounds(year, month)
    rows = db.query(
        models.Transaction.category_id,
        func.coalesce(func.sum(models.Transaction.amount), 0),
    ).filter(
        models.Transaction.category_id.isnot(None),
        models.Transaction.date >= start,
        models.Transaction.date < end,
    ).group_by(models.Transaction.category_id)
    return {category_id: int(total) for category_id, total in rows}


def build_budget_month(
    year: int,
    month: int,
    groups: Iterable[models.CategoryGroup],
    categories: Iterable[models.Category],
    allocations: Dict[str, int],
    activity: Dict[str, int],
    ready: int,
) -> schemas.BudgetMonth:
    """Assemble the group/category tree from already-loaded rows.

    ``groups`` and ``categories`` are expected in display order. Group
    totals are sums over the categories currently in the group.
    """
    by_group = defaultdict(list)
    for category in categories:
        allocated = allocations.get(category.id, 0)
        spent = activity.get(category.id, 0)
        by_group[category.group_id].append(schemas.BudgetCategory(
            id=category.id,
            group_id=category.group_id,
            name=category.name,
            is_savings=bool(category.is_savings),
            sort_order=category.sort_order or 0,
            due_day=category.due_day,
            recurrence=category.recurrence,
            target_amount=None if category.target_amount is None else int(category.target_amount),
            notes=category.notes,
            allocated=allocated,
            activity=spent,
            available=allocated + spent,
        ))

    tree = []
    for group in groups:
        rows = by_group.get(group.id, [])
        tree.append(schemas.BudgetGroup(
            id=group.id,
            name=group.name,
            sort_order=group.sort_order or 0,
            categories=rows,
            total_allocated=sum(c.allocated for c in rows),
            total_activity=sum(c.activity for c in rows),
            total_available=sum(c.available for c in rows),
        ))

    return schemas.BudgetMonth(
        year=year,
        month=month,
        ready_to_assign=ready,
        total_budgeted=sum(g.total_allocated for g in tree),
        groups=tree,
    )


def get_budget_month(db: Session, year: int, month: int) -> schemas.BudgetMonth:
    """Full budget for a month, recomputed from the store on every call."""
    validate_period(year, month)
    logger.debug(f"Building budget for {year}/{month}")

    groups = db.query(models.CategoryGroup).order_by(
        models.CategoryGroup.sort_order, models.CategoryGroup.created_at
    ).all()
    categories = db.query(models.Category).order_by(
        models.Category.sort_order, models.Category.created_at
    ).all()

    return build_budget_month(
        year,
        month,
        groups,
        categories,
        month_allocations(db, year, month),
        month_activity(db, year, month),
        ready_to_assign(db),
    )
