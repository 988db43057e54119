# controllers/budget.py
"""Monthly budget view and the allocation write path."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..dependencies import get_db
from ..schemas import budget as schemas
from ..services import allocations
from ..services.budget import get_budget_month

logger = logging.getLogger(__name__)

router = APIRouter()


def bulk_response(result: allocations.BulkResult) -> schemas.BulkAllocationResult:
    return schemas.BulkAllocationResult(updated=result.updated, skipped=result.skipped)


@router.get("/budget/{year}/{month}", response_model=schemas.BudgetMonth, summary="Get monthly budget")
def get_budget(year: int, month: int, db: Session = Depends(get_db)):
    """Groups and categories with allocated/activity/available, plus ready_to_assign and total_budgeted."""
    return get_budget_month(db, year, month)


@router.put("/budget/{year}/{month}/allocate", summary="Assign money to categories")
def allocate(year: int, month: int, request: schemas.AllocateRequest, db: Session = Depends(get_db)):
    """Single `{category_id, allocated}`, bulk `{assignments: [...]}` or `{reset_all: true}`."""
    if request.reset_all:
        return schemas.ResetResult(deleted=allocations.reset_month(db, year, month))

    if request.assignments is not None:
        result = allocations.bulk_assign(
            db, year, month, [(a.category_id, a.allocated) for a in request.assignments]
        )
        return bulk_response(result)

    record = allocations.assign(db, year, month, request.category_id, request.allocated)
    return schemas.CategoryMonth.model_validate(record)


@router.post("/budget/{year}/{month}/cover-overspent", response_model=schemas.BulkAllocationResult, summary="Cover overspent categories")
def cover_overspent(year: int, month: int, db: Session = Depends(get_db)):
    """Raise allocations so no category in the month has negative available."""
    return bulk_response(allocations.cover_overspent(db, year, month))


@router.post("/budget/{year}/{month}/fund-targets", response_model=schemas.BulkAllocationResult, summary="Fund category targets")
def fund_targets(year: int, month: int, db: Session = Depends(get_db)):
    return bulk_response(allocations.fund_targets(db, year, month))


@router.post("/budget/{year}/{month}/copy-previous", response_model=schemas.BulkAllocationResult, summary="Copy previous month plan")
def copy_previous(year: int, month: int, db: Session = Depends(get_db)):
    """Copy last month's allocations, writing only categories that differ."""
    return bulk_response(allocations.copy_previous_month(db, year, month))


@router.post("/budget/{year}/{month}/reset", response_model=schemas.ResetResult, summary="Reset month allocations")
def reset(year: int, month: int, db: Session = Depends(get_db)):
    return schemas.ResetResult(deleted=allocations.reset_month(db, year, month))
