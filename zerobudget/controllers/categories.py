# controllers/categories.py
"""Category group and category endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..dependencies import get_db
from ..schemas import ledger as schemas
from ..services import ledger

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/category-groups", response_model=List[schemas.CategoryGroup], summary="List category groups")
def list_groups(db: Session = Depends(get_db)):
    return ledger.list_groups(db)


@router.post("/category-groups", response_model=schemas.CategoryGroup, status_code=status.HTTP_201_CREATED, summary="Create a category group")
def create_group(group: schemas.CategoryGroupCreate, db: Session = Depends(get_db)):
    return ledger.create_group(db, group)


@router.put("/category-groups/{group_id}", response_model=schemas.CategoryGroup, summary="Update a category group")
def update_group(group_id: str, data: schemas.CategoryGroupUpdate, db: Session = Depends(get_db)):
    return ledger.update_group(db, group_id, data)


@router.delete("/category-groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a category group")
def delete_group(group_id: str, db: Session = Depends(get_db)):
    """Delete a group and all its categories."""
    ledger.delete_group(db, group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/categories", response_model=List[schemas.Category], summary="List all categories")
def list_categories(db: Session = Depends(get_db)):
    """Every category with its group name, in display order."""
    return ledger.list_categories(db)


@router.post("/categories", response_model=schemas.Category, status_code=status.HTTP_201_CREATED, summary="Create a category")
def create_category(category: schemas.CategoryCreate, db: Session = Depends(get_db)):
    return ledger.create_category(db, category)


@router.put("/categories/{category_id}", response_model=schemas.Category, summary="Update a category")
def update_category(category_id: str, data: schemas.CategoryUpdate, db: Session = Depends(get_db)):
    """Update only the fields sent; null clears due_day, recurrence, target_amount or notes."""
    return ledger.update_category(db, category_id, data)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a category")
def delete_category(category_id: str, db: Session = Depends(get_db)):
    """Delete a category; its transactions become uncategorized."""
    ledger.delete_category(db, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
