# controllers/transactions.py
"""Transaction and payee endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ..dependencies import get_db
from ..schemas import ledger as schemas
from ..services import ledger

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/transactions", response_model=List[schemas.Transaction], summary="List transactions")
def list_transactions(
    account_id: Optional[str] = None,
    category_id: Optional[str] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
    limit: int = Query(ledger.DEFAULT_LIST_LIMIT, ge=1, le=ledger.DEFAULT_LIST_LIMIT),
    db: Session = Depends(get_db)
):
    """Newest first; filter by account, category, year and/or month."""
    return ledger.list_transactions(db, account_id, category_id, year, month, limit)


@router.post("/transactions", response_model=schemas.Transaction, status_code=status.HTTP_201_CREATED, summary="Create a transaction")
def create_transaction(transaction: schemas.TransactionCreate, db: Session = Depends(get_db)):
    """Record a transaction; the payee is created on first use."""
    return ledger.create_transaction(db, transaction)


@router.get("/transactions/{transaction_id}", response_model=schemas.Transaction, summary="Get a transaction")
def get_transaction(transaction_id: str, db: Session = Depends(get_db)):
    return ledger.get_transaction(db, transaction_id)


@router.put("/transactions/{transaction_id}", response_model=schemas.Transaction, summary="Update a transaction")
def update_transaction(transaction_id: str, data: schemas.TransactionUpdate, db: Session = Depends(get_db)):
    return ledger.update_transaction(db, transaction_id, data)


@router.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a transaction")
def delete_transaction(transaction_id: str, db: Session = Depends(get_db)):
    ledger.delete_transaction(db, transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/payees", response_model=List[schemas.Payee], summary="List payees")
def list_payees(db: Session = Depends(get_db)):
    """All payees by name, for autocomplete."""
    return ledger.list_payees(db)
