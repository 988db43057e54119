# controllers/accounts.py
"""Account endpoints; every account is returned with its computed balances."""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..dependencies import get_db
from ..schemas import ledger as schemas
from ..services import ledger

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/accounts", response_model=List[schemas.Account], summary="List accounts with balances")
def list_accounts(db: Session = Depends(get_db)):
    """All accounts with computed_balance and cleared_balance attached."""
    return ledger.list_accounts(db)


@router.post("/accounts", response_model=schemas.Account, status_code=status.HTTP_201_CREATED, summary="Create an account")
def create_account(account: schemas.AccountCreate, db: Session = Depends(get_db)):
    return ledger.create_account(db, account)


@router.put("/accounts/{account_id}", response_model=schemas.Account, summary="Update an account")
def update_account(account_id: str, data: schemas.AccountUpdate, db: Session = Depends(get_db)):
    """Rename, retype or edit the starting balance; omitted fields are kept."""
    return ledger.update_account(db, account_id, data)


@router.delete("/accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete an account")
def delete_account(account_id: str, db: Session = Depends(get_db)):
    """Delete an account and all of its transactions."""
    ledger.delete_account(db, account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
