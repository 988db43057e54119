# services/balances.py
"""Account balances derived from starting balance plus transaction sums.

Nothing is cached: every call re-aggregates from the store so an edited
transaction is reflected on the next read without invalidation.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from .. import models

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountBalance:
    computed_balance: int
    cleared_balance: int

    @classmethod
    def from_sums(cls, starting_balance: int, total: int = 0, cleared_total: int = 0) -> "AccountBalance":
        return cls(
            computed_balance=starting_balance + total,
            cleared_balance=starting_balance + cleared_total,
        )


def transaction_sums(db: Session, account_id: Optional[str] = None) -> Dict[str, tuple]:
    """Map account id -> (sum of all amounts, sum of cleared amounts)."""
    query = db.query(
        models.Transaction.account_id,
        func.coalesce(func.sum(models.Transaction.amount), 0),
        func.coalesce(
            func.sum(case((models.Transaction.cleared.is_(True), models.Transaction.amount), else_=0)),
            0,
        ),
    )
    if account_id is not None:
        query = query.filter(models.Transaction.account_id == account_id)

    # SUM(bigint) comes back as Decimal on PostgreSQL
    return {
        row_account_id: (int(total), int(cleared))
        for row_account_id, total, cleared in query.group_by(models.Transaction.account_id)
    }


def account_balances(db: Session, account_id: Optional[str] = None) -> Dict[str, AccountBalance]:
    """Balances for one account, or for every account when ``account_id`` is None.

    Accounts without transactions report their starting balance for both
    figures.
    """
    logger.debug(f"Computing balances for {account_id or 'all accounts'}")
    accounts = db.query(models.Account.id, models.Account.starting_balance)
    if account_id is not None:
        accounts = accounts.filter(models.Account.id == account_id)

    sums = transaction_sums(db, account_id)
    return {
        acc_id: AccountBalance.from_sums(int(starting), *sums.get(acc_id, (0, 0)))
        for acc_id, starting in accounts
    }
