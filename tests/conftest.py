import os
import tempfile
from datetime import date

# Must be set before zerobudget.database is imported
_DB_DIR = tempfile.mkdtemp(prefix="zerobudget-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"

import pytest
from fastapi.testclient import TestClient

from zerobudget.database import Base, SessionLocal, engine
from zerobudget.main import app
from zerobudget.schemas import ledger as schemas
from zerobudget.services import ledger


@pytest.fixture(autouse=True)
def fresh_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class Factory:
    """Creates ledger rows through the same services the API uses."""

    def __init__(self, db):
        self.db = db

    def account(self, name="Checking", type="checking", starting_balance=0, **kwargs):
        return ledger.create_account(self.db, schemas.AccountCreate(
            name=name, type=type, starting_balance=starting_balance, **kwargs
        ))

    def group(self, name="Bills", **kwargs):
        return ledger.create_group(self.db, schemas.CategoryGroupCreate(name=name, **kwargs))

    def category(self, group, name="Rent", **kwargs):
        return ledger.create_category(self.db, schemas.CategoryCreate(group_id=group.id, name=name, **kwargs))

    def transaction(self, account, amount, on=date(2026, 3, 10), category=None, **kwargs):
        return ledger.create_transaction(self.db, schemas.TransactionCreate(
            account_id=account.id,
            category_id=category.id if category is not None else None,
            amount=amount,
            date=on,
            **kwargs
        ))


@pytest.fixture
def make(db):
    return Factory(db)
