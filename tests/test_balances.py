from datetime import date

from zerobudget.services.balances import AccountBalance, account_balances


def test_account_without_transactions_reports_starting_balance(make, db):
    account = make.account(starting_balance=-2500)

    balance = account_balances(db)[account.id]

    assert balance.computed_balance == -2500
    assert balance.cleared_balance == -2500


def test_inflows_only(make, db):
    account = make.account(starting_balance=1000)
    make.transaction(account, 5000, cleared=True)
    make.transaction(account, 700)

    balance = account_balances(db, account.id)[account.id]

    assert balance.computed_balance == 1000 + 5000 + 700
    assert balance.cleared_balance == 1000 + 5000


def test_outflows_only(make, db):
    account = make.account(starting_balance=0)
    make.transaction(account, -1250, cleared=True)
    make.transaction(account, -99, cleared=True)

    balance = account_balances(db)[account.id]

    assert balance.computed_balance == -1349
    assert balance.cleared_balance == -1349


def test_mixed_transactions_and_accounts_are_independent(make, db):
    checking = make.account(starting_balance=10000)
    card = make.account(name="Visa", type="credit_card", starting_balance=-3000)
    make.transaction(checking, 250000, cleared=True, on=date(2026, 1, 1))
    make.transaction(checking, -4599, on=date(2026, 2, 14))
    make.transaction(card, -1800, cleared=True)

    balances = account_balances(db)

    assert balances[checking.id] == AccountBalance(computed_balance=255401, cleared_balance=260000)
    assert balances[card.id] == AccountBalance(computed_balance=-4800, cleared_balance=-4800)


def test_edit_is_reflected_on_next_read(make, db):
    from zerobudget.schemas.ledger import TransactionUpdate
    from zerobudget.services import ledger

    account = make.account()
    tx = make.transaction(account, -500)
    assert account_balances(db)[account.id].computed_balance == -500

    ledger.update_transaction(db, tx.id, TransactionUpdate(amount=-800, cleared=True))

    balance = account_balances(db)[account.id]
    assert balance.computed_balance == -800
    assert balance.cleared_balance == -800


def test_accounts_endpoint_attaches_balances(make, client):
    account = make.account(starting_balance=500)
    make.transaction(account, 1500, cleared=True)
    make.transaction(account, -200)

    response = client.get("/api/accounts")

    assert response.status_code == 200
    [row] = response.json()
    assert row["id"] == account.id
    assert row["computed_balance"] == 1800
    assert row["cleared_balance"] == 2000
