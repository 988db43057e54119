from zerobudget import models


def setup_budget(client):
    account = client.post("/api/accounts", json={"name": "Checking", "type": "checking", "starting_balance": 100000})
    group = client.post("/api/category-groups", json={"name": "Bills"})
    rent = client.post("/api/categories", json={"group_id": group.json()["id"], "name": "Rent", "due_day": 1})
    return account.json(), group.json(), rent.json()


def test_unknown_route_returns_error_body(client):
    response = client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_wrong_method_returns_error_body(client):
    response = client.patch("/api/accounts")

    assert response.status_code == 405
    assert "error" in response.json()


def test_missing_entity_is_404(client):
    response = client.put("/api/accounts/missing", json={"name": "Renamed"})

    assert response.status_code == 404
    assert response.json() == {"error": "Account missing not found"}


def test_schema_violation_is_400(client):
    response = client.post("/api/accounts", json={"name": "Wallet", "type": "crypto"})

    assert response.status_code == 400
    assert list(response.json()) == ["error"]


def test_setup_seeds_once(client):
    first = client.get("/api/setup")
    second = client.get("/api/setup")

    assert first.status_code == 200
    assert first.json()["seeded"] is True
    assert second.json()["seeded"] is False
    assert len(client.get("/api/categories").json()) == 12


def test_account_lifecycle(client):
    account, _, rent = setup_budget(client)
    assert account["computed_balance"] == 100000

    client.post("/api/transactions", json={
        "account_id": account["id"], "category_id": rent["id"],
        "amount": -25000, "date": "2026-03-01", "payee_name": "Landlord", "cleared": True,
    })
    client.post("/api/transactions", json={"account_id": account["id"], "amount": -5000, "date": "2026-03-02"})

    [listed] = client.get("/api/accounts").json()
    assert listed["computed_balance"] == 70000
    assert listed["cleared_balance"] == 75000

    deleted = client.delete(f"/api/accounts/{account['id']}")
    assert deleted.status_code == 204
    assert client.get("/api/transactions").json() == []


def test_budget_view_and_single_allocation(client):
    _, group, rent = setup_budget(client)

    response = client.put("/api/budget/2026/3/allocate", json={"category_id": rent["id"], "allocated": 40000})
    assert response.status_code == 200
    assert response.json()["allocated"] == 40000

    budget = client.get("/api/budget/2026/3").json()
    assert budget["ready_to_assign"] == 60000
    assert budget["total_budgeted"] == 40000
    [bills] = budget["groups"]
    assert bills["id"] == group["id"]
    assert bills["categories"][0]["available"] == 40000

    april = client.get("/api/budget/2026/4").json()
    assert april["groups"][0]["categories"][0]["allocated"] == 0
    assert april["ready_to_assign"] == 60000


def test_bulk_allocation_skips_unknown(client):
    _, _, rent = setup_budget(client)

    response = client.put("/api/budget/2026/3/allocate", json={"assignments": [
        {"category_id": rent["id"], "allocated": 1000},
        {"category_id": "gone", "allocated": 2000},
    ]})

    assert response.status_code == 200
    assert response.json() == {"updated": 1, "skipped": ["gone"]}


def test_bad_bulk_item_writes_nothing(client, db):
    _, _, rent = setup_budget(client)

    response = client.put("/api/budget/2026/3/allocate", json={"assignments": [
        {"category_id": rent["id"], "allocated": 1000},
        {"category_id": rent["id"], "allocated": "bad"},
    ]})

    assert response.status_code == 400
    assert db.query(models.CategoryMonth).count() == 0


def test_allocate_requires_a_mode(client):
    response = client.put("/api/budget/2026/3/allocate", json={"allocated": 100})

    assert response.status_code == 400
    assert "category_id and allocated are required" in response.json()["error"]


def test_reset_all_through_allocate(client):
    _, _, rent = setup_budget(client)
    client.put("/api/budget/2026/3/allocate", json={"category_id": rent["id"], "allocated": 5000})

    response = client.put("/api/budget/2026/3/allocate", json={"reset_all": True})

    assert response.json() == {"deleted": 1}
    assert client.get("/api/budget/2026/3").json()["total_budgeted"] == 0


def test_invalid_month_is_400(client):
    for path in ("/api/budget/2026/13", "/api/budget/2026/0"):
        response = client.get(path)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid year or month"}

    response = client.post("/api/budget/2026/13/reset")
    assert response.status_code == 400


def test_budget_tools_endpoints(client):
    account, _, rent = setup_budget(client)
    client.put(f"/api/categories/{rent['id']}", json={"target_amount": 30000})
    client.put("/api/budget/2026/2/allocate", json={"category_id": rent["id"], "allocated": 12000})

    copied = client.post("/api/budget/2026/3/copy-previous").json()
    assert copied == {"updated": 1, "skipped": []}

    funded = client.post("/api/budget/2026/3/fund-targets").json()
    assert funded["updated"] == 1

    client.post("/api/transactions", json={
        "account_id": account["id"], "category_id": rent["id"], "amount": -35000, "date": "2026-03-01",
    })
    covered = client.post("/api/budget/2026/3/cover-overspent").json()
    assert covered["updated"] == 1

    [rent_row] = client.get("/api/budget/2026/3").json()["groups"][0]["categories"]
    assert rent_row["allocated"] == 35000
    assert rent_row["available"] == 0


def test_clearing_optional_category_field(client):
    _, _, rent = setup_budget(client)

    response = client.put(f"/api/categories/{rent['id']}", json={"due_day": None, "notes": "paid by check"})

    body = response.json()
    assert body["due_day"] is None
    assert body["notes"] == "paid by check"
    assert body["name"] == "Rent"
    assert body["group_name"] == "Bills"


def test_nulling_required_field_is_400(client):
    _, _, rent = setup_budget(client)

    response = client.put(f"/api/categories/{rent['id']}", json={"name": None})

    assert response.status_code == 400
    assert "name cannot be null" in response.json()["error"]


def test_transaction_endpoints(client):
    account, _, rent = setup_budget(client)
    created = client.post("/api/transactions", json={
        "account_id": account["id"], "category_id": rent["id"],
        "amount": -1250, "date": "2026-03-04", "payee_name": "Coffee Bar",
    })
    assert created.status_code == 201
    tx = created.json()
    assert tx["account_name"] == "Checking"
    assert tx["category_group_name"] == "Bills"

    updated = client.put(f"/api/transactions/{tx['id']}", json={"memo": "latte", "category_id": None})
    assert updated.json()["memo"] == "latte"
    assert updated.json()["category_id"] is None
    assert client.get(f"/api/transactions/{tx['id']}").json()["amount"] == -1250

    assert [p["name"] for p in client.get("/api/payees").json()] == ["Coffee Bar"]
    assert len(client.get("/api/transactions", params={"year": 2026, "month": 3}).json()) == 1
    assert client.get("/api/transactions", params={"month": 13}).status_code == 400

    assert client.delete(f"/api/transactions/{tx['id']}").status_code == 204
    assert client.get(f"/api/transactions/{tx['id']}").status_code == 404


def test_deleting_group_cascades(client):
    _, group, rent = setup_budget(client)

    assert client.delete(f"/api/category-groups/{group['id']}").status_code == 204
    assert client.get("/api/categories").json() == []
    assert client.put(f"/api/categories/{rent['id']}", json={"name": "x"}).status_code == 404


def test_far_future_month_is_400(client):
    for path in ("/api/budget/9999/12", "/api/budget/10000/1"):
        response = client.get(path)
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid year or month"}

    assert client.post("/api/budget/9999/12/cover-overspent").status_code == 400
    assert client.get("/api/transactions", params={"year": 9999, "month": 12}).status_code == 400


def test_oversized_amounts_are_400(client):
    account, _, rent = setup_budget(client)

    response = client.put("/api/budget/2026/3/allocate", json={"category_id": rent["id"], "allocated": 10 ** 20})
    assert response.status_code == 400

    response = client.post("/api/transactions", json={
        "account_id": account["id"], "amount": -(10 ** 20), "date": "2026-03-01",
    })
    assert response.status_code == 400
    assert client.get("/api/transactions").json() == []


def test_copy_previous_into_first_month_is_400(client):
    response = client.post("/api/budget/1/1/copy-previous")

    assert response.status_code == 400
    assert "no previous month" in response.json()["error"]
