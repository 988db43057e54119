from datetime import date
from types import SimpleNamespace

import pytest

from zerobudget.errors import ValidationError
from zerobudget.services import allocations
from zerobudget.services.budget import build_budget_month, get_budget_month, ready_to_assign


def _category(budget, category_id):
    return next(c for c in budget.categories() if c.id == category_id)


def test_unallocated_category_defaults_to_zero(make, db):
    group = make.group()
    rent = make.category(group, "Rent")

    budget = get_budget_month(db, 2026, 3)

    row = _category(budget, rent.id)
    assert (row.allocated, row.activity, row.available) == (0, 0, 0)


def test_available_is_allocated_plus_activity(make, db):
    account = make.account()
    group = make.group()
    groceries = make.category(group, "Groceries")
    make.transaction(account, -4200, category=groceries, on=date(2026, 3, 2))
    make.transaction(account, -800, category=groceries, on=date(2026, 3, 31))
    make.transaction(account, 300, category=groceries, on=date(2026, 3, 15))  # refund

    row = _category(get_budget_month(db, 2026, 3), groceries.id)
    assert row.allocated == 0
    assert row.activity == -4700
    assert row.available == -4700

    allocations.assign(db, 2026, 3, groceries.id, 10000)

    row = _category(get_budget_month(db, 2026, 3), groceries.id)
    assert row.available == row.allocated + row.activity == 5300


def test_activity_is_scoped_to_calendar_month(make, db):
    account = make.account()
    group = make.group()
    dining = make.category(group, "Dining Out")
    make.transaction(account, -1000, category=dining, on=date(2026, 2, 28))
    make.transaction(account, -2000, category=dining, on=date(2026, 3, 1))
    make.transaction(account, -4000, category=dining, on=date(2026, 4, 1))
    make.transaction(account, -8000, category=dining, on=date(2025, 3, 10))

    assert _category(get_budget_month(db, 2026, 3), dining.id).activity == -2000
    assert _category(get_budget_month(db, 2025, 3), dining.id).activity == -8000


def test_december_activity_does_not_leak_into_january(make, db):
    account = make.account()
    gifts = make.category(make.group(), "Gifts")
    make.transaction(account, -5000, category=gifts, on=date(2025, 12, 31))

    assert _category(get_budget_month(db, 2025, 12), gifts.id).activity == -5000
    assert _category(get_budget_month(db, 2026, 1), gifts.id).activity == 0


def test_overspent_available_is_not_clamped(make, db):
    account = make.account()
    fun = make.category(make.group(), "Fun")
    allocations.assign(db, 2026, 3, fun.id, 2000)
    make.transaction(account, -3500, category=fun)

    assert _category(get_budget_month(db, 2026, 3), fun.id).available == -1500


def test_group_totals_sum_their_categories(make, db):
    account = make.account()
    bills = make.group("Bills")
    everyday = make.group("Everyday")
    rent = make.category(bills, "Rent")
    internet = make.category(bills, "Internet")
    food = make.category(everyday, "Food")
    allocations.bulk_assign(db, 2026, 3, [(rent.id, 150000), (internet.id, 6000), (food.id, 40000)])
    make.transaction(account, -150000, category=rent)
    make.transaction(account, -12000, category=food)

    budget = get_budget_month(db, 2026, 3)

    bills_row = next(g for g in budget.groups if g.id == bills.id)
    assert bills_row.total_allocated == 156000
    assert bills_row.total_activity == -150000
    assert bills_row.total_available == 6000
    assert [c.name for c in bills_row.categories] == ["Rent", "Internet"]
    assert budget.total_budgeted == 196000


def test_empty_group_is_listed_with_zero_totals(make, db):
    make.group("Nothing yet")

    [group] = get_budget_month(db, 2026, 3).groups

    assert group.categories == []
    assert (group.total_allocated, group.total_activity, group.total_available) == (0, 0, 0)


def test_ready_to_assign_conservation_scenario(make, db):
    account = make.account(starting_balance=0)
    group = make.group()
    rent = make.category(group, "Rent")
    groceries = make.category(group, "Groceries")
    make.transaction(account, 100000, on=date(2026, 3, 1))

    assert get_budget_month(db, 2026, 3).ready_to_assign == 100000

    allocations.assign(db, 2026, 3, rent.id, 50000)
    assert get_budget_month(db, 2026, 3).ready_to_assign == 50000

    allocations.assign(db, 2026, 3, groceries.id, 60000)
    assert get_budget_month(db, 2026, 3).ready_to_assign == -10000


def test_ready_to_assign_does_not_depend_on_viewed_month(make, db):
    account = make.account()
    rent = make.category(make.group(), "Rent")
    make.transaction(account, 300000, on=date(2026, 1, 15))
    allocations.assign(db, 2026, 1, rent.id, 100000)
    allocations.assign(db, 2026, 5, rent.id, 25000)

    figures = {get_budget_month(db, 2026, m).ready_to_assign for m in (1, 3, 5, 12)}

    assert figures == {175000}


def test_increasing_an_allocation_by_delta_lowers_ready_to_assign_by_delta(make, db):
    account = make.account()
    rent = make.category(make.group(), "Rent")
    make.transaction(account, 80000)
    allocations.assign(db, 2026, 3, rent.id, 10000)
    before = ready_to_assign(db)

    allocations.assign(db, 2026, 3, rent.id, 10000 + 2345)

    assert ready_to_assign(db) == before - 2345


def test_starting_balances_fund_ready_to_assign(make, db):
    make.account(starting_balance=120000)
    make.account(name="Visa", type="credit_card", starting_balance=-20000)

    assert ready_to_assign(db) == 100000


def test_spending_does_not_change_ready_to_assign(make, db):
    account = make.account()
    food = make.category(make.group(), "Food")
    make.transaction(account, 50000)
    before = ready_to_assign(db)

    make.transaction(account, -7000, category=food)

    assert ready_to_assign(db) == before


@pytest.mark.parametrize("year,month", [(2026, 0), (2026, 13), (0, 5), ("2026", 5), (9999, 12), (9999, 1)])
def test_invalid_period_is_rejected(db, year, month):
    with pytest.raises(ValidationError):
        get_budget_month(db, year, month)


def test_build_budget_month_is_pure():
    groups = [SimpleNamespace(id="g1", name="Bills", sort_order=0)]
    categories = [
        SimpleNamespace(id="c1", group_id="g1", name="Rent", is_savings=False, sort_order=0,
                        due_day=1, recurrence="monthly", target_amount=150000, notes=None),
        SimpleNamespace(id="c2", group_id="g1", name="Phone", is_savings=False, sort_order=1,
                        due_day=None, recurrence=None, target_amount=None, notes="prepaid"),
    ]

    budget = build_budget_month(2026, 3, groups, categories, {"c1": 150000}, {"c2": -4500}, 7)

    assert budget.ready_to_assign == 7
    assert budget.total_budgeted == 150000
    rent, phone = budget.groups[0].categories
    assert (rent.allocated, rent.activity, rent.available) == (150000, 0, 150000)
    assert (phone.allocated, phone.activity, phone.available) == (0, -4500, -4500)
    assert budget.groups[0].total_available == 145500


def test_last_supported_month_has_bounds(make, db):
    gifts = make.category(make.group(), "Gifts")
    make.transaction(make.account(), -100, category=gifts, on=date(9998, 12, 31))

    assert _category(get_budget_month(db, 9998, 12), gifts.id).activity == -100
