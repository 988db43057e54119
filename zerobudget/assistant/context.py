# assistant/context.py
"""Budget snapshot rendered into the assistant's system prompt.

Entity ids are embedded next to every name so the model can pass them
straight back as tool arguments.
"""

import calendar
from dataclasses import dataclass
from datetime import date
from typing import List

from sqlalchemy.orm import Session

from .. import models
from ..schemas import budget as budget_schemas
from ..schemas import ledger as ledger_schemas
from ..services import ledger
from ..services.budget import get_budget_month

RECENT_TRANSACTIONS = 20


def format_cents(cents) -> str:
    """1234567 -> '$12,345.67', -500 -> '-$5.00'."""
    cents = int(cents or 0)
    dollars, remainder = divmod(abs(cents), 100)
    sign = "-" if cents < 0 else ""
    return f"{sign}${dollars:,}.{remainder:02d}"


def month_label(year: int, month: int) -> str:
    return f"{calendar.month_name[month]} {year}"


def days_until(due_day: int, today: date) -> int:
    if due_day >= today.day:
        return due_day - today.day
    return 31 - today.day + due_day


@dataclass
class Snapshot:
    budget: budget_schemas.BudgetMonth
    accounts: List[ledger_schemas.Account]
    recent: List[models.Transaction]


def load_snapshot(db: Session, year: int, month: int) -> Snapshot:
    return Snapshot(
        budget=get_budget_month(db, year, month),
        accounts=ledger.list_accounts(db),
        recent=ledger.list_transactions(db, limit=RECENT_TRANSACTIONS),
    )


def _budget_lines(budget):
    lines = []
    for group in budget.groups:
        lines.append(f"\n{group.name}:  [group id: {group.id}]")
        for c in group.categories:
            due = f" [due: {c.due_day}{', ' + c.recurrence if c.recurrence else ''}]" if c.due_day else ""
            goal = f" [goal: {format_cents(c.target_amount)}]" if c.target_amount else ""
            flag = " OVERSPENT" if c.available < 0 else ""
            lines.append(
                f"  - {c.name}{due}{goal}: assigned {format_cents(c.allocated)}, "
                f"activity {format_cents(c.activity)}, available {format_cents(c.available)}{flag}  [id: {c.id}]"
            )
    return lines


def _bill_lines(budget, today):
    bills = sorted(
        (c for c in budget.categories() if c.due_day),
        key=lambda c: days_until(c.due_day, today),
    )
    lines = []
    for c in bills:
        days = days_until(c.due_day, today)
        when = "TODAY" if days == 0 else f"in {days} days"
        lines.append(
            f"  - {c.name}: due day {c.due_day} ({when}), assigned {format_cents(c.allocated)}, "
            f"available {format_cents(c.available)}"
        )
    return lines


def render_system_prompt(snapshot: Snapshot, today: date) -> str:
    budget = snapshot.budget
    label = month_label(budget.year, budget.month)
    over = " (OVER-ASSIGNED)" if budget.ready_to_assign < 0 else ""

    accounts = "\n".join(
        f"  - {a.name} ({a.type}): {format_cents(a.computed_balance)}, "
        f"cleared {format_cents(a.cleared_balance)}  [id: {a.id}]"
        for a in snapshot.accounts
    ) or "  (none yet)"
    categories = "\n".join(_budget_lines(budget)) or "  (no categories yet)"
    bills = _bill_lines(budget, today)
    recent = "\n".join(
        f"  {t.date.isoformat()} | {t.payee_name or 'No payee'} | {t.category_name or 'Uncategorized'} | "
        f"{format_cents(t.amount)}  [id: {t.id}]"
        for t in snapshot.recent
    ) or "  (none yet)"

    sections = [
        "You are a personal budget assistant inside a zero-based budgeting app. "
        "Every dollar is assigned to a category; allocations in any month draw from one "
        "all-time Ready to Assign pool.",
        f"Today is {today.strftime('%A, %B %d, %Y')}. Current budget month: {label}.",
        f"READY TO ASSIGN: {format_cents(budget.ready_to_assign)}{over}",
        f"ACCOUNTS:\n{accounts}",
        f"BUDGET - {label}:{categories}",
    ]
    if bills:
        sections.append("UPCOMING BILLS:\n" + "\n".join(bills))
    sections.append(f"RECENT TRANSACTIONS (last {RECENT_TRANSACTIONS}):\n{recent}")
    sections.append(
        "RULES:\n"
        "- When the user asks you to change something, call the tools instead of describing the change.\n"
        "- All amounts in tools are integer cents (multiply dollars by 100). "
        "Spending is negative, income is positive.\n"
        "- Use the ids shown above; never invent ids.\n"
        "- After acting, confirm briefly what you did."
    )
    return "\n\n".join(sections)
