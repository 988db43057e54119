# assistant/tools.py
"""Tool catalog offered to the reasoning backend.

Each tool validates its input with a Pydantic model (whose JSON schema is
the tool's ``input_schema``) and then calls the same service functions as
the HTTP controllers, so a tool can do nothing the UI could not.
"""

from dataclasses import dataclass, field
from datetime import date as Date
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..schemas import ledger as schemas
from ..services import allocations, ledger
from .context import format_cents, month_label


@dataclass
class ToolContext:
    """Conversation-scoped state handed to every tool call."""
    db: Session
    year: int
    month: int

    def period(self, params) -> tuple:
        year = self.year if params.year is None else params.year
        month = self.month if params.month is None else params.month
        return year, month


@dataclass
class ToolOutcome:
    data: Any
    actions: List[str] = field(default_factory=list)


@dataclass
class Tool:
    name: str
    description: str
    input_model: Type[BaseModel]
    handler: Callable[[ToolContext, BaseModel], ToolOutcome]

    def definition(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_model.model_json_schema(),
        }

    def run(self, context: ToolContext, raw_input) -> ToolOutcome:
        params = self.input_model.model_validate(raw_input or {})
        return self.handler(context, params)


TOOLS: Dict[str, Tool] = {}


def tool(name: str, description: str, input_model: Type[BaseModel]):
    """Register a handler in TOOLS under ``name``."""
    def register(handler):
        TOOLS[name] = Tool(name, description, input_model, handler)
        return handler
    return register


def tool_definitions(tools: Optional[Dict[str, Tool]] = None) -> List[dict]:
    return [t.definition() for t in (TOOLS if tools is None else tools).values()]


def describe_transaction(transaction) -> str:
    sign = "+" if transaction.amount >= 0 else ""
    return f"{transaction.payee_name or 'Unknown'} {sign}{format_cents(transaction.amount)}"


def _partial(model: Type[schemas.PartialUpdate], params: BaseModel, *exclude: str):
    """Rebuild an update payload from only the fields the model actually sent."""
    return model(**params.model_dump(exclude_unset=True, exclude=set(exclude)))


# ============= ALLOCATION =============

class PeriodInput(BaseModel):
    year: Optional[int] = Field(
        default=None, ge=1, le=schemas.MAX_YEAR, description="Defaults to the budget month being viewed"
    )
    month: Optional[int] = Field(default=None, ge=1, le=12, description="1-12; defaults to the month being viewed")


class AssignInput(PeriodInput):
    category_id: str = Field(description="Id of the category")
    amount_cents: int = Field(
        ge=-schemas.MAX_CENTS,
        le=schemas.MAX_CENTS,
        description="New allocated amount in cents (e.g. 50000 = $500.00); replaces the old value",
    )


class AssignmentItem(BaseModel):
    category_id: str
    amount_cents: schemas.Cents


class BulkAssignInput(PeriodInput):
    assignments: List[AssignmentItem] = Field(min_length=1)


@tool(
    "assign_to_category",
    "Set how much is assigned (budgeted) to one category for a month. The amount replaces the current allocation.",
    AssignInput,
)
def assign_to_category(context: ToolContext, params: AssignInput) -> ToolOutcome:
    year, month = context.period(params)
    record = allocations.assign(context.db, year, month, params.category_id, params.amount_cents)
    name = ledger.get_category(context.db, params.category_id).name
    return ToolOutcome(
        data={"success": True, "category_id": record.category_id, "allocated": record.allocated},
        actions=[f"Assigned {format_cents(params.amount_cents)} to {name}"],
    )


@tool(
    "bulk_assign",
    "Set allocations for several categories of one month at once, e.g. to distribute Ready to Assign.",
    BulkAssignInput,
)
def bulk_assign(context: ToolContext, params: BulkAssignInput) -> ToolOutcome:
    year, month = context.period(params)
    result = allocations.bulk_assign(
        context.db, year, month, [(a.category_id, a.amount_cents) for a in params.assignments]
    )
    names = {c.id: c.name for c in ledger.list_categories(context.db)}
    actions = [
        f"Assigned {format_cents(a.amount_cents)} to {names[a.category_id]}"
        for a in params.assignments
        if a.category_id in names and a.category_id not in result.skipped
    ]
    return ToolOutcome(
        data={"success": True, "count": result.updated, "skipped_unknown_categories": result.skipped},
        actions=actions,
    )


@tool(
    "reset_month_allocations",
    "Remove every allocation for a month so all categories are back to $0 assigned. Other months are untouched.",
    PeriodInput,
)
def reset_month_allocations(context: ToolContext, params: PeriodInput) -> ToolOutcome:
    year, month = context.period(params)
    deleted = allocations.reset_month(context.db, year, month)
    return ToolOutcome(
        data={"success": True, "deleted": deleted},
        actions=[f"Reset all allocations for {month_label(year, month)}"],
    )


# ============= CATEGORY GROUPS =============

class UpdateGroupInput(schemas.CategoryGroupUpdate):
    group_id: str


class GroupIdInput(BaseModel):
    group_id: str


@tool("create_category_group", "Create a new category group.", schemas.CategoryGroupCreate)
def create_category_group(context: ToolContext, params: schemas.CategoryGroupCreate) -> ToolOutcome:
    group = ledger.create_group(context.db, params)
    return ToolOutcome(
        data=schemas.CategoryGroup.model_validate(group),
        actions=[f"Created category group {group.name}"],
    )


@tool("update_category_group", "Rename or reorder a category group.", UpdateGroupInput)
def update_category_group(context: ToolContext, params: UpdateGroupInput) -> ToolOutcome:
    group = ledger.update_group(
        context.db, params.group_id, _partial(schemas.CategoryGroupUpdate, params, "group_id")
    )
    return ToolOutcome(
        data=schemas.CategoryGroup.model_validate(group),
        actions=[f"Updated category group {group.name}"],
    )


@tool(
    "delete_category_group",
    "Delete a category group and all of its categories. Their transactions become uncategorized.",
    GroupIdInput,
)
def delete_category_group(context: ToolContext, params: GroupIdInput) -> ToolOutcome:
    group = ledger.delete_group(context.db, params.group_id)
    return ToolOutcome(data={"success": True}, actions=[f"Deleted category group {group.name}"])


# ============= CATEGORIES =============

class UpdateCategoryInput(schemas.CategoryUpdate):
    category_id: str


class CategoryIdInput(BaseModel):
    category_id: str


@tool(
    "create_category",
    "Create a category inside a group. Optional due_day (1-31), recurrence, target_amount (cents) and notes.",
    schemas.CategoryCreate,
)
def create_category(context: ToolContext, params: schemas.CategoryCreate) -> ToolOutcome:
    category = ledger.create_category(context.db, params)
    return ToolOutcome(
        data=schemas.Category.model_validate(category),
        actions=[f"Created category {category.name}"],
    )


@tool(
    "update_category",
    "Change a category. Only the fields you pass change; pass null to clear due_day, recurrence, target_amount or notes.",
    UpdateCategoryInput,
)
def update_category(context: ToolContext, params: UpdateCategoryInput) -> ToolOutcome:
    category = ledger.update_category(
        context.db, params.category_id, _partial(schemas.CategoryUpdate, params, "category_id")
    )
    return ToolOutcome(
        data=schemas.Category.model_validate(category),
        actions=[f"Updated category {category.name}"],
    )


@tool(
    "delete_category",
    "Delete a category. Its transactions are kept but become uncategorized.",
    CategoryIdInput,
)
def delete_category(context: ToolContext, params: CategoryIdInput) -> ToolOutcome:
    category = ledger.delete_category(context.db, params.category_id)
    return ToolOutcome(data={"success": True}, actions=[f"Deleted category {category.name}"])


# ============= ACCOUNTS =============

class UpdateAccountInput(schemas.AccountUpdate):
    account_id: str


@tool(
    "create_account",
    "Open a new account (checking, savings, credit_card or cash) with a starting balance in cents.",
    schemas.AccountCreate,
)
def create_account(context: ToolContext, params: schemas.AccountCreate) -> ToolOutcome:
    account = ledger.create_account(context.db, params)
    return ToolOutcome(data=account, actions=[f"Created account {account.name}"])


@tool("update_account", "Rename an account or change its type, starting balance or savings flag.", UpdateAccountInput)
def update_account(context: ToolContext, params: UpdateAccountInput) -> ToolOutcome:
    account = ledger.update_account(
        context.db, params.account_id, _partial(schemas.AccountUpdate, params, "account_id")
    )
    return ToolOutcome(data=account, actions=[f"Updated account {account.name}"])


# ============= TRANSACTIONS =============

class CreateTransactionInput(BaseModel):
    account_id: str
    category_id: Optional[str] = Field(default=None, description="Leave empty for income")
    payee_name: Optional[str] = None
    amount_cents: int = Field(
        ge=-schemas.MAX_CENTS, le=schemas.MAX_CENTS, description="Positive for income, negative for spending"
    )
    date: Date
    memo: Optional[str] = None
    cleared: bool = False


class UpdateTransactionInput(BaseModel):
    transaction_id: str
    account_id: Optional[str] = None
    category_id: Optional[str] = None
    payee_name: Optional[str] = None
    amount_cents: Optional[schemas.Cents] = None
    date: Optional[Date] = None
    memo: Optional[str] = None
    cleared: Optional[bool] = None


class TransactionIdInput(BaseModel):
    transaction_id: str


class TransactionQueryInput(BaseModel):
    account_id: Optional[str] = None
    category_id: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1, le=schemas.MAX_YEAR)
    month: Optional[int] = Field(default=None, ge=1, le=12)
    limit: int = Field(default=100, ge=1, le=500)


@tool("create_transaction", "Record a new transaction (spending or income).", CreateTransactionInput)
def create_transaction(context: ToolContext, params: CreateTransactionInput) -> ToolOutcome:
    fields = params.model_dump(exclude={"amount_cents"})
    transaction = ledger.create_transaction(
        context.db, schemas.TransactionCreate(amount=params.amount_cents, **fields)
    )
    return ToolOutcome(
        data=schemas.Transaction.model_validate(transaction),
        actions=[f"Recorded transaction: {describe_transaction(transaction)}"],
    )


@tool(
    "update_transaction",
    "Change a transaction. Only the fields you pass change; pass null category_id to uncategorize it.",
    UpdateTransactionInput,
)
def update_transaction(context: ToolContext, params: UpdateTransactionInput) -> ToolOutcome:
    fields = params.model_dump(exclude_unset=True, exclude={"transaction_id"})
    if "amount_cents" in fields:
        fields["amount"] = fields.pop("amount_cents")
    transaction = ledger.update_transaction(
        context.db, params.transaction_id, schemas.TransactionUpdate(**fields)
    )
    return ToolOutcome(
        data=schemas.Transaction.model_validate(transaction),
        actions=[f"Updated transaction: {describe_transaction(transaction)}"],
    )


@tool("delete_transaction", "Delete a transaction.", TransactionIdInput)
def delete_transaction(context: ToolContext, params: TransactionIdInput) -> ToolOutcome:
    transaction = ledger.delete_transaction(context.db, params.transaction_id)
    return ToolOutcome(
        data={"success": True},
        actions=[f"Deleted transaction: {describe_transaction(transaction)}"],
    )


@tool(
    "get_transactions",
    "Fetch transaction history, newest first, to analyse spending. All filters are optional.",
    TransactionQueryInput,
)
def get_transactions(context: ToolContext, params: TransactionQueryInput) -> ToolOutcome:
    rows = ledger.list_transactions(
        context.db,
        account_id=params.account_id,
        category_id=params.category_id,
        year=params.year,
        month=params.month,
        limit=params.limit,
    )
    return ToolOutcome(data=[schemas.Transaction.model_validate(t) for t in rows])
