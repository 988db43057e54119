from pydantic import BaseModel, Field, StrictInt, model_validator
from typing import List, Optional

from .ledger import MAX_CENTS


class BudgetCategory(BaseModel):
    """One category row of a month: the allocation and what it left available."""
    id: str
    group_id: str
    name: str
    is_savings: bool = False
    sort_order: int = 0
    due_day: Optional[int] = None
    recurrence: Optional[str] = None
    target_amount: Optional[int] = None
    notes: Optional[str] = None
    allocated: int = 0
    activity: int = 0
    available: int = 0


class BudgetGroup(BaseModel):
    id: str
    name: str
    sort_order: int = 0
    categories: List[BudgetCategory] = []
    total_allocated: int = 0
    total_activity: int = 0
    total_available: int = 0


class BudgetMonth(BaseModel):
    year: int
    month: int
    ready_to_assign: int
    total_budgeted: int
    groups: List[BudgetGroup] = []

    def categories(self) -> List[BudgetCategory]:
        return [c for g in self.groups for c in g.categories]


class Assignment(BaseModel):
    category_id: str = Field(min_length=1)
    allocated: StrictInt = Field(ge=-MAX_CENTS, le=MAX_CENTS)


class AllocateRequest(BaseModel):
    """Single, bulk or reset allocation; the populated fields pick the mode."""
    category_id: Optional[str] = None
    allocated: Optional[StrictInt] = Field(default=None, ge=-MAX_CENTS, le=MAX_CENTS)
    assignments: Optional[List[Assignment]] = None
    reset_all: bool = False

    @model_validator(mode="after")
    def check_shape(self):
        if self.reset_all or self.assignments is not None:
            return self
        if not self.category_id or self.allocated is None:
            raise ValueError("category_id and allocated are required")
        return self


class CategoryMonth(BaseModel):
    id: str
    category_id: str
    year: int
    month: int
    allocated: int

    class Config:
        from_attributes = True


class BulkAllocationResult(BaseModel):
    updated: int
    skipped: List[str] = []


class ResetResult(BaseModel):
    deleted: int
