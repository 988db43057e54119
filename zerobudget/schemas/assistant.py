from pydantic import BaseModel, Field
from typing import List, Literal

from .ledger import MAX_YEAR


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(min_length=1)
    year: int = Field(ge=1, le=MAX_YEAR)
    month: int = Field(ge=1, le=12)


class ChatResponse(BaseModel):
    content: str
    actions_taken: List[str] = []
    refresh_budget: bool = False
    refresh_transactions: bool = False
    refresh_accounts: bool = False
