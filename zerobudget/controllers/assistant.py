# controllers/assistant.py
"""Chat endpoint for the tool-calling budget assistant."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..assistant.client import ReasoningClient
from ..assistant.loop import AssistantLoop
from ..dependencies import get_db, get_reasoning_client
from ..schemas import assistant as schemas

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/ai/chat", response_model=schemas.ChatResponse, summary="Chat with the budget assistant")
def chat(
    request: schemas.ChatRequest,
    db: Session = Depends(get_db),
    client: ReasoningClient = Depends(get_reasoning_client)
):
    """Run one assistant turn; the refresh flags tell the client which views changed."""
    logger.info(f"Assistant turn for {request.year}/{request.month} ({len(request.messages)} messages)")
    result = AssistantLoop(db, client, request.year, request.month).run(
        [m.model_dump() for m in request.messages]
    )
    return schemas.ChatResponse(
        content=result.content,
        actions_taken=result.actions_taken,
        refresh_budget=result.refresh_budget,
        refresh_transactions=result.refresh_transactions,
        refresh_accounts=result.refresh_accounts,
    )
