# zerobudget/dependencies.py
"""Request-scoped dependencies shared by the routers."""

from fastapi import HTTPException, status

from .database import SessionLocal
from .assistant import client


def get_db():
    """One session per request, closed when the response is done.

    Usage: db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_reasoning_client() -> client.ReasoningClient:
    """Reasoning backend for the assistant; overridden in tests."""
    if not client.ANTHROPIC_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="ANTHROPIC_API_KEY not configured",
        )
    return client.AnthropicReasoningClient(api_key=client.ANTHROPIC_API_KEY)
