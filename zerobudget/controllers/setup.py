# controllers/setup.py
"""One-shot schema creation and default data."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import Base, engine
from ..dependencies import get_db
from ..schemas import ledger as schemas
from ..services import ledger

router = APIRouter()


@router.get("/setup", response_model=schemas.SetupResult, summary="Create tables and seed defaults")
def setup(db: Session = Depends(get_db)):
    """Create missing tables and seed the default groups/categories on an empty store. Safe to repeat."""
    Base.metadata.create_all(bind=engine)
    seeded = ledger.seed_defaults(db)
    message = "Database schema created and seeded successfully" if seeded else "Database schema already initialized"
    return schemas.SetupResult(seeded=seeded, message=message)
