# database.py
"""Engine, session factory and declarative base for the ledger store.

PostgreSQL in production; SQLite is accepted so the suite can run against a
throwaway file.
"""

import os
import logging
from sqlalchemy import create_engine, NullPool
from sqlalchemy.orm import declarative_base, sessionmaker
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

DATABASE_URL = os.getenv('DATABASE_URL')
if not DATABASE_URL:
    raise RuntimeError(
        "DATABASE_URL is not set. "
        "Point it at the budget database in .env or the environment."
    )

engine_options = {"poolclass": NullPool}
if DATABASE_URL.startswith("postgresql"):
    engine_options["client_encoding"] = "utf8"
elif DATABASE_URL.startswith("sqlite"):
    # Request sessions may be opened and closed on different worker threads
    engine_options["connect_args"] = {"check_same_thread": False}

logger.info(f"Connecting to {DATABASE_URL.split(':', 1)[0]} ledger store")
engine = create_engine(DATABASE_URL, **engine_options)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def dialect_insert(session):
    """INSERT construct of the bound dialect, for ON CONFLICT upserts."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise RuntimeError(f"Upserts are not supported on the {dialect} dialect")
    return insert
