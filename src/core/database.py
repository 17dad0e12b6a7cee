"""Database engine and request-scoped sessions.

Users, project submissions and chat messages live in the database named by
DATABASE_URL, a SQLite file under DATA_DIR unless configured otherwise.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from config import DATA_DIR, DATABASE_URL
from models.base import Base
# Registers the user, project and chat tables on Base.metadata
import models  # noqa: F401

DATA_DIR.mkdir(parents=True, exist_ok=True)

# SQLite connections are shared across FastAPI's worker threads
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db():
    """Create any missing tables."""
    Base.metadata.create_all(bind=engine)

init_db()

def get_db():
    """Yield a session for one request and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
