"""
Database connection and setup
SQLAlchemy engine and session factory for trade listings
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from plantswap.models import Base
from config.settings import settings

DATABASE_URL = settings.database_url


def _connect_args(url: str) -> dict:
    # SQLite connections are shared across FastAPI's worker threads
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    DATABASE_URL,
    connect_args=_connect_args(DATABASE_URL),
    echo=False  # Set to True to see SQL queries
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """
    Initialize database - create all tables
    Safe to call multiple times (won't recreate existing tables)
    """
    Base.metadata.create_all(bind=engine)


def get_db():
    """
    Get database session - use in FastAPI dependencies
    Yields a session and closes it when done
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
