"""Database package."""
from polly.db.session import engine, SessionLocal, get_db, get_db_context
from polly.db.base import Base

__all__ = ["engine", "SessionLocal", "get_db", "get_db_context", "Base"]
