"""User model."""
import uuid
from datetime import datetime, timezone as tz
from sqlalchemy import Column, String, DateTime, JSON, Index

from polly.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(320), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    # Written by the user at sign-up (display name etc.)
    user_metadata = Column(JSON, nullable=False, default=dict)
    # Server-controlled; holds the isAdmin flag. No user-facing path writes it.
    app_metadata = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    __table_args__ = (Index("idx_users_email", "email"),)
