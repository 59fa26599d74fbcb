"""Poll model."""
import uuid
from datetime import datetime, timezone as tz
from sqlalchemy import Column, String, DateTime, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship

from polly.db.base import Base
from polly.core.constants import MAX_QUESTION_LENGTH


class Poll(Base):
    __tablename__ = "polls"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Escaped text can grow past the raw input limit (< becomes &lt;)
    question = Column(String(MAX_QUESTION_LENGTH * 4), nullable=False)
    options = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    votes = relationship("Vote", back_populates="poll", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("idx_polls_user", "user_id"),
        Index("idx_polls_created_at", "created_at"),
    )
