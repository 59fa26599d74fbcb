"""Vote model."""
import uuid
from datetime import datetime, timezone as tz
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from polly.db.base import Base


class Vote(Base):
    __tablename__ = "votes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    poll_id = Column(String(36), ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    selected_option = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    poll = relationship("Poll", back_populates="votes")

    __table_args__ = (
        Index("idx_votes_poll", "poll_id"),
        # One vote per user per poll, enforced by the database as well
        UniqueConstraint("poll_id", "user_id", name="uq_vote_poll_user"),
    )
