"""Database models."""
from polly.db.models.user import User
from polly.db.models.poll import Poll
from polly.db.models.vote import Vote

__all__ = ["User", "Poll", "Vote"]
