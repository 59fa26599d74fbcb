"""Poll schemas."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel


class PollOut(BaseModel):
    id: str
    user_id: str
    question: str
    options: List[str]
    created_at: Optional[datetime] = None


class PollResult(BaseModel):
    poll: Optional[PollOut] = None
    error: Optional[str] = None


class PollDetailResult(PollResult):
    """Poll page payload: the poll, the caller's vote state, a token for the vote form."""
    has_voted: bool = False
    csrf_token: Optional[str] = None


class PollListResult(BaseModel):
    polls: List[PollOut] = []
    error: Optional[str] = None
    csrf_token: Optional[str] = None


class PollEditPage(BaseModel):
    poll: PollOut
    csrf_token: str
