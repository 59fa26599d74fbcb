"""Vote schemas."""
from typing import List, Optional
from pydantic import BaseModel


class PollResults(BaseModel):
    poll_id: str
    question: str
    options: List[str]
    vote_counts: List[int]
    total_votes: int


class PollResultsResult(BaseModel):
    results: Optional[PollResults] = None
    error: Optional[str] = None
