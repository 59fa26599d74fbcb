"""Common response schemas."""
from pydantic import BaseModel
from typing import Optional


class ActionResult(BaseModel):
    """Result of every mutating operation."""
    error: Optional[str] = None


class CsrfTokenResponse(BaseModel):
    csrf_token: str
