"""Authentication schemas."""
from typing import Optional
from pydantic import BaseModel, Field

from polly.auth.identity import Identity


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=1024)


class RegisterRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=1024)


class CurrentUserResult(BaseModel):
    user: Optional[Identity] = None
    error: Optional[str] = None
