"""
Authentication Response DTOs
"""

from pydantic import BaseModel
from typing import Optional


class AuthUser(BaseModel):
    email: str
    role: str

    class Config:
        """Pydantic configuration."""
        from_attributes = True


class AuthResponse(BaseModel):
    """Token plus the public part of the account."""

    message: Optional[str] = None
    token: str
    user: AuthUser
