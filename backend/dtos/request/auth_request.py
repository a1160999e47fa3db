"""
Authentication Request DTOs
"""

from pydantic import BaseModel, Field, validator
from typing import Optional

from constants import UserRole


class SignupRequest(BaseModel):
    """Request DTO for creating a user account."""

    email: str = Field(min_length=3, description="Login email")
    password: str = Field(min_length=1, description="Plain-text password, hashed before storage")
    role: Optional[UserRole] = Field(None, description="Account role, defaults to 'user'")
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True

    @validator("email")
    def normalize_email(cls, v):
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class LoginRequest(BaseModel):
    """Request DTO for exchanging credentials for a token."""

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @validator("email")
    def normalize_email(cls, v):
        return v.strip().lower()
