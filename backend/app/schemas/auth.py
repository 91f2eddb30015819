"""
Authentication Pydantic schemas.

Defines request and response schemas for authentication endpoints.
"""

from pydantic import EmailStr, Field
from typing import Optional

from backend.app.schemas.common import CamelModel, UtcDatetime


class UserRegister(CamelModel):
    """Schema for user registration (POST /api/auth/register)."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, max_length=72, description="Password (6-72 characters)")
    name: Optional[str] = Field(default=None, max_length=100, description="Display name")


class UserLogin(CamelModel):
    """Schema for user login (POST /api/auth/login)."""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class TokenResponse(CamelModel):
    """
    Schema for JWT token response.

    Returned by successful login/register operations.
    """
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user_id: int
    email: str
    name: Optional[str] = None


class UserResponse(CamelModel):
    """Schema for GET /api/auth/me."""
    id: int
    email: str
    name: Optional[str] = None
    is_active: bool
    created_at: UtcDatetime
