"""
teamspace/schemas_auth.py

Pydantic schemas for registration and login.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, validator


class RegisterRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=4, max_length=255, description="Password (min 4 chars)")

    @validator("email", pre=True)
    def normalize_email(cls, v):
        """Trim and lower-case the email before format validation."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @validator("name", pre=True)
    def trim_name(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)

    @validator("email", pre=True)
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v
