"""
teamspace/schemas_project.py

Pydantic schemas for project endpoints.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, validator


class ProjectCreateRequest(BaseModel):
    emoji: Optional[str] = Field(None, max_length=16)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)

    @validator("name", "description", "emoji", pre=True)
    def trim(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class ProjectUpdateRequest(BaseModel):
    """Blank or missing fields leave the stored value unchanged."""
    emoji: Optional[str] = Field(None, max_length=16)
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)

    @validator("name", "description", "emoji", pre=True)
    def trim(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v
