"""
teamspace/schemas_workspace.py

Pydantic schemas for workspace endpoints.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, validator


class WorkspaceCreateRequest(BaseModel):
    """Request schema for creating a workspace; name is required and trimmed."""
    name: str = Field(..., min_length=1, max_length=255, description="Workspace name (required, 1-255 chars)")
    description: Optional[str] = Field(None, max_length=2000, description="Workspace description")

    @validator("name", "description", pre=True)
    def trim(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class WorkspaceUpdateRequest(BaseModel):
    """Blank or missing fields leave the stored value unchanged."""
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)

    @validator("name", "description", pre=True)
    def trim(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class ChangeRoleRequest(BaseModel):
    member_id: str = Field(..., min_length=1, description="User id of the member whose role changes")
    role_id: str = Field(..., min_length=1, description="Id of the role to assign")
