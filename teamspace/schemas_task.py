"""
teamspace/schemas_task.py

Pydantic schemas for task endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, validator

from teamspace.models import TaskPriority, TaskStatus


class TaskCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    assigned_to: Optional[str] = Field(None, description="User id of the assignee (must be a member)")
    due_date: Optional[datetime] = None

    @validator("title", pre=True)
    def trim_title(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @validator("assigned_to", pre=True)
    def blank_assignee_is_none(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v


class TaskUpdateRequest(BaseModel):
    """Only the fields sent by the client are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None

    @validator("title", pre=True)
    def trim_title(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @validator("assigned_to", pre=True)
    def blank_assignee_is_none(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v
