from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum

# Enums
class ProviderName(str, Enum):
    GOOGLE = "GOOGLE"
    FACEBOOK = "FACEBOOK"
    GITHUB = "GITHUB"
    EMAIL = "EMAIL"

class TaskStatus(str, Enum):
    BACKLOG = "BACKLOG"
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    IN_REVIEW = "IN_REVIEW"
    DONE = "DONE"

class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

# Models (rows as returned to clients; secrets are never part of them)
class User(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    profile_picture: Optional[str] = None
    is_active: bool = True
    last_login: Optional[str] = None
    current_workspace_id: Optional[str] = None
    created_at: str
    updated_at: str

class Account(BaseModel):
    id: str
    user_id: str
    provider: ProviderName
    provider_id: str
    created_at: str

class Role(BaseModel):
    id: str
    name: str
    permissions: List[str] = Field(default_factory=list)

class Workspace(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    owner_id: str
    invite_code: str
    created_at: str
    updated_at: str

class Member(BaseModel):
    id: str
    user_id: str
    workspace_id: str
    role_id: str
    role_name: Optional[str] = None
    joined_at: str

class Project(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    emoji: str = "📊"
    workspace_id: str
    created_by: str
    created_at: str
    updated_at: str

class Task(BaseModel):
    id: str
    task_code: str
    title: str
    description: Optional[str] = None
    project_id: str
    workspace_id: str
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    assigned_to: Optional[str] = None
    created_by: str
    due_date: Optional[str] = None
    created_at: str
    updated_at: str
