from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

from taskboard.models.task import TaskPriority, TaskStatus


def _title_not_empty(v):
    if v is not None and not v.strip():
        raise ValueError("title cannot be empty")
    return v.strip() if v is not None else v


class TaskCreate(BaseModel):
    title: str = Field(..., max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v):
        return _title_not_empty(v)


class TaskUpdate(BaseModel):
    """Partial update: routers forward only the fields the client sent."""
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v):
        return _title_not_empty(v)


class TaskOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None
    project_id: str
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
