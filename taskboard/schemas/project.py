from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional


class ProjectIn(BaseModel):
    name: str = Field(..., max_length=100)
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v):
        if not v.strip():
            raise ValueError("project name cannot be empty")
        return v.strip()


class ProjectOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    workspace_id: str
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
