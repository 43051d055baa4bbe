from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

from taskboard.models.workspace import Role


class WorkspaceIn(BaseModel):
    name: str = Field(..., max_length=100)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v):
        if not v.strip():
            raise ValueError("workspace name cannot be empty")
        return v.strip()


class WorkspaceOut(BaseModel):
    id: str
    name: str
    owner_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WorkspaceWithRole(WorkspaceOut):
    role: Role


class MemberUser(BaseModel):
    id: str
    email: str
    name: Optional[str] = None


class MemberOut(BaseModel):
    id: str
    user_id: str
    role: Role
    user: MemberUser


class InviteRequest(BaseModel):
    email: str
    role: Role = Role.MEMBER


class RoleUpdate(BaseModel):
    role: Role
