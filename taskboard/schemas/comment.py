from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class CommentIn(BaseModel):
    content: str = Field(..., max_length=5000)


class CommentOut(BaseModel):
    id: str
    task_id: str
    content: str
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
