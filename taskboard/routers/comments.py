from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import taskboard.config as _cfg
from taskboard.database import get_db
from taskboard.routers.deps import CurrentUser, get_current_user
from taskboard.schemas.auth import MessageOut
from taskboard.schemas.comment import CommentIn, CommentOut
from taskboard.services import comments

router = APIRouter(prefix="/workspaces", tags=["comments"])


@router.post("/tasks/{task_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def create_comment(task_id: str, body: CommentIn, current: CurrentUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    return comments.create(db, task_id, body.content, current.user_id,
                           strict=_cfg.STRICT_COMMENT_MEMBERSHIP)


@router.get("/tasks/{task_id}/comments", response_model=List[CommentOut])
def list_comments(task_id: str, current: CurrentUser = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    return comments.list_for_task(db, task_id, current.user_id, strict=_cfg.STRICT_COMMENT_MEMBERSHIP)


@router.put("/comments/{comment_id}", response_model=CommentOut)
def update_comment(comment_id: str, body: CommentIn, current: CurrentUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    return comments.update(db, comment_id, body.content, current.user_id,
                           strict=_cfg.STRICT_COMMENT_MEMBERSHIP)


@router.delete("/comments/{comment_id}", response_model=MessageOut)
def delete_comment(comment_id: str, current: CurrentUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    comments.delete(db, comment_id, current.user_id, current.role, strict=_cfg.STRICT_COMMENT_MEMBERSHIP)
    return {"message": "Comment deleted successfully"}
