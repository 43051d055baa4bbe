"""Comments on tasks.

By default this layer performs no workspace-membership check of its own: the
caller is trusted to have passed route-level authentication, and
``caller_role`` for deletion comes from the request context. With
``strict=True`` each operation re-derives the caller's membership from the
task's project's workspace and uses that role instead.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskboard.errors import AuthorizationError, NotFoundError
from taskboard.models.comment import Comment
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.workspace import Role, WorkspaceMember
from taskboard.services import membership
from taskboard.utils.validation import require_text

logger = logging.getLogger(__name__)

ELEVATED_ROLES = frozenset({Role.OWNER.value, Role.ADMIN.value})


def _membership_for_task(db: Session, task_id: str, user_id: str) -> WorkspaceMember:
    row = (
        db.query(Task, Project)
        .join(Project, Task.project_id == Project.id)
        .filter(Task.id == task_id)
        .first()
    )
    if not row:
        raise NotFoundError("Task not found")
    _, project = row
    return membership.require_member(db, user_id, project.workspace_id,
                                     "You are not a member of this task's workspace")


def _get(db: Session, comment_id: str) -> Comment:
    comment = db.get(Comment, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")
    return comment


def create(db: Session, task_id: str, content, user_id: str, strict: bool = False) -> Comment:
    content = require_text(content, "Content is required")
    if strict:
        _membership_for_task(db, task_id, user_id)
    elif db.get(Task, task_id) is None:
        raise NotFoundError("Task not found")

    comment = Comment(task_id=task_id, content=content, created_by=user_id)
    db.add(comment)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    db.refresh(comment)
    return comment


def list_for_task(db: Session, task_id: str, user_id: Optional[str] = None, strict: bool = False) -> list:
    if strict:
        _membership_for_task(db, task_id, user_id)
    return (
        db.query(Comment)
        .filter(Comment.task_id == task_id)
        .order_by(Comment.created_at.asc())
        .all()
    )


def update(db: Session, comment_id: str, content, user_id: str, strict: bool = False) -> Comment:
    comment = _get(db, comment_id)
    if strict:
        _membership_for_task(db, comment.task_id, user_id)
    # author only; an elevated role does not allow editing someone else's words
    if comment.created_by != user_id:
        raise AuthorizationError("Unauthorized: You can only update your own comments")
    comment.content = require_text(content, "Content is required")
    db.commit()
    db.refresh(comment)
    return comment


def delete(db: Session, comment_id: str, user_id: str, caller_role=None, strict: bool = False) -> None:
    comment = _get(db, comment_id)
    if strict:
        caller_role = _membership_for_task(db, comment.task_id, user_id).role

    role = caller_role.value if isinstance(caller_role, Role) else caller_role
    if comment.created_by != user_id and role not in ELEVATED_ROLES:
        raise AuthorizationError("Unauthorized: You can only delete your own comments")

    db.delete(comment)
    db.commit()
    logger.info("User %s deleted comment %s", user_id, comment_id)
