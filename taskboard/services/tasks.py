"""Tasks inside a workspace's projects.

Any member may create, list and update any task. Deletion is limited to the
task's creator or an OWNER/ADMIN of the workspace.
"""

import logging
from datetime import datetime, date, UTC

from sqlalchemy.orm import Session

from taskboard.errors import AuthorizationError, NotFoundError, ValidationError
from taskboard.models.comment import Comment
from taskboard.models.task import Task, TaskPriority, TaskStatus
from taskboard.services import membership
from taskboard.services.projects import get_in_workspace
from taskboard.utils.validation import optional_text, require_text

logger = logging.getLogger(__name__)


def _coerce_status(value) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationError("Status must be one of: TODO, IN_PROGRESS, DONE")


def _coerce_priority(value) -> TaskPriority:
    try:
        return TaskPriority(value)
    except ValueError:
        raise ValidationError("Priority must be one of: LOW, MEDIUM, HIGH")


def parse_due_date(value):
    """Accept a datetime, a date or an ISO-8601 string; store naive UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise ValidationError("Due date must be a valid date")
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if not isinstance(value, datetime):
        raise ValidationError("Due date must be a valid date")
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


def _check_assignee(db: Session, workspace_id: str, assigned_to) -> None:
    if not membership.resolve(db, assigned_to, workspace_id):
        raise ValidationError("Assigned user is not a member of this workspace")


def _get_in_project(db: Session, project_id: str, task_id: str) -> Task:
    task = db.query(Task).filter(Task.id == task_id, Task.project_id == project_id).first()
    if not task:
        raise NotFoundError("Task not found in this project")
    return task


def create(db: Session, user_id: str, workspace_id: str, project_id: str, data: dict) -> Task:
    title = require_text(data.get("title"), "Task title is required")
    membership.require_member(db, user_id, workspace_id,
                              "You do not have permission to create tasks in this workspace")
    get_in_workspace(db, workspace_id, project_id)

    assigned_to = data.get("assigned_to") or None
    if assigned_to:
        _check_assignee(db, workspace_id, assigned_to)

    task = Task(
        title=title,
        description=optional_text(data.get("description")),
        status=_coerce_status(data.get("status") or TaskStatus.TODO),
        priority=_coerce_priority(data.get("priority") or TaskPriority.MEDIUM),
        due_date=parse_due_date(data.get("due_date")),
        assigned_to=assigned_to,
        project_id=project_id,
        created_by=user_id,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def list_for_project(db: Session, workspace_id: str, project_id: str, user_id: str,
                     status=None, priority=None, assigned_to=None) -> list:
    membership.require_member(db, user_id, workspace_id,
                              "You do not have permission to view tasks in this workspace")
    get_in_workspace(db, workspace_id, project_id)

    query = db.query(Task).filter(Task.project_id == project_id)
    if status:
        query = query.filter(Task.status == _coerce_status(status))
    if priority:
        query = query.filter(Task.priority == _coerce_priority(priority))
    if assigned_to:
        query = query.filter(Task.assigned_to == assigned_to)
    return query.order_by(Task.created_at.desc()).all()


def get(db: Session, workspace_id: str, project_id: str, task_id: str, user_id: str) -> Task:
    membership.require_member(db, user_id, workspace_id,
                              "You do not have permission to view tasks in this workspace")
    get_in_workspace(db, workspace_id, project_id)
    return _get_in_project(db, project_id, task_id)


def update(db: Session, workspace_id: str, project_id: str, task_id: str, user_id: str, fields: dict) -> Task:
    """Apply a partial update.

    Only keys present in ``fields`` are touched. An explicit None clears
    ``description``, ``due_date`` and ``assigned_to``.
    """
    if fields.get("title") is not None:
        require_text(fields["title"], "Task title cannot be empty")

    membership.require_member(db, user_id, workspace_id,
                              "You do not have permission to update tasks in this workspace")
    get_in_workspace(db, workspace_id, project_id)
    task = _get_in_project(db, project_id, task_id)

    if fields.get("assigned_to"):
        _check_assignee(db, workspace_id, fields["assigned_to"])

    if fields.get("title") is not None:
        task.title = fields["title"].strip()
    if "description" in fields:
        task.description = optional_text(fields["description"])
    if fields.get("status"):
        task.status = _coerce_status(fields["status"])
    if fields.get("priority"):
        task.priority = _coerce_priority(fields["priority"])
    if "due_date" in fields:
        task.due_date = parse_due_date(fields["due_date"])
    if "assigned_to" in fields:
        task.assigned_to = fields["assigned_to"] or None

    db.commit()
    db.refresh(task)
    return task


def delete(db: Session, workspace_id: str, project_id: str, task_id: str, user_id: str) -> None:
    member = membership.require_member(db, user_id, workspace_id,
                                       "You do not have permission to delete tasks in this workspace")
    get_in_workspace(db, workspace_id, project_id)
    task = _get_in_project(db, project_id, task_id)

    if task.created_by != user_id and not membership.is_elevated(member):
        raise AuthorizationError("You do not have permission to delete this task")

    try:
        db.query(Comment).filter(Comment.task_id == task.id).delete(synchronize_session=False)
        db.delete(task)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("User %s deleted task %s", user_id, task_id)
