import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from taskboard.errors import NotFoundError
from taskboard.models.comment import Comment
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.services import membership
from taskboard.utils.validation import optional_text, require_text

logger = logging.getLogger(__name__)


def get_in_workspace(db: Session, workspace_id: str, project_id: str) -> Project:
    project = (
        db.query(Project)
        .filter(Project.id == project_id, Project.workspace_id == workspace_id)
        .first()
    )
    if not project:
        raise NotFoundError("Project not found in this workspace")
    return project


def create(db: Session, user_id: str, workspace_id: str, name, description=None) -> Project:
    name = require_text(name, "Project name is required")
    membership.require_member(db, user_id, workspace_id,
                              "You do not have permission to create projects in this workspace")
    project = Project(
        name=name,
        description=optional_text(description),
        workspace_id=workspace_id,
        created_by=user_id,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def list_for_workspace(db: Session, workspace_id: str, user_id: str) -> list:
    membership.require_member(db, user_id, workspace_id,
                              "You do not have permission to view projects in this workspace")
    return (
        db.query(Project)
        .filter(Project.workspace_id == workspace_id)
        .order_by(Project.created_at.desc())
        .all()
    )


def update(db: Session, workspace_id: str, project_id: str, user_id: str, name, description=None) -> Project:
    name = require_text(name, "Project name is required")
    membership.require_role(db, user_id, workspace_id, membership.OWNER_OR_ADMIN,
                            "You do not have permission to update projects in this workspace")
    project = get_in_workspace(db, workspace_id, project_id)
    project.name = name
    project.description = optional_text(description)
    db.commit()
    db.refresh(project)
    return project


def delete(db: Session, workspace_id: str, project_id: str, user_id: str) -> None:
    """Delete a project together with its tasks and their comments."""
    membership.require_role(db, user_id, workspace_id, membership.OWNER_OR_ADMIN,
                            "You do not have permission to delete projects in this workspace")
    project = get_in_workspace(db, workspace_id, project_id)

    task_ids = select(Task.id).where(Task.project_id == project.id)
    try:
        db.query(Comment).filter(Comment.task_id.in_(task_ids)).delete(synchronize_session=False)
        db.query(Task).filter(Task.project_id == project.id).delete(synchronize_session=False)
        db.delete(project)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("User %s deleted project %s in workspace %s", user_id, project_id, workspace_id)
