"""Workspaces and their membership roster."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskboard.errors import ConflictError, NotFoundError, ValidationError
from taskboard.models.comment import Comment
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.models.workspace import Role, Workspace, WorkspaceMember
from taskboard.services import membership
from taskboard.utils.email import deliver
from taskboard.utils.validation import normalize_email, require_text

logger = logging.getLogger(__name__)


def coerce_role(value) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError("Role must be one of: OWNER, ADMIN, MEMBER")


def _with_role(workspace: Workspace, role: Role) -> dict:
    return {
        "id": workspace.id,
        "name": workspace.name,
        "owner_id": workspace.owner_id,
        "created_at": workspace.created_at,
        "role": role,
    }


def _member_view(member: WorkspaceMember) -> dict:
    return {
        "id": member.id,
        "user_id": member.user_id,
        "role": member.role,
        "user": {"id": member.user.id, "email": member.user.email, "name": member.user.name},
    }


def create(db: Session, user_id: str, name) -> Workspace:
    """Create a workspace with ``user_id`` as its OWNER member.

    Both rows are committed together; a workspace never exists without an owner.
    """
    name = require_text(name, "Workspace name is required")
    workspace = Workspace(
        name=name,
        owner_id=user_id,
        members=[WorkspaceMember(user_id=user_id, role=Role.OWNER)],
    )
    db.add(workspace)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(workspace)
    logger.info("User %s created workspace %s", user_id, workspace.id)
    return workspace


def list_for_user(db: Session, user_id: str) -> list:
    memberships = (
        db.query(WorkspaceMember)
        .filter(WorkspaceMember.user_id == user_id)
        .join(WorkspaceMember.workspace)
        .order_by(Workspace.created_at.desc())
        .all()
    )
    return [_with_role(m.workspace, m.role) for m in memberships]


def get(db: Session, workspace_id: str, user_id: str) -> dict:
    member = membership.require_member(db, user_id, workspace_id,
                                       "You do not have access to this workspace")
    return _with_role(member.workspace, member.role)


def update(db: Session, workspace_id: str, user_id: str, name) -> Workspace:
    name = require_text(name, "Workspace name is required")
    member = membership.require_role(db, user_id, workspace_id, membership.OWNER_OR_ADMIN,
                                     "You do not have permission to update this workspace")
    workspace = member.workspace
    workspace.name = name
    db.commit()
    db.refresh(workspace)
    return workspace


def delete(db: Session, workspace_id: str, user_id: str) -> None:
    """Delete a workspace and everything beneath it. OWNER only."""
    membership.require_role(db, user_id, workspace_id, membership.OWNER_ONLY,
                            "Only the workspace owner can delete the workspace")

    project_ids = select(Project.id).where(Project.workspace_id == workspace_id)
    task_ids = select(Task.id).where(Task.project_id.in_(project_ids))
    try:
        db.query(Comment).filter(Comment.task_id.in_(task_ids)).delete(synchronize_session=False)
        db.query(Task).filter(Task.project_id.in_(project_ids)).delete(synchronize_session=False)
        db.query(Project).filter(Project.workspace_id == workspace_id).delete(synchronize_session=False)
        # members before the workspace row, for the foreign key
        db.query(WorkspaceMember).filter(WorkspaceMember.workspace_id == workspace_id).delete(synchronize_session=False)
        db.query(Workspace).filter(Workspace.id == workspace_id).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.expire_all()
    logger.info("User %s deleted workspace %s", user_id, workspace_id)


def list_members(db: Session, workspace_id: str, user_id: str) -> list:
    membership.require_member(db, user_id, workspace_id,
                              "You do not have access to this workspace")
    members = db.query(WorkspaceMember).filter(WorkspaceMember.workspace_id == workspace_id).all()
    return [_member_view(m) for m in members]


def invite(db: Session, workspace_id: str, inviter_id: str, email, role=Role.MEMBER,
           email_sender=None, background=None) -> dict:
    """Add the user registered under ``email`` to the workspace.

    Any role may be granted, including OWNER; the only gate is that the
    inviter is an OWNER or ADMIN.
    """
    if not isinstance(email, str) or not email.strip():
        raise ValidationError("Email is required to invite a member")
    role = coerce_role(role if role is not None else Role.MEMBER)

    inviter = membership.require_role(db, inviter_id, workspace_id, membership.OWNER_OR_ADMIN,
                                      "You do not have permission to invite members to this workspace")

    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user:
        raise NotFoundError("User not found with this email")
    if membership.resolve(db, user.id, workspace_id):
        raise ConflictError("User is already a member of this workspace")

    member = WorkspaceMember(workspace_id=workspace_id, user_id=user.id, role=role)
    db.add(member)
    try:
        db.commit()
    except IntegrityError:
        # concurrent invite of the same user won the race
        db.rollback()
        raise ConflictError("User is already a member of this workspace")
    db.refresh(member)
    logger.info("User %s invited %s to workspace %s as %s", inviter_id, user.id, workspace_id, role.value)

    if email_sender is not None:
        inviter_user = inviter.user
        deliver(background, email_sender.send_workspace_invitation, user.email,
                inviter.workspace.name, inviter_user.name or inviter_user.email)
    return _member_view(member)


def remove_member(db: Session, workspace_id: str, remover_id: str, member_user_id: str) -> None:
    membership.require_role(db, remover_id, workspace_id, membership.OWNER_OR_ADMIN,
                            "You do not have permission to remove members from this workspace")
    target = membership.resolve(db, member_user_id, workspace_id)
    if not target:
        raise NotFoundError("Member not found in this workspace")
    db.delete(target)
    db.commit()
    logger.info("User %s removed %s from workspace %s", remover_id, member_user_id, workspace_id)


def update_member_role(db: Session, workspace_id: str, updater_id: str, member_user_id: str, new_role) -> dict:
    new_role = coerce_role(new_role)
    membership.require_role(db, updater_id, workspace_id, membership.OWNER_ONLY,
                            "Only the workspace owner can update member roles")
    target = membership.resolve(db, member_user_id, workspace_id)
    if not target:
        raise NotFoundError("Member not found in this workspace")
    target.role = new_role
    db.commit()
    db.refresh(target)
    logger.info("User %s set role of %s in workspace %s to %s",
                updater_id, member_user_id, workspace_id, new_role.value)
    return _member_view(target)
