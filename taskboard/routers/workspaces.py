from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from taskboard.database import get_db
from taskboard.routers.deps import CurrentUser, get_current_user, get_email_sender
from taskboard.schemas.auth import MessageOut
from taskboard.schemas.workspace import (
    InviteRequest, MemberOut, RoleUpdate, WorkspaceIn, WorkspaceOut, WorkspaceWithRole,
)
from taskboard.services import workspaces
from taskboard.utils.email import EmailSender

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.post("/", response_model=WorkspaceOut, status_code=status.HTTP_201_CREATED)
def create_workspace(body: WorkspaceIn, current: CurrentUser = Depends(get_current_user),
                     db: Session = Depends(get_db)):
    return workspaces.create(db, current.user_id, body.name)


@router.get("/", response_model=List[WorkspaceWithRole])
def list_workspaces(current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return workspaces.list_for_user(db, current.user_id)


@router.get("/{workspace_id}", response_model=WorkspaceWithRole)
def get_workspace(workspace_id: str, current: CurrentUser = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    return workspaces.get(db, workspace_id, current.user_id)


@router.put("/{workspace_id}", response_model=WorkspaceOut)
def update_workspace(workspace_id: str, body: WorkspaceIn, current: CurrentUser = Depends(get_current_user),
                     db: Session = Depends(get_db)):
    return workspaces.update(db, workspace_id, current.user_id, body.name)


@router.delete("/{workspace_id}", response_model=MessageOut)
def delete_workspace(workspace_id: str, current: CurrentUser = Depends(get_current_user),
                     db: Session = Depends(get_db)):
    workspaces.delete(db, workspace_id, current.user_id)
    return {"message": "Workspace deleted successfully"}


@router.get("/{workspace_id}/members", response_model=List[MemberOut])
def list_members(workspace_id: str, current: CurrentUser = Depends(get_current_user),
                 db: Session = Depends(get_db)):
    return workspaces.list_members(db, workspace_id, current.user_id)


@router.post("/{workspace_id}/members", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def invite_member(workspace_id: str, body: InviteRequest, background: BackgroundTasks,
                  current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db),
                  sender: EmailSender = Depends(get_email_sender)):
    return workspaces.invite(db, workspace_id, current.user_id, body.email, body.role,
                             email_sender=sender, background=background)


@router.delete("/{workspace_id}/members/{member_id}", response_model=MessageOut)
def remove_member(workspace_id: str, member_id: str, current: CurrentUser = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    workspaces.remove_member(db, workspace_id, current.user_id, member_id)
    return {"message": "Member removed successfully"}


@router.put("/{workspace_id}/members/{member_id}/role", response_model=MemberOut)
def update_member_role(workspace_id: str, member_id: str, body: RoleUpdate,
                       current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return workspaces.update_member_role(db, workspace_id, current.user_id, member_id, body.role)
