from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from taskboard.database import get_db
from taskboard.routers.deps import CurrentUser, get_current_user
from taskboard.schemas.auth import MessageOut
from taskboard.schemas.project import ProjectIn, ProjectOut
from taskboard.services import projects

router = APIRouter(prefix="/workspaces/{workspace_id}/projects", tags=["projects"])


@router.post("/", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(workspace_id: str, body: ProjectIn, current: CurrentUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    return projects.create(db, current.user_id, workspace_id, body.name, body.description)


@router.get("/", response_model=List[ProjectOut])
def list_projects(workspace_id: str, current: CurrentUser = Depends(get_current_user),
                  db: Session = Depends(get_db)):
    return projects.list_for_workspace(db, workspace_id, current.user_id)


@router.put("/{project_id}", response_model=ProjectOut)
def update_project(workspace_id: str, project_id: str, body: ProjectIn,
                   current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return projects.update(db, workspace_id, project_id, current.user_id, body.name, body.description)


@router.delete("/{project_id}", response_model=MessageOut)
def delete_project(workspace_id: str, project_id: str, current: CurrentUser = Depends(get_current_user),
                   db: Session = Depends(get_db)):
    projects.delete(db, workspace_id, project_id, current.user_id)
    return {"message": "Project deleted successfully"}
