from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from taskboard.database import get_db
from taskboard.models.task import TaskPriority, TaskStatus
from taskboard.routers.deps import CurrentUser, get_current_user
from taskboard.schemas.auth import MessageOut
from taskboard.schemas.task import TaskCreate, TaskOut, TaskUpdate
from taskboard.services import tasks

router = APIRouter(prefix="/workspaces/{workspace_id}/projects/{project_id}/tasks", tags=["tasks"])


@router.post("/", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(workspace_id: str, project_id: str, body: TaskCreate,
                current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return tasks.create(db, current.user_id, workspace_id, project_id, body.model_dump())


@router.get("/", response_model=List[TaskOut])
def list_tasks(workspace_id: str, project_id: str,
               task_status: Optional[TaskStatus] = Query(None, alias="status"),
               priority: Optional[TaskPriority] = Query(None),
               assigned_to: Optional[str] = Query(None),
               current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return tasks.list_for_project(db, workspace_id, project_id, current.user_id,
                                  status=task_status, priority=priority, assigned_to=assigned_to)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(workspace_id: str, project_id: str, task_id: str,
             current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return tasks.get(db, workspace_id, project_id, task_id, current.user_id)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(workspace_id: str, project_id: str, task_id: str, body: TaskUpdate,
                current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    # exclude_unset keeps "not sent" apart from an explicit null
    return tasks.update(db, workspace_id, project_id, task_id, current.user_id,
                        body.model_dump(exclude_unset=True))


@router.delete("/{task_id}", response_model=MessageOut)
def delete_task(workspace_id: str, project_id: str, task_id: str,
                current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    tasks.delete(db, workspace_id, project_id, task_id, current.user_id)
    return {"message": "Task deleted successfully"}
