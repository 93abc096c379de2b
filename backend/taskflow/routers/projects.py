from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from taskflow import models
from taskflow.db import get_db
from taskflow.routers.auth import get_current_user
from taskflow.schemas import (
    AddMemberRequest,
    ProjectCreate,
    ProjectListResponse,
    ProjectMemberResponse,
    ProjectResponse,
    ProjectUpdate,
)
from taskflow.services import project_service

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> ProjectResponse:
    """Create a project; the caller becomes its OWNER member."""
    return project_service.create_project(db, payload, current_user)


@router.get("", response_model=list[ProjectListResponse])
def list_projects(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> list[ProjectListResponse]:
    """Projects the caller is a member of, newest first."""
    return project_service.list_user_projects(db, current_user)


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> ProjectResponse:
    return project_service.get_project(db, project_id, current_user)


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> ProjectResponse:
    """
    Partial update, owner only.

    - **name**: applied when present (2-100 characters)
    - **description**: applied when present
    """
    return project_service.update_project(db, project_id, payload, current_user)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> Response:
    """Delete the project together with its memberships and tasks (owner only)."""
    project_service.delete_project(db, project_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{project_id}/members",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_member(
    project_id: int,
    payload: AddMemberRequest,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> ProjectResponse:
    return project_service.add_member(db, project_id, payload, current_user)


@router.delete("/{project_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    project_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> Response:
    project_service.remove_member(db, project_id, user_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{project_id}/members", response_model=list[ProjectMemberResponse])
def list_members(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> list[ProjectMemberResponse]:
    return project_service.list_members(db, project_id, current_user)
