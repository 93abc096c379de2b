from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from taskflow import models
from taskflow.db import get_db
from taskflow.routers.auth import get_current_user
from taskflow.schemas import (
    PageResponse,
    TaskCreate,
    TaskListResponse,
    TaskPriority,
    TaskResponse,
    TaskStatus,
    TaskUpdate,
)
from taskflow.services import task_service
from taskflow.services.task_queries import DEFAULT_PAGE_SIZE, PageRequest, build_page_request

router = APIRouter(prefix="/api", tags=["tasks"])


def page_params(
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, description="Clamped to 100"),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_dir: str = Query("desc", alias="sortDir"),
) -> PageRequest:
    return build_page_request(page, size, sort_by, sort_dir)


def overdue_page_params(
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, description="Clamped to 100"),
    sort_by: str = Query("deadline", alias="sortBy"),
    sort_dir: str = Query("asc", alias="sortDir"),
) -> PageRequest:
    return build_page_request(page, size, sort_by, sort_dir)


# --- Cross-project listings (declared before /tasks/{task_id}) ---------------


@router.get("/tasks/my-tasks", response_model=list[TaskListResponse])
def get_my_tasks(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> list[TaskListResponse]:
    return task_service.list_my_tasks(db, current_user)


@router.get("/tasks/my-tasks/paged", response_model=PageResponse[TaskListResponse])
def get_my_tasks_paged(
    page_request: PageRequest = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> PageResponse[TaskListResponse]:
    return task_service.page_my_tasks(db, current_user, page_request)


@router.get("/tasks/search", response_model=PageResponse[TaskListResponse])
def search_tasks(
    keyword: Optional[str] = Query(None),
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = Query(None),
    assignee_id: Optional[int] = Query(None, alias="assigneeId"),
    project_id: Optional[int] = Query(None, alias="projectId"),
    page_request: PageRequest = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> PageResponse[TaskListResponse]:
    """
    Search tasks across the caller's projects.

    - **keyword**: case-insensitive match on title or description
    - **status**, **priority**, **assigneeId**, **projectId**: optional filters
    - **page**, **size**, **sortBy**, **sortDir**: paging
    """
    return task_service.search_tasks(
        db,
        current_user,
        page_request,
        keyword=keyword,
        status=task_status,
        priority=priority,
        assignee_id=assignee_id,
        project_id=project_id,
    )


# --- Task CRUD ---------------------------------------------------------------


@router.post(
    "/projects/{project_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_task(
    project_id: int,
    payload: TaskCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> TaskResponse:
    return task_service.create_task(db, project_id, payload, current_user)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> TaskResponse:
    return task_service.get_task(db, task_id, current_user)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> TaskResponse:
    """Partial update; absent and null fields are left unchanged."""
    return task_service.update_task(db, task_id, payload, current_user)


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> Response:
    task_service.delete_task(db, task_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/tasks/{task_id}/assign/{assignee_id}", response_model=TaskResponse)
def assign_task(
    task_id: int,
    assignee_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> TaskResponse:
    return task_service.assign_task(db, task_id, assignee_id, current_user)


# --- Project task listings ---------------------------------------------------


@router.get("/projects/{project_id}/tasks", response_model=list[TaskListResponse])
def get_project_tasks(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> list[TaskListResponse]:
    return task_service.list_project_tasks(db, project_id, current_user)


@router.get("/projects/{project_id}/tasks/paged", response_model=PageResponse[TaskListResponse])
def get_project_tasks_paged(
    project_id: int,
    page_request: PageRequest = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> PageResponse[TaskListResponse]:
    return task_service.page_project_tasks(db, project_id, current_user, page_request)


@router.get("/projects/{project_id}/tasks/status/{task_status}", response_model=list[TaskListResponse])
def get_tasks_by_status(
    project_id: int,
    task_status: TaskStatus,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> list[TaskListResponse]:
    return task_service.list_project_tasks(db, project_id, current_user, status=task_status)


@router.get(
    "/projects/{project_id}/tasks/status/{task_status}/paged",
    response_model=PageResponse[TaskListResponse],
)
def get_tasks_by_status_paged(
    project_id: int,
    task_status: TaskStatus,
    page_request: PageRequest = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> PageResponse[TaskListResponse]:
    return task_service.page_project_tasks(
        db, project_id, current_user, page_request, status=task_status
    )


@router.get("/projects/{project_id}/tasks/priority/{priority}", response_model=list[TaskListResponse])
def get_tasks_by_priority(
    project_id: int,
    priority: TaskPriority,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> list[TaskListResponse]:
    return task_service.list_project_tasks(db, project_id, current_user, priority=priority)


@router.get(
    "/projects/{project_id}/tasks/priority/{priority}/paged",
    response_model=PageResponse[TaskListResponse],
)
def get_tasks_by_priority_paged(
    project_id: int,
    priority: TaskPriority,
    page_request: PageRequest = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> PageResponse[TaskListResponse]:
    return task_service.page_project_tasks(
        db, project_id, current_user, page_request, priority=priority
    )


@router.get("/projects/{project_id}/tasks/overdue", response_model=list[TaskListResponse])
def get_overdue_tasks(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> list[TaskListResponse]:
    return task_service.list_overdue_tasks(db, project_id, current_user)


@router.get(
    "/projects/{project_id}/tasks/overdue/paged",
    response_model=PageResponse[TaskListResponse],
)
def get_overdue_tasks_paged(
    project_id: int,
    page_request: PageRequest = Depends(overdue_page_params),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> PageResponse[TaskListResponse]:
    return task_service.page_overdue_tasks(db, project_id, current_user, page_request)
