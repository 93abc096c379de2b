from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from taskflow import models
from taskflow.core.exceptions import raise_not_found
from taskflow.core.logging import get_logger
from taskflow.schemas import (
    PageResponse,
    ProjectRef,
    TaskCreate,
    TaskListResponse,
    TaskPriority,
    TaskResponse,
    TaskStatus,
    TaskUpdate,
    UserSummary,
)
from taskflow.services.access import (
    ensure_assignable,
    ensure_project_access,
    get_project_or_404,
)
from taskflow.services.task_queries import (
    PageRequest,
    TaskFilter,
    build_page_request,
    fetch_all,
    fetch_page,
)
from taskflow.services.validation import validate_task_create, validate_task_update
from taskflow.time_utils import is_overdue, utc_now

logger = get_logger(__name__)

OVERDUE_SORT = build_page_request(sort_by="deadline", sort_dir="asc")


def get_task_or_404(db: Session, task_id: int) -> models.Task:
    task = db.get(models.Task, task_id)
    if task is None:
        raise_not_found("Task", task_id)
    return task


def build_task_response(db: Session, task: models.Task) -> TaskResponse:
    project = db.get(models.Project, task.project_id)
    assignee = db.get(models.User, task.assignee_id) if task.assignee_id is not None else None
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        deadline=task.deadline,
        is_overdue=is_overdue(task.deadline, task.status),
        project=ProjectRef(id=project.id, name=project.name),
        assignee=UserSummary.model_validate(assignee) if assignee is not None else None,
        completed_at=task.completed_at,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def _apply_status(task: models.Task, status: TaskStatus) -> None:
    if status == TaskStatus.DONE and task.status != TaskStatus.DONE:
        task.completed_at = utc_now()
    elif status != TaskStatus.DONE:
        task.completed_at = None
    task.status = status


def _load_accessible_task(db: Session, task_id: int, current_user: models.User) -> models.Task:
    task = get_task_or_404(db, task_id)
    ensure_project_access(db, current_user, task.project_id)
    return task


# --- CRUD -------------------------------------------------------------------


def create_task(
    db: Session, project_id: int, payload: TaskCreate, current_user: models.User
) -> TaskResponse:
    validate_task_create(payload)
    project = get_project_or_404(db, project_id)
    ensure_project_access(db, current_user, project.id)
    if payload.assignee_id is not None:
        ensure_assignable(db, project.id, payload.assignee_id)

    status = payload.status or TaskStatus.TODO
    task = models.Task(
        title=payload.title.strip(),
        description=payload.description,
        status=status,
        priority=payload.priority or TaskPriority.MEDIUM,
        deadline=payload.deadline,
        project_id=project.id,
        assignee_id=payload.assignee_id,
        completed_at=utc_now() if status == TaskStatus.DONE else None,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("task_created", task_id=task.id, project_id=project.id, user_id=current_user.id)
    return build_task_response(db, task)


def get_task(db: Session, task_id: int, current_user: models.User) -> TaskResponse:
    task = _load_accessible_task(db, task_id, current_user)
    return build_task_response(db, task)


def update_task(
    db: Session, task_id: int, payload: TaskUpdate, current_user: models.User
) -> TaskResponse:
    """Apply only the fields that are present and non-null."""
    validate_task_update(payload)
    task = _load_accessible_task(db, task_id, current_user)
    if payload.assignee_id is not None:
        ensure_assignable(db, task.project_id, payload.assignee_id)

    if payload.title is not None:
        task.title = payload.title.strip()
    if payload.description is not None:
        task.description = payload.description
    if payload.status is not None:
        _apply_status(task, payload.status)
    if payload.priority is not None:
        task.priority = payload.priority
    if payload.deadline is not None:
        task.deadline = payload.deadline
    if payload.assignee_id is not None:
        task.assignee_id = payload.assignee_id

    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("task_updated", task_id=task.id, user_id=current_user.id)
    return build_task_response(db, task)


def delete_task(db: Session, task_id: int, current_user: models.User) -> None:
    task = _load_accessible_task(db, task_id, current_user)
    db.delete(task)
    db.commit()
    logger.info("task_deleted", task_id=task_id, user_id=current_user.id)


def assign_task(db: Session, task_id: int, assignee_id: int, current_user: models.User) -> TaskResponse:
    task = _load_accessible_task(db, task_id, current_user)
    ensure_assignable(db, task.project_id, assignee_id)
    task.assignee_id = assignee_id
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("task_assigned", task_id=task.id, assignee_id=assignee_id, user_id=current_user.id)
    return build_task_response(db, task)


# --- Listings ----------------------------------------------------------------


def _project_filter(
    db: Session,
    project_id: int,
    current_user: models.User,
    *,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    overdue_only: bool = False,
) -> TaskFilter:
    project = get_project_or_404(db, project_id)
    ensure_project_access(db, current_user, project.id)
    return TaskFilter(
        project_id=project.id, status=status, priority=priority, overdue_only=overdue_only
    )


def list_project_tasks(
    db: Session,
    project_id: int,
    current_user: models.User,
    page_request: Optional[PageRequest] = None,
    *,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
) -> list[TaskListResponse]:
    flt = _project_filter(db, project_id, current_user, status=status, priority=priority)
    return fetch_all(db, flt, page_request or build_page_request())


def page_project_tasks(
    db: Session,
    project_id: int,
    current_user: models.User,
    page_request: PageRequest,
    *,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
) -> PageResponse[TaskListResponse]:
    flt = _project_filter(db, project_id, current_user, status=status, priority=priority)
    return fetch_page(db, flt, page_request)


def list_overdue_tasks(
    db: Session, project_id: int, current_user: models.User
) -> list[TaskListResponse]:
    """Overdue tasks of one project, earliest deadline first."""
    flt = _project_filter(db, project_id, current_user, overdue_only=True)
    return fetch_all(db, flt, OVERDUE_SORT)


def page_overdue_tasks(
    db: Session, project_id: int, current_user: models.User, page_request: PageRequest
) -> PageResponse[TaskListResponse]:
    flt = _project_filter(db, project_id, current_user, overdue_only=True)
    return fetch_page(db, flt, page_request)


def list_my_tasks(
    db: Session, current_user: models.User, page_request: Optional[PageRequest] = None
) -> list[TaskListResponse]:
    """Every task in the projects the caller is a member of."""
    flt = TaskFilter(member_user_id=current_user.id)
    return fetch_all(db, flt, page_request or build_page_request())


def page_my_tasks(
    db: Session, current_user: models.User, page_request: PageRequest
) -> PageResponse[TaskListResponse]:
    return fetch_page(db, TaskFilter(member_user_id=current_user.id), page_request)


def search_tasks(
    db: Session,
    current_user: models.User,
    page_request: PageRequest,
    *,
    keyword: Optional[str] = None,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    assignee_id: Optional[int] = None,
    project_id: Optional[int] = None,
) -> PageResponse[TaskListResponse]:
    """
    Search across every project the caller belongs to.

    A ``project_id`` the caller is not a member of yields an empty page rather
    than an error, since the membership restriction is part of the filter.
    """
    flt = TaskFilter(
        member_user_id=current_user.id,
        project_id=project_id,
        status=status,
        priority=priority,
        assignee_id=assignee_id,
        keyword=keyword,
    )
    return fetch_page(db, flt, page_request)
