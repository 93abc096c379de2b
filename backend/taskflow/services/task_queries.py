"""
Task listing: filters, sorting and page envelopes.

Every listing (paged or not) goes through ``TaskFilter`` so that the plain and
``/paged`` endpoints share exactly the same filtering and authorization.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Query, Session

from taskflow import models
from taskflow.schemas import PageResponse, TaskListResponse, TaskPriority, TaskStatus
from taskflow.time_utils import is_overdue, utc_now

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# Keeps page * size within a signed 64-bit OFFSET
MAX_PAGE_INDEX = (2**63 - 1) // MAX_PAGE_SIZE
DEFAULT_SORT_FIELD = "createdAt"

SORTABLE_FIELDS = {
    "id": models.Task.id,
    "title": models.Task.title,
    "status": models.Task.status,
    "priority": models.Task.priority,
    "deadline": models.Task.deadline,
    "createdAt": models.Task.created_at,
    "updatedAt": models.Task.updated_at,
}


@dataclass(frozen=True)
class PageRequest:
    page: int = 0
    size: int = DEFAULT_PAGE_SIZE
    sort_by: str = DEFAULT_SORT_FIELD
    ascending: bool = False

    @property
    def offset(self) -> int:
        return self.page * self.size


def build_page_request(
    page: int = 0,
    size: int = DEFAULT_PAGE_SIZE,
    sort_by: Optional[str] = DEFAULT_SORT_FIELD,
    sort_dir: Optional[str] = "desc",
) -> PageRequest:
    """Normalize raw paging parameters.

    Size is clamped to ``MAX_PAGE_SIZE`` and page to ``MAX_PAGE_INDEX``. An
    unknown sort field falls back to ``createdAt``; any direction other than
    "asc" (case-insensitive) means descending.
    """
    size = max(1, min(size, MAX_PAGE_SIZE))
    if sort_by not in SORTABLE_FIELDS:
        sort_by = DEFAULT_SORT_FIELD
    ascending = (sort_dir or "").strip().lower() == "asc"
    return PageRequest(page=max(0, min(page, MAX_PAGE_INDEX)), size=size, sort_by=sort_by, ascending=ascending)


@dataclass
class TaskFilter:
    # Restrict to projects this user is a member of
    member_user_id: Optional[int] = None
    project_id: Optional[int] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assignee_id: Optional[int] = None
    keyword: Optional[str] = None
    overdue_only: bool = False


def member_project_ids(user_id: int):
    return select(models.ProjectMember.project_id).where(models.ProjectMember.user_id == user_id)


def _like_pattern(keyword: str) -> str:
    escaped = keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def overdue_clauses(now: datetime) -> tuple:
    return (
        models.Task.deadline.isnot(None),
        models.Task.deadline < now,
        models.Task.status != TaskStatus.DONE,
    )


def apply_filter(query: Query, flt: TaskFilter, now: Optional[datetime] = None) -> Query:
    if flt.member_user_id is not None:
        query = query.filter(models.Task.project_id.in_(member_project_ids(flt.member_user_id)))
    if flt.project_id is not None:
        query = query.filter(models.Task.project_id == flt.project_id)
    if flt.status is not None:
        query = query.filter(models.Task.status == flt.status)
    if flt.priority is not None:
        query = query.filter(models.Task.priority == flt.priority)
    if flt.assignee_id is not None:
        query = query.filter(models.Task.assignee_id == flt.assignee_id)
    if flt.keyword and flt.keyword.strip():
        pattern = _like_pattern(flt.keyword.strip())
        query = query.filter(
            or_(
                models.Task.title.ilike(pattern, escape="\\"),
                models.Task.description.ilike(pattern, escape="\\"),
            )
        )
    if flt.overdue_only:
        query = query.filter(*overdue_clauses(now or utc_now()))
    return query


def _task_rows(db: Session) -> Query:
    return (
        db.query(models.Task, models.Project.name, models.User.full_name)
        .join(models.Project, models.Project.id == models.Task.project_id)
        .outerjoin(models.User, models.User.id == models.Task.assignee_id)
    )


def _ordering(page_request: PageRequest) -> list:
    column = SORTABLE_FIELDS[page_request.sort_by]
    if page_request.ascending:
        return [column.asc(), models.Task.id.asc()]
    return [column.desc(), models.Task.id.desc()]


def to_list_item(task: models.Task, project_name: str, assignee_name: Optional[str]) -> TaskListResponse:
    return TaskListResponse(
        id=task.id,
        title=task.title,
        status=task.status,
        priority=task.priority,
        deadline=task.deadline,
        is_overdue=is_overdue(task.deadline, task.status),
        assignee_name=assignee_name,
        project_name=project_name,
        created_at=task.created_at,
    )


def fetch_all(db: Session, flt: TaskFilter, page_request: PageRequest) -> list[TaskListResponse]:
    """Unpaged variant: same filter and ordering, no envelope."""
    rows = apply_filter(_task_rows(db), flt).order_by(*_ordering(page_request)).all()
    return [to_list_item(task, project_name, assignee_name) for task, project_name, assignee_name in rows]


def fetch_page(db: Session, flt: TaskFilter, page_request: PageRequest) -> PageResponse[TaskListResponse]:
    now = utc_now()
    total = apply_filter(db.query(models.Task), flt, now).count()
    rows = (
        apply_filter(_task_rows(db), flt, now)
        .order_by(*_ordering(page_request))
        .offset(page_request.offset)
        .limit(page_request.size)
        .all()
    )
    content = [to_list_item(task, project_name, assignee_name) for task, project_name, assignee_name in rows]
    return PageResponse[TaskListResponse].of(
        content, page=page_request.page, size=page_request.size, total=total
    )
