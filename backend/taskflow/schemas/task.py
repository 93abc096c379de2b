from typing import Optional

from taskflow.schemas.base import CamelModel, UtcDatetime
from taskflow.schemas.enums import TaskPriority, TaskStatus
from taskflow.schemas.user import UserSummary


class TaskCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assignee_id: Optional[int] = None
    deadline: Optional[UtcDatetime] = None


class TaskUpdate(CamelModel):
    """Partial update: a field is applied only when present and not null.

    There is no way to clear a field (e.g. remove a deadline) through an update.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assignee_id: Optional[int] = None
    deadline: Optional[UtcDatetime] = None


class ProjectRef(CamelModel):
    id: int
    name: str


class TaskResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    deadline: Optional[UtcDatetime] = None
    is_overdue: bool
    project: ProjectRef
    assignee: Optional[UserSummary] = None
    completed_at: Optional[UtcDatetime] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class TaskListResponse(CamelModel):
    id: int
    title: str
    status: TaskStatus
    priority: TaskPriority
    deadline: Optional[UtcDatetime] = None
    is_overdue: bool
    assignee_name: Optional[str] = None
    project_name: str
    created_at: UtcDatetime
