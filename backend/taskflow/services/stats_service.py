"""
Statistics aggregation.

Every figure is a COUNT over ``tasks`` (or ``project_members``/``projects``)
with a fixed set of criteria; rates are combined from those counts in Python.
Nothing here writes, so all counts of one request are taken inside the same
session transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from taskflow import models
from taskflow.core.exceptions import raise_permission_denied
from taskflow.core.logging import get_logger
from taskflow.schemas import (
    DashboardStatsResponse,
    ProjectHealth,
    ProjectStatsResponse,
    TaskPriority,
    TaskStatus,
    UserStatsResponse,
)
from taskflow.services.access import (
    can_view_user_stats,
    ensure_project_access,
    get_project_or_404,
    get_user_or_404,
)
from taskflow.services.project_service import member_count, member_projects_query
from taskflow.services.task_queries import member_project_ids, overdue_clauses
from taskflow.time_utils import today_range, utc_now, week_range

logger = get_logger(__name__)

# Share of overdue tasks above which a project is DELAYED
DELAYED_OVERDUE_RATIO = 0.3
# Completion percentage below which a project is AT_RISK
AT_RISK_COMPLETION = 50.0


def percentage(part: int, whole: int) -> float:
    """part/whole * 100 rounded half-up to two decimals; 0.0 for an empty whole."""
    if whole <= 0:
        return 0.0
    value = Decimal(part) * 100 / Decimal(whole)
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def classify_project(total: int, completed: int, overdue: int) -> ProjectHealth:
    if total == 0:
        return ProjectHealth.NO_TASKS
    if overdue > total * DELAYED_OVERDUE_RATIO:
        return ProjectHealth.DELAYED
    if overdue > 0 or completed * 100 / total < AT_RISK_COMPLETION:
        return ProjectHealth.AT_RISK
    return ProjectHealth.ON_TRACK


@dataclass
class TaskBreakdown:
    total: int = 0
    by_status: dict = field(default_factory=lambda: {s: 0 for s in TaskStatus})
    by_priority: dict = field(default_factory=lambda: {p: 0 for p in TaskPriority})
    overdue: int = 0

    @property
    def done(self) -> int:
        return self.by_status[TaskStatus.DONE]

    @property
    def pending(self) -> int:
        return self.total - self.done

    def breakdown_fields(self) -> dict:
        return {
            "todo_tasks": self.by_status[TaskStatus.TODO],
            "in_progress_tasks": self.by_status[TaskStatus.IN_PROGRESS],
            "review_tasks": self.by_status[TaskStatus.REVIEW],
            "done_tasks": self.done,
            "low_priority_tasks": self.by_priority[TaskPriority.LOW],
            "medium_priority_tasks": self.by_priority[TaskPriority.MEDIUM],
            "high_priority_tasks": self.by_priority[TaskPriority.HIGH],
            "critical_tasks": self.by_priority[TaskPriority.CRITICAL],
        }


def _count_tasks(db: Session, *criteria) -> int:
    return db.query(func.count(models.Task.id)).filter(*criteria).scalar() or 0


def _task_breakdown(db: Session, criteria: list, now: datetime) -> TaskBreakdown:
    result = TaskBreakdown()
    status_rows = (
        db.query(models.Task.status, func.count(models.Task.id))
        .filter(*criteria)
        .group_by(models.Task.status)
        .all()
    )
    for status, count in status_rows:
        result.by_status[TaskStatus(status)] = count
    priority_rows = (
        db.query(models.Task.priority, func.count(models.Task.id))
        .filter(*criteria)
        .group_by(models.Task.priority)
        .all()
    )
    for priority, count in priority_rows:
        result.by_priority[TaskPriority(priority)] = count
    result.total = sum(result.by_status.values())
    result.overdue = _count_tasks(db, *criteria, *overdue_clauses(now))
    return result


def _due_between(db: Session, criteria: list, start: datetime, end: datetime, *, inclusive_end: bool) -> int:
    upper = models.Task.deadline <= end if inclusive_end else models.Task.deadline < end
    return _count_tasks(
        db,
        *criteria,
        models.Task.deadline.isnot(None),
        models.Task.deadline >= start,
        upper,
        models.Task.status != TaskStatus.DONE,
    )


def get_dashboard_stats(db: Session, current_user: models.User, now: Optional[datetime] = None) -> DashboardStatsResponse:
    now = now or utc_now()
    user_id = current_user.id

    total_projects = (
        db.query(func.count(models.ProjectMember.id))
        .filter(models.ProjectMember.user_id == user_id)
        .scalar()
        or 0
    )
    owned = (
        db.query(func.count(models.Project.id)).filter(models.Project.owner_id == user_id).scalar() or 0
    )

    in_my_projects = [models.Task.project_id.in_(member_project_ids(user_id))]
    breakdown = _task_breakdown(db, in_my_projects, now)
    today_start, today_end = today_range(now)
    week_start, week_end = week_range(now)

    return DashboardStatsResponse(
        total_projects=total_projects,
        projects_i_own=owned,
        projects_as_member=total_projects - owned,
        total_tasks=breakdown.total,
        # Not restricted to member projects
        tasks_assigned_to_me=_count_tasks(db, models.Task.assignee_id == user_id),
        unassigned_tasks=_count_tasks(db, *in_my_projects, models.Task.assignee_id.is_(None)),
        overdue_tasks=breakdown.overdue,
        due_today_tasks=_due_between(db, in_my_projects, today_start, today_end, inclusive_end=False),
        due_this_week_tasks=_due_between(db, in_my_projects, week_start, week_end, inclusive_end=True),
        completion_rate=percentage(breakdown.done, breakdown.total),
        **breakdown.breakdown_fields(),
    )


def _project_stats(db: Session, project: models.Project, now: datetime) -> ProjectStatsResponse:
    breakdown = _task_breakdown(db, [models.Task.project_id == project.id], now)
    return ProjectStatsResponse(
        project_id=project.id,
        project_name=project.name,
        total_tasks=breakdown.total,
        completed_tasks=breakdown.done,
        pending_tasks=breakdown.pending,
        overdue_tasks=breakdown.overdue,
        total_members=member_count(db, project.id),
        active_tasks=breakdown.pending,
        completion_rate=percentage(breakdown.done, breakdown.total),
        status=classify_project(breakdown.total, breakdown.done, breakdown.overdue),
        **breakdown.breakdown_fields(),
    )


def get_project_stats(
    db: Session, project_id: int, current_user: models.User, now: Optional[datetime] = None
) -> ProjectStatsResponse:
    project = get_project_or_404(db, project_id)
    ensure_project_access(db, current_user, project.id)
    return _project_stats(db, project, now or utc_now())


def get_all_project_stats(db: Session, current_user: models.User) -> list[ProjectStatsResponse]:
    now = utc_now()
    projects = db.scalars(member_projects_query(current_user.id)).all()
    return [_project_stats(db, project, now) for project in projects]


def get_user_stats(
    db: Session, user_id: int, current_user: models.User, now: Optional[datetime] = None
) -> UserStatsResponse:
    now = now or utc_now()
    user = get_user_or_404(db, user_id)
    if not can_view_user_stats(db, current_user, user.id):
        logger.info("user_stats_denied", viewer_id=current_user.id, target_user_id=user.id)
        raise_permission_denied("You don't have access to this user's statistics")

    assigned = [models.Task.assignee_id == user.id]
    breakdown = _task_breakdown(db, assigned, now)
    on_time = _count_tasks(
        db,
        *assigned,
        models.Task.status == TaskStatus.DONE,
        or_(
            models.Task.deadline.is_(None),
            and_(models.Task.completed_at.isnot(None), models.Task.completed_at <= models.Task.deadline),
        ),
    )
    projects_count = (
        db.query(func.count(models.ProjectMember.id))
        .filter(models.ProjectMember.user_id == user.id)
        .scalar()
        or 0
    )

    return UserStatsResponse(
        user_id=user.id,
        user_name=user.full_name,
        user_email=user.email,
        total_assigned_tasks=breakdown.total,
        completed_tasks=breakdown.done,
        pending_tasks=breakdown.pending,
        overdue_tasks=breakdown.overdue,
        completion_rate=percentage(breakdown.done, breakdown.total),
        on_time_rate=percentage(on_time, breakdown.done),
        projects_count=projects_count,
        **breakdown.breakdown_fields(),
    )
