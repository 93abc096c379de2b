from taskflow.schemas.base import CamelModel
from taskflow.schemas.enums import ProjectHealth


class DashboardStatsResponse(CamelModel):
    # Projects
    total_projects: int
    projects_i_own: int
    projects_as_member: int

    # Tasks in the caller's projects
    total_tasks: int
    tasks_assigned_to_me: int
    unassigned_tasks: int

    todo_tasks: int
    in_progress_tasks: int
    review_tasks: int
    done_tasks: int

    low_priority_tasks: int
    medium_priority_tasks: int
    high_priority_tasks: int
    critical_tasks: int

    overdue_tasks: int
    due_today_tasks: int
    due_this_week_tasks: int

    completion_rate: float


class ProjectStatsResponse(CamelModel):
    project_id: int
    project_name: str

    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    overdue_tasks: int

    todo_tasks: int
    in_progress_tasks: int
    review_tasks: int
    done_tasks: int

    low_priority_tasks: int
    medium_priority_tasks: int
    high_priority_tasks: int
    critical_tasks: int

    total_members: int
    active_tasks: int

    completion_rate: float
    status: ProjectHealth


class UserStatsResponse(CamelModel):
    user_id: int
    user_name: str
    user_email: str

    total_assigned_tasks: int
    completed_tasks: int
    pending_tasks: int
    overdue_tasks: int

    todo_tasks: int
    in_progress_tasks: int
    review_tasks: int
    done_tasks: int

    low_priority_tasks: int
    medium_priority_tasks: int
    high_priority_tasks: int
    critical_tasks: int

    completion_rate: float
    on_time_rate: float

    projects_count: int
