from .enums import ProjectHealth, ProjectRole, TaskPriority, TaskStatus, UserRole
from .pagination import PageResponse
from .user import AuthResponse, Token, UserLogin, UserRead, UserRegister, UserSummary
from .project import (
    AddMemberRequest,
    ProjectCreate,
    ProjectListResponse,
    ProjectMemberResponse,
    ProjectResponse,
    ProjectUpdate,
)
from .task import ProjectRef, TaskCreate, TaskListResponse, TaskResponse, TaskUpdate
from .stats import DashboardStatsResponse, ProjectStatsResponse, UserStatsResponse

__all__ = [
    "ProjectHealth",
    "ProjectRole",
    "TaskPriority",
    "TaskStatus",
    "UserRole",
    "PageResponse",
    "AuthResponse",
    "Token",
    "UserLogin",
    "UserRead",
    "UserRegister",
    "UserSummary",
    "AddMemberRequest",
    "ProjectCreate",
    "ProjectListResponse",
    "ProjectMemberResponse",
    "ProjectResponse",
    "ProjectUpdate",
    "ProjectRef",
    "TaskCreate",
    "TaskListResponse",
    "TaskResponse",
    "TaskUpdate",
    "DashboardStatsResponse",
    "ProjectStatsResponse",
    "UserStatsResponse",
]
