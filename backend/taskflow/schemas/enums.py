# Enums for Taskflow
from enum import Enum


class UserRole(str, Enum):
    """Global role, fixed at registration"""

    USER = "USER"
    ADMIN = "ADMIN"


class ProjectRole(str, Enum):
    """Role of project member"""

    OWNER = "OWNER"
    MEMBER = "MEMBER"


class TaskStatus(str, Enum):
    """Task status; any transition between states is allowed"""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    DONE = "DONE"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ProjectHealth(str, Enum):
    """Derived label reported by project statistics"""

    NO_TASKS = "NO_TASKS"
    DELAYED = "DELAYED"
    AT_RISK = "AT_RISK"
    ON_TRACK = "ON_TRACK"


__all__ = [
    "UserRole",
    "ProjectRole",
    "TaskStatus",
    "TaskPriority",
    "ProjectHealth",
]
