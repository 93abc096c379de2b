from .user import User
from .project import Project
from .project_member import ProjectMember
from .task import Task

__all__ = [
    "User",
    "Project",
    "ProjectMember",
    "Task",
]
