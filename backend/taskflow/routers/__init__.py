from . import auth, projects, stats, tasks

__all__ = [
    "auth",
    "projects",
    "stats",
    "tasks",
]
