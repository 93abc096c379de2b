"""
Membership-based access control.

Reading anything inside a project needs a membership row; changing the project
itself (rename, delete, membership management) needs ownership.
"""

from __future__ import annotations

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from taskflow import models
from taskflow.core.exceptions import raise_not_found, raise_permission_denied
from taskflow.core.logging import get_logger

logger = get_logger(__name__)


def is_member(db: Session, project_id: int, user_id: int) -> bool:
    return bool(
        db.scalar(
            select(
                exists().where(
                    models.ProjectMember.project_id == project_id,
                    models.ProjectMember.user_id == user_id,
                )
            )
        )
    )


def has_any_membership(db: Session, user_id: int) -> bool:
    return bool(db.scalar(select(exists().where(models.ProjectMember.user_id == user_id))))


def can_access_project(db: Session, user: models.User, project_id: int) -> bool:
    return is_member(db, project_id, user.id)


def can_mutate_project(user: models.User, project: models.Project) -> bool:
    return project.owner_id == user.id


def can_assign(db: Session, project_id: int, candidate_user_id: int) -> bool:
    return is_member(db, project_id, candidate_user_id)


def can_view_user_stats(db: Session, viewer: models.User, target_user_id: int) -> bool:
    """Self is always allowed.

    For another user both sides only need *some* membership; the two users are
    not required to share a project.
    """
    if viewer.id == target_user_id:
        return True
    return has_any_membership(db, target_user_id) and has_any_membership(db, viewer.id)


def get_project_or_404(db: Session, project_id: int) -> models.Project:
    project = db.get(models.Project, project_id)
    if project is None:
        raise_not_found("Project", project_id)
    return project


def get_user_or_404(db: Session, user_id: int) -> models.User:
    user = db.get(models.User, user_id)
    if user is None:
        raise_not_found("User", user_id)
    return user


def ensure_project_access(db: Session, user: models.User, project_id: int) -> None:
    if not can_access_project(db, user, project_id):
        logger.info("project_access_denied", user_id=user.id, project_id=project_id)
        raise_permission_denied("You don't have access to this project")


def ensure_project_owner(user: models.User, project: models.Project, action: str) -> None:
    if not can_mutate_project(user, project):
        logger.info("project_owner_required", user_id=user.id, project_id=project.id, action=action)
        raise_permission_denied(f"Only project owner can {action}")


def ensure_assignable(db: Session, project_id: int, assignee_id: int) -> models.User:
    """Load the prospective assignee and check they belong to the project."""
    assignee = get_user_or_404(db, assignee_id)
    if not can_assign(db, project_id, assignee.id):
        raise_permission_denied("Cannot assign task to user who is not a project member")
    return assignee
