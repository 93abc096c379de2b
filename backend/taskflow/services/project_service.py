from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from taskflow import models
from taskflow.core.exceptions import Conflict, raise_not_found, raise_permission_denied
from taskflow.core.logging import get_logger
from taskflow.schemas import (
    AddMemberRequest,
    ProjectCreate,
    ProjectListResponse,
    ProjectMemberResponse,
    ProjectResponse,
    ProjectRole,
    ProjectUpdate,
    UserSummary,
)
from taskflow.services.access import (
    ensure_project_access,
    ensure_project_owner,
    get_project_or_404,
    get_user_or_404,
    is_member,
)
from taskflow.services.validation import (
    validate_add_member,
    validate_project_create,
    validate_project_update,
)

logger = get_logger(__name__)


def member_count(db: Session, project_id: int) -> int:
    return (
        db.scalar(
            select(func.count(models.ProjectMember.id)).where(
                models.ProjectMember.project_id == project_id
            )
        )
        or 0
    )


def member_projects_query(user_id: int):
    """Projects the user is a member of (owner included), newest first."""
    return (
        select(models.Project)
        .join(models.ProjectMember, models.ProjectMember.project_id == models.Project.id)
        .where(models.ProjectMember.user_id == user_id)
        .order_by(models.Project.created_at.desc(), models.Project.id.desc())
    )


def _load_members(db: Session, project_id: int) -> list[ProjectMemberResponse]:
    rows = db.execute(
        select(models.ProjectMember, models.User)
        .join(models.User, models.User.id == models.ProjectMember.user_id)
        .where(models.ProjectMember.project_id == project_id)
        .order_by(models.ProjectMember.joined_at, models.ProjectMember.id)
    ).all()
    return [
        ProjectMemberResponse(
            user_id=user.id,
            email=user.email,
            full_name=user.full_name,
            role=membership.role,
            joined_at=membership.joined_at,
        )
        for membership, user in rows
    ]


def build_project_response(db: Session, project: models.Project) -> ProjectResponse:
    owner = db.get(models.User, project.owner_id)
    members = _load_members(db, project.id)
    return ProjectResponse(
        id=project.id,
        name=project.name,
        description=project.description,
        owner=UserSummary.model_validate(owner),
        members=members,
        member_count=len(members),
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def _build_list_item(db: Session, project: models.Project) -> ProjectListResponse:
    owner_name = db.scalar(select(models.User.full_name).where(models.User.id == project.owner_id))
    return ProjectListResponse(
        id=project.id,
        name=project.name,
        description=project.description,
        owner_name=owner_name or "",
        member_count=member_count(db, project.id),
        created_at=project.created_at,
    )


def create_project(db: Session, payload: ProjectCreate, current_user: models.User) -> ProjectResponse:
    """
    Create a project and the creator's OWNER membership in one transaction.
    """
    validate_project_create(payload)

    project = models.Project(
        name=payload.name.strip(),
        description=payload.description,
        owner_id=current_user.id,
    )
    try:
        db.add(project)
        db.flush()
        db.add(
            models.ProjectMember(
                project_id=project.id, user_id=current_user.id, role=ProjectRole.OWNER
            )
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("project_create_failed", owner_id=current_user.id)
        raise
    db.refresh(project)
    logger.info("project_created", project_id=project.id, owner_id=current_user.id)
    return build_project_response(db, project)


def list_user_projects(db: Session, current_user: models.User) -> list[ProjectListResponse]:
    projects = db.scalars(member_projects_query(current_user.id)).all()
    return [_build_list_item(db, project) for project in projects]


def get_project(db: Session, project_id: int, current_user: models.User) -> ProjectResponse:
    project = get_project_or_404(db, project_id)
    ensure_project_access(db, current_user, project.id)
    return build_project_response(db, project)


def update_project(
    db: Session, project_id: int, payload: ProjectUpdate, current_user: models.User
) -> ProjectResponse:
    validate_project_update(payload)
    project = get_project_or_404(db, project_id)
    ensure_project_owner(current_user, project, "update the project")

    if payload.name is not None:
        project.name = payload.name.strip()
    if payload.description is not None:
        project.description = payload.description

    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("project_updated", project_id=project.id)
    return build_project_response(db, project)


def delete_project(db: Session, project_id: int, current_user: models.User) -> None:
    project = get_project_or_404(db, project_id)
    ensure_project_owner(current_user, project, "delete the project")
    # Tasks and memberships go with it through ON DELETE CASCADE
    db.delete(project)
    db.commit()
    logger.info("project_deleted", project_id=project_id, owner_id=current_user.id)


def add_member(
    db: Session, project_id: int, payload: AddMemberRequest, current_user: models.User
) -> ProjectResponse:
    validate_add_member(payload)
    project = get_project_or_404(db, project_id)
    ensure_project_owner(current_user, project, "add members")

    user = get_user_or_404(db, payload.user_id)
    if is_member(db, project.id, user.id):
        raise Conflict(
            "User is already a member of this project",
            details={"projectId": project.id, "userId": user.id},
        )

    db.add(models.ProjectMember(project_id=project.id, user_id=user.id, role=ProjectRole.MEMBER))
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent insert of the same pair
        db.rollback()
        raise Conflict(
            "User is already a member of this project",
            details={"projectId": project.id, "userId": user.id},
        )
    logger.info("member_added", project_id=project.id, user_id=user.id)
    return build_project_response(db, project)


def remove_member(db: Session, project_id: int, user_id: int, current_user: models.User) -> None:
    project = get_project_or_404(db, project_id)
    ensure_project_owner(current_user, project, "remove members")
    if user_id == project.owner_id:
        raise_permission_denied("Project owner cannot be removed")

    membership = db.scalar(
        select(models.ProjectMember).where(
            models.ProjectMember.project_id == project.id,
            models.ProjectMember.user_id == user_id,
        )
    )
    if membership is None:
        raise_not_found("ProjectMember", message="Member not found in this project")

    db.delete(membership)
    db.commit()
    logger.info("member_removed", project_id=project.id, user_id=user_id)


def list_members(db: Session, project_id: int, current_user: models.User) -> list[ProjectMemberResponse]:
    project = get_project_or_404(db, project_id)
    ensure_project_access(db, current_user, project.id)
    return _load_members(db, project.id)
