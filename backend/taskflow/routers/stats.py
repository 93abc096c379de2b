from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskflow import models
from taskflow.db import get_db
from taskflow.routers.auth import get_current_user
from taskflow.schemas import DashboardStatsResponse, ProjectStatsResponse, UserStatsResponse
from taskflow.services import stats_service

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/dashboard", response_model=DashboardStatsResponse)
def get_dashboard_stats(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> DashboardStatsResponse:
    """Counts over every project the caller is a member of."""
    return stats_service.get_dashboard_stats(db, current_user)


@router.get("/projects", response_model=list[ProjectStatsResponse])
def get_all_project_stats(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> list[ProjectStatsResponse]:
    return stats_service.get_all_project_stats(db, current_user)


@router.get("/projects/{project_id}", response_model=ProjectStatsResponse)
def get_project_stats(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> ProjectStatsResponse:
    return stats_service.get_project_stats(db, project_id, current_user)


@router.get("/users/{user_id}", response_model=UserStatsResponse)
def get_user_stats(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
) -> UserStatsResponse:
    return stats_service.get_user_stats(db, user_id, current_user)
