from typing import List, Optional

from taskflow.schemas.base import CamelModel, UtcDatetime
from taskflow.schemas.enums import ProjectRole
from taskflow.schemas.user import UserSummary


class ProjectCreate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None


class ProjectUpdate(CamelModel):
    """Partial update: ``None`` means "leave unchanged"."""

    name: Optional[str] = None
    description: Optional[str] = None


class AddMemberRequest(CamelModel):
    user_id: Optional[int] = None


class ProjectMemberResponse(CamelModel):
    user_id: int
    email: str
    full_name: str
    role: ProjectRole
    joined_at: UtcDatetime


class ProjectResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    owner: UserSummary
    members: List[ProjectMemberResponse] = []
    member_count: int
    created_at: UtcDatetime
    updated_at: UtcDatetime


class ProjectListResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    owner_name: str
    member_count: int
    created_at: UtcDatetime
