from taskflow.db import Base
from taskflow.schemas.enums import ProjectRole
from taskflow.time_utils import utc_now
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, UniqueConstraint


class ProjectMember(Base):
    __tablename__ = "project_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(
        Enum(ProjectRole, name="project_role", native_enum=False, length=16),
        nullable=False,
        default=ProjectRole.MEMBER,
    )
    joined_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_member_project_user"),
    )
