from sqlalchemy import Column, DateTime, Enum, Integer, String

from taskflow.db import Base
from taskflow.schemas.enums import UserRole
from taskflow.time_utils import utc_now


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", native_enum=False, length=16),
        nullable=False,
        default=UserRole.USER,
    )
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
