from typing import Optional

from pydantic import BaseModel

from taskflow.schemas.base import CamelModel, UtcDatetime
from taskflow.schemas.enums import UserRole


class UserRegister(CamelModel):
    # Presence and format are checked by services.validation
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None


class UserLogin(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserSummary(CamelModel):
    id: int
    email: str
    full_name: str


class UserRead(UserSummary):
    role: UserRole
    created_at: UtcDatetime


class AuthResponse(CamelModel):
    token: str
    token_type: str = "Bearer"
    user_id: int
    email: str
    full_name: str
    role: UserRole
    message: str


class Token(BaseModel):
    # OAuth2 password flow response; field names are fixed by the RFC
    access_token: str
    token_type: str = "bearer"
