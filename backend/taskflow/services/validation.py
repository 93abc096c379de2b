"""
Request validation run at the service boundary, before anything is written.

Each ``validate_*`` function collects every violated rule and raises a single
``ValidationFailed`` whose ``errors`` maps field names (as they appear on the
wire) to messages.
"""

from __future__ import annotations

import re
from typing import Optional

from taskflow.core.exceptions import ValidationFailed
from taskflow.schemas import (
    AddMemberRequest,
    ProjectCreate,
    ProjectUpdate,
    TaskCreate,
    TaskUpdate,
    UserLogin,
    UserRegister,
)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

PROJECT_NAME_MIN, PROJECT_NAME_MAX = 2, 100
TASK_TITLE_MIN, TASK_TITLE_MAX = 3, 200
PASSWORD_MIN = 6
FULL_NAME_MAX = 255


class _Errors:
    def __init__(self) -> None:
        self.errors: dict[str, list[str]] = {}

    def add(self, field: str, message: str) -> None:
        self.errors.setdefault(field, []).append(message)

    def raise_if_any(self) -> None:
        if self.errors:
            raise ValidationFailed(self.errors)


def _check_length(
    errors: _Errors, field: str, value: Optional[str], min_len: int, max_len: int, *, required: bool
) -> None:
    if value is None:
        if required:
            errors.add(field, "must not be blank")
        return
    trimmed = value.strip()
    if not trimmed:
        errors.add(field, "must not be blank")
    elif not (min_len <= len(trimmed) <= max_len):
        errors.add(field, f"size must be between {min_len} and {max_len}")


def validate_registration(payload: UserRegister) -> None:
    errors = _Errors()
    if not payload.email or not payload.email.strip():
        errors.add("email", "must not be blank")
    elif not EMAIL_RE.match(payload.email.strip()):
        errors.add("email", "must be a well-formed email address")
    if not payload.password:
        errors.add("password", "must not be blank")
    elif len(payload.password) < PASSWORD_MIN:
        errors.add("password", f"must be at least {PASSWORD_MIN} characters")
    _check_length(errors, "fullName", payload.full_name, 1, FULL_NAME_MAX, required=True)
    errors.raise_if_any()


def validate_login(payload: UserLogin) -> None:
    errors = _Errors()
    if not payload.email or not payload.email.strip():
        errors.add("email", "must not be blank")
    if not payload.password:
        errors.add("password", "must not be blank")
    errors.raise_if_any()


def validate_project_create(payload: ProjectCreate) -> None:
    errors = _Errors()
    _check_length(errors, "name", payload.name, PROJECT_NAME_MIN, PROJECT_NAME_MAX, required=True)
    errors.raise_if_any()


def validate_project_update(payload: ProjectUpdate) -> None:
    errors = _Errors()
    _check_length(errors, "name", payload.name, PROJECT_NAME_MIN, PROJECT_NAME_MAX, required=False)
    errors.raise_if_any()


def validate_add_member(payload: AddMemberRequest) -> None:
    errors = _Errors()
    if payload.user_id is None:
        errors.add("userId", "is required")
    errors.raise_if_any()


def validate_task_create(payload: TaskCreate) -> None:
    errors = _Errors()
    _check_length(errors, "title", payload.title, TASK_TITLE_MIN, TASK_TITLE_MAX, required=True)
    errors.raise_if_any()


def validate_task_update(payload: TaskUpdate) -> None:
    errors = _Errors()
    _check_length(errors, "title", payload.title, TASK_TITLE_MIN, TASK_TITLE_MAX, required=False)
    errors.raise_if_any()
