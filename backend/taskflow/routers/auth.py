from typing import Optional

import jwt
from fastapi import APIRouter, Depends, Request, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskflow import models
from taskflow.core.exceptions import Conflict, Unauthenticated
from taskflow.core.logging import get_logger
from taskflow.core.rate_limit import RATE_LIMITS, limiter
from taskflow.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from taskflow.db import get_db
from taskflow.schemas import AuthResponse, Token, UserLogin, UserRead, UserRegister, UserRole
from taskflow.services.validation import validate_login, validate_registration

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])
oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _find_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == _normalize_email(email)).first()


def _auth_response(user: models.User, message: str) -> AuthResponse:
    return AuthResponse(
        token=create_access_token(data={"sub": str(user.id), "email": user.email}),
        user_id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        message=message,
    )


def _authenticate(db: Session, email: str, password: str) -> models.User:
    user = _find_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        logger.info("login_failed")
        raise Unauthenticated("Incorrect email or password")
    return user


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["auth_operations"])
def register_user(request: Request, payload: UserRegister, db: Session = Depends(get_db)) -> AuthResponse:
    validate_registration(payload)
    if _find_user_by_email(db, payload.email):
        raise Conflict(f"User with email {payload.email.strip()} already exists")

    user = models.User(
        email=_normalize_email(payload.email),
        full_name=payload.full_name.strip(),
        hashed_password=hash_password(payload.password),
        role=UserRole.USER,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration of the same email
        db.rollback()
        raise Conflict(f"User with email {payload.email.strip()} already exists")
    db.refresh(user)
    logger.info("user_registered", user_id=user.id)
    return _auth_response(user, "Registration successful")


@router.post("/login", response_model=AuthResponse)
@limiter.limit(RATE_LIMITS["auth_operations"])
def login_user(request: Request, payload: UserLogin, db: Session = Depends(get_db)) -> AuthResponse:
    validate_login(payload)
    user = _authenticate(db, payload.email, payload.password)
    return _auth_response(user, "Login successful")


@router.post("/token", response_model=Token)
@limiter.limit(RATE_LIMITS["auth_operations"])
def login_for_access_token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
) -> Token:
    user = _authenticate(db, form_data.username, form_data.password)
    access_token = create_access_token(data={"sub": str(user.id), "email": user.email})
    return Token(access_token=access_token, token_type="bearer")


async def get_current_user_optional(
    token: Optional[str] = Depends(oauth2_scheme_optional),
    db: Session = Depends(get_db),
) -> Optional[models.User]:
    if not token:
        return None
    try:
        payload = decode_access_token(token)
        user_id: Optional[str] = payload.get("sub")
        if user_id is None:
            return None
        user_pk = int(user_id)
    except (jwt.PyJWTError, ValueError) as exc:
        logger.debug("token_rejected", error_type=type(exc).__name__)
        return None

    return db.get(models.User, user_pk)


async def get_current_user(
    user: Optional[models.User] = Depends(get_current_user_optional),
) -> models.User:
    if user is None:
        raise Unauthenticated("Could not validate credentials")
    return user


@router.get("/me", response_model=UserRead)
async def read_users_me(current_user: models.User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(current_user)
