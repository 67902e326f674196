# Authentication endpoints (register/login/logout/me) and the auth dependencies used by other routers.
# Sessions live in the HTTP-only auth cookie; API clients may send the same token as a Bearer header.
from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Header, Response, status
from sqlalchemy.orm import Session

from ..db import get_db
from .. import models, schemas
from ..gate import AUTH_COOKIE_NAME
from ..rate_limit import rate_limit
from ..security import (
    JWT_TTL_SECONDS,
    AuthSession,
    Role,
    SigningSecretMissing,
    get_verifier,
    hash_password,
    is_production,
    verify_password,
)

router = APIRouter()
logger = logging.getLogger("studentnest.auth")


# ----------------
# Helpers
# ----------------
def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        AUTH_COOKIE_NAME,
        token,
        max_age=JWT_TTL_SECONDS,
        path="/",
        httponly=True,
        secure=is_production(),
        samesite="lax",
    )


def clear_auth_cookie(response: Response) -> None:
    response.set_cookie(
        AUTH_COOKIE_NAME,
        "",
        max_age=0,
        path="/",
        httponly=True,
        secure=is_production(),
        samesite="lax",
    )


def bearer_token_from_auth_header(authorization: Optional[str]) -> Optional[str]:
    # Non-Bearer schemes yield None and the caller falls back to the cookie
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        return None
    return parts[1].strip()


# ----------------
# Dependencies
# ----------------
def get_current_session(
    auth_token: Optional[str] = Cookie(default=None, alias=AUTH_COOKIE_NAME),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> AuthSession:
    token = bearer_token_from_auth_header(authorization) or auth_token
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    session = get_verifier().verify(token)
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    return session


def get_current_user(
    db: Session = Depends(get_db),
    session: AuthSession = Depends(get_current_session),
) -> models.User:
    user = db.get(models.User, session.subject_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def require_role(role: Role) -> Callable[..., models.User]:
    """Dependency factory: the current user must hold `role` (checked against the stored account)."""

    def _dependency(user: models.User = Depends(get_current_user)) -> models.User:
        if user.role != role.value:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{role.value.capitalize()} role required",
            )
        return user

    return _dependency


require_landlord = require_role(Role.LANDLORD)
require_admin = require_role(Role.ADMIN)


# ----------------
# Routes
# ----------------
@router.post(
    "/auth/register",
    response_model=schemas.UserRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("register"))],
)
def register(payload: schemas.RegisterRequest, db: Session = Depends(get_db)) -> models.User:
    existing = db.query(models.User).filter(models.User.email == payload.email).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User with this email already exists")

    user = models.User(
        email=payload.email,
        password_hash=hash_password(payload.password),
        name=payload.name,
        role=Role.STUDENT.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("auth.register", extra={"user_id": user.id})
    return user


@router.post(
    "/auth/login",
    response_model=schemas.LoginResponse,
    dependencies=[Depends(rate_limit("login"))],
)
def login(payload: schemas.LoginRequest, response: Response, db: Session = Depends(get_db)) -> schemas.LoginResponse:
    user = db.query(models.User).filter(models.User.email == payload.email).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    try:
        token = get_verifier().issue(subject_id=user.id, email=user.email, role=Role(user.role))
    except SigningSecretMissing:
        logger.error("Cannot issue session token: signing secret is not configured")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to process login")

    set_auth_cookie(response, token)
    return schemas.LoginResponse(user=schemas.UserRead.model_validate(user), access_token=token)


@router.post("/auth/logout")
def logout(response: Response) -> dict:
    clear_auth_cookie(response)
    return {"message": "Logged out successfully"}


@router.get("/auth/me", response_model=schemas.UserRead)
def me(user: models.User = Depends(get_current_user)) -> models.User:
    return user
