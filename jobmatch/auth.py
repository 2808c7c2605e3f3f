from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from . import crud, models, security
from .database import get_db
from .errors import AuthError
from .models import Role
from .token import decode_access_token


def authenticate_user(db: Session, email: str, password: str) -> models.User | None:
    """
    Authenticates a user by email and password.

    Returns the user object if the credentials match, otherwise None. An
    inactive account still authenticates; the caller decides how to refuse it.
    Hashes made with an outdated cost are upgraded on the way through.
    """
    user = crud.get_user_by_email(db, email)
    if not user or not security.verify_password(password, user.hashed_password):
        return None
    if security.needs_rehash(user.hashed_password):
        crud.set_password(db, user, password)
    return user


def authenticate_admin(db: Session, email: str, password: str) -> models.Admin | None:
    admin = crud.get_admin_by_email(db, email)
    if not admin or not security.verify_password(password, admin.hashed_password):
        return None
    return admin


def get_token_from_cookie_or_header(request: Request) -> str | None:
    """Extract token from either Authorization header or access_token cookie"""
    # First try authorization header
    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:]  # Remove "Bearer " prefix

    # Then try cookie
    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        return cookie_token[7:]

    return None


def _claims(request: Request) -> dict:
    token = get_token_from_cookie_or_header(request)
    if not token:
        raise AuthError("Not authorized, no token provided")
    payload = decode_access_token(token)
    if payload is None or payload.get("sub") is None:
        raise AuthError("Not authorized, token invalid or expired")
    return payload


def get_current_user(request: Request, db: Session = Depends(get_db)) -> models.User:
    payload = _claims(request)
    if payload.get("role") == Role.ADMIN.value:
        raise AuthError("Admin tokens cannot be used here", 403)
    try:
        user = crud.get_user(db, int(payload["sub"]))
    except ValueError:
        raise AuthError("Not authorized, token invalid or expired")
    if user is None:
        raise AuthError("User not found")
    if not user.is_active:
        raise AuthError("User account is deactivated", 403)
    return user


def require_role(*roles: Role) -> Callable[..., models.User]:
    """Dependency factory: the current user, restricted to ``roles``."""
    allowed = {r.value for r in roles}

    def dependency(user: models.User = Depends(get_current_user)) -> models.User:
        if user.role not in allowed:
            raise AuthError(f"Role '{user.role}' is not authorized to access this route", 403)
        return user

    return dependency


get_job_seeker = require_role(Role.JOB_SEEKER)
get_employer = require_role(Role.EMPLOYER)


def get_current_admin(request: Request, db: Session = Depends(get_db)) -> models.Admin:
    payload = _claims(request)
    if payload.get("role") != Role.ADMIN.value:
        raise AuthError("Not authorized as admin", 403)
    try:
        admin = db.get(models.Admin, int(payload["sub"]))
    except ValueError:
        raise AuthError("Not authorized as admin", 403)
    if admin is None:
        raise AuthError("Admin not found")
    return admin
