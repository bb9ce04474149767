"""Session login/logout and auth dependencies (get_current_user, require_admin, require_permissions)."""

import logging
from collections.abc import Callable, Sequence
from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import verify_password
from app.models.user import User
from app.schemas.auth import CurrentUser, LoginRequest, LoginResponse, MeResponse
from app.schemas.branch import MessageResponse
from app.services.permissions import (
    ADMIN_ROLE,
    EMPTY_PERMISSIONS,
    PermissionMode,
    PermissionRegistry,
    build_registry,
    is_allowed,
    normalize_required,
)
from app.services.sessions import create_session, destroy_session, load_session

logger = logging.getLogger(__name__)
router = APIRouter()


@lru_cache
def _configured_registry() -> PermissionRegistry:
    return build_registry(get_settings())


def get_permission_registry() -> PermissionRegistry:
    """Dependency: role -> permission registry. Override in tests via app.dependency_overrides."""
    return _configured_registry()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def get_current_user(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require a live session cookie and return its user. Raises 401 otherwise."""
    sid = request.cookies.get(get_settings().SESSION_COOKIE_NAME)
    if not sid:
        raise _unauthorized("Not authenticated")
    data = load_session(db, sid)
    if data is None:
        raise _unauthorized("Session expired or invalid")
    user_id = data.get("user_id")
    if not isinstance(user_id, int):
        raise _unauthorized("Invalid session payload")
    user = db.get(User, user_id)
    if user is None:
        raise _unauthorized("User not found")
    try:
        return CurrentUser.model_validate(user)
    except ValidationError as e:
        logger.error("User %s has a malformed record; denying access: %s", user_id, e)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unable to resolve permissions",
        ) from e


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if current_user.role != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


def require_permissions(
    names: Sequence[str],
    mode: PermissionMode = "AND",
) -> Callable[..., CurrentUser]:
    """
    Build a dependency that admits the current user only if their effective
    permissions (role defaults plus explicit overrides) satisfy `names`:
    all of them for mode "AND", at least one for mode "OR".

    Denial raises 403 before the route handler runs. On success the resolved
    set is stored on request.state.permissions.

        @router.get("/", dependencies=[Depends(require_permissions(["manage_branches"]))])
    """
    required = normalize_required(names, mode)

    def permission_dependency(
        request: Request,
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
        registry: Annotated[PermissionRegistry, Depends(get_permission_registry)],
    ) -> CurrentUser:
        try:
            granted = registry.effective_permissions(current_user.role, current_user.permissions)
        except (TypeError, ValueError) as e:
            logger.error("Cannot resolve permissions for user %s; denying: %s", current_user.id, e)
            granted = EMPTY_PERMISSIONS
        if not is_allowed(granted, required, mode):
            logger.debug(
                "Permission denied: user=%s role=%s required=%s mode=%s",
                current_user.id,
                current_user.role,
                required,
                mode,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        request.state.permissions = granted
        return current_user

    return permission_dependency


def _effective_permissions(registry: PermissionRegistry, user: CurrentUser) -> list[str]:
    try:
        return sorted(registry.effective_permissions(user.role, user.permissions))
    except (TypeError, ValueError):
        return []


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    registry: Annotated[PermissionRegistry, Depends(get_permission_registry)],
) -> LoginResponse:
    """
    Authenticate with username and password and start a server-side session.
    The session id is returned in an HttpOnly cookie.
    """
    settings = get_settings()
    user = db.query(User).filter(User.username == body.username).first()
    if user is None or not verify_password(body.password, user.password_hash):
        raise _unauthorized("Invalid username or password.")

    # Drop any session the client already had so a fresh id is issued on login.
    previous_sid = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if previous_sid:
        destroy_session(db, previous_sid)

    ttl = timedelta(hours=settings.SESSION_TTL_HOURS)
    sid = create_session(db, user.id, ttl)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=sid,
        max_age=int(ttl.total_seconds()),
        httponly=True,
        secure=settings.APP_ENV == "prod",
        samesite="lax",
    )
    logger.info("User %s logged in", user.id)
    current_user = CurrentUser.model_validate(user)
    return LoginResponse(
        user=current_user,
        effective_permissions=_effective_permissions(registry, current_user),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """End the current session (if any) and clear the cookie. Safe to call twice."""
    cookie_name = get_settings().SESSION_COOKIE_NAME
    sid = request.cookies.get(cookie_name)
    if sid:
        destroy_session(db, sid)
    response.delete_cookie(cookie_name)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=MeResponse)
def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    registry: Annotated[PermissionRegistry, Depends(get_permission_registry)],
) -> MeResponse:
    """Current user and the permissions resolved from role and overrides."""
    return MeResponse(
        user=current_user,
        effective_permissions=_effective_permissions(registry, current_user),
    )
