"""User management endpoints (admin only): list users and set permission overrides."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_permission_registry, require_admin
from app.core.database import get_db
from app.models.user import User
from app.schemas.auth import (
    CurrentUser,
    PermissionsUpdateRequest,
    UserListItem,
    UsersListResponse,
)
from app.services.permissions import PermissionRegistry

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users (admin only)."""
    users = db.query(User).order_by(User.id).all()
    return UsersListResponse(users=[UserListItem.model_validate(u) for u in users])


@router.put("/{user_id}/permissions", response_model=UserListItem)
def set_user_permissions(
    user_id: int,
    body: PermissionsUpdateRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
    registry: Annotated[PermissionRegistry, Depends(get_permission_registry)],
) -> UserListItem:
    """Replace a user's explicit permission overrides. Unknown permission names are rejected."""
    names: list[str] | None = None
    if body.permissions is not None:
        names = sorted({name.strip() for name in body.permissions if name.strip()})
        unknown = sorted(set(names) - registry.known_permissions)
        if unknown:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown permissions: {', '.join(unknown)}",
            )
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    user.permissions = names
    db.commit()
    db.refresh(user)
    logger.info("Admin %s set permission overrides for user %s: %s", admin.id, user_id, names)
    return UserListItem.model_validate(user)
