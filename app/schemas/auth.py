"""Request/response schemas for auth and user management endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class CurrentUser(BaseModel):
    """Authenticated user bound to the request by the session dependency."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: str
    full_name: str | None = None
    email: str | None = None
    permissions: list[str] | None = Field(
        default=None,
        description="Explicit per-user permission overrides (added to role defaults).",
    )


class MeResponse(BaseModel):
    """Current user plus the permissions resolved from role and overrides."""

    user: CurrentUser
    effective_permissions: list[str] = Field(default_factory=list)


class LoginResponse(MeResponse):
    """Returned by POST /auth/login; the session id is set as a cookie, not returned."""

    message: str = "Login successful"


class UserListItem(BaseModel):
    """User entry for admin list (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: str
    full_name: str | None = None
    email: str | None = None
    permissions: list[str] | None = None


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    users: list[UserListItem]


class PermissionsUpdateRequest(BaseModel):
    """Replace a user's explicit permission overrides. null clears them."""

    permissions: list[str] | None = Field(
        default=None,
        description="Permission names granted in addition to the user's role defaults.",
    )
