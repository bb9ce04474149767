"""Pydantic request/response schemas."""

from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    MeResponse,
    PermissionsUpdateRequest,
    UserListItem,
    UsersListResponse,
)
from app.schemas.branch import BranchesResponse, BranchIn, BranchOut, MessageResponse
from app.schemas.health import HealthResponse
from app.schemas.settings import (
    SettingItem,
    SettingsResponse,
    SettingUpdateRequest,
    TestEmailResponse,
)
from app.schemas.upload import ImageUploadResponse

__all__ = [
    "BranchIn",
    "BranchOut",
    "BranchesResponse",
    "CurrentUser",
    "HealthResponse",
    "ImageUploadResponse",
    "LoginRequest",
    "LoginResponse",
    "MeResponse",
    "MessageResponse",
    "PermissionsUpdateRequest",
    "SettingItem",
    "SettingUpdateRequest",
    "SettingsResponse",
    "TestEmailResponse",
    "UserListItem",
    "UsersListResponse",
]
