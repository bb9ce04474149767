"""API routes mounted under API_PREFIX."""

from fastapi import APIRouter

from app.api.v1 import auth, branches, health, images, settings, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(branches.router, prefix="/branches", tags=["branches"])
router.include_router(images.router, tags=["images"])
router.include_router(settings.router, tags=["settings"])


@router.get("")
def api_root() -> dict[str, str]:
    """API discovery payload."""
    return {"message": "Student Management API"}
