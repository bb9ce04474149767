"""Request/response schemas for branch endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class BranchIn(BaseModel):
    """Body for creating or updating a branch."""

    name: str | None = Field(default=None, max_length=255)
    code: str | None = Field(default=None, max_length=64)


class BranchOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str | None = None


class BranchesResponse(BaseModel):
    branches: list[BranchOut]


class MessageResponse(BaseModel):
    message: str
