"""Request/response schemas for admin-editable settings and the test email endpoint."""

from pydantic import BaseModel, ConfigDict, Field


class SettingItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    value: str | None = None


class SettingsResponse(BaseModel):
    settings: list[SettingItem]


class SettingUpdateRequest(BaseModel):
    value: str | None = Field(default=None, max_length=10_000)


class TestEmailResponse(BaseModel):
    message: str
