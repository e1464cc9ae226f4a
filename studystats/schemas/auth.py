import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from studystats.services.date_resolver import resolve_timezone


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    display_name: str | None = None
    timezone: str | None = Field(default=None, max_length=64)

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, value: str | None) -> str | None:
        if value is not None:
            resolve_timezone(value)
        return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    display_name: str | None
    settings_json: dict | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class SettingsUpdateRequest(BaseModel):
    settings_json: dict
