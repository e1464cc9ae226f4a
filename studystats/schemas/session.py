import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class SessionCreate(BaseModel):
    start_time: datetime
    end_time: datetime | None = None
    duration_seconds: int = Field(default=0, ge=0)
    focused_seconds: int = Field(default=0, ge=0)
    distraction_count: int = Field(default=0, ge=0)
    is_complete: bool = False


class SessionUpdate(BaseModel):
    end_time: datetime | None = None
    duration_seconds: int | None = Field(default=None, ge=0)
    focused_seconds: int | None = Field(default=None, ge=0)
    distraction_count: int | None = Field(default=None, ge=0)
    is_complete: bool | None = None


class FocusTimeCreate(BaseModel):
    seconds: int = Field(gt=0, le=86400)


class SessionResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    start_time: datetime
    end_time: datetime | None
    duration_seconds: int
    focused_seconds: int
    distraction_count: int
    is_complete: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
