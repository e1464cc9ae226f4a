from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from studystats.services.date_resolver import Window


class StatisticsResponse(BaseModel):
    """Wire shape returned by ``GET /statistics``: one object per window."""

    window: Window
    date: date  # window start in the caller's local calendar
    timezone: str
    focus_time: int  # seconds
    sessions: int
    tasks_done: int


class StatisticsAggregate(BaseModel):
    """Display model for the Focus Time / Sessions / Tasks Done counters."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    focus_time: int = Field(default=0, ge=0, strict=True)  # seconds
    sessions: int = Field(default=0, ge=0, strict=True)
    tasks_done: int = Field(default=0, ge=0, strict=True)


class CachedAggregate(BaseModel):
    aggregate: StatisticsAggregate
    cached_at: datetime
