import uuid
from datetime import date

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from studystats.config import settings
from studystats.models.session import Session
from studystats.models.task import TASK_STATUS_DONE, Task
from studystats.models.user import User
from studystats.services.date_resolver import (
    Window,
    local_midnight_utc,
    resolve_timezone,
    window_range,
)


def timezone_for(user: User, requested: str | None = None) -> str:
    """Zone used to read the caller's calendar date: request, then profile, then default."""
    tz_name = requested or user.timezone or settings.DEFAULT_TIMEZONE
    resolve_timezone(tz_name)  # raises ValueError for unknown zones
    return tz_name


async def get_statistics(
    db: AsyncSession,
    user_id: uuid.UUID,
    window: Window,
    day: date,
    tz_name: str,
    week_start: int | None = None,
) -> dict:
    """Aggregate one window for one local calendar date.

    ``day`` is a date on the caller's wall clock in ``tz_name``; it is snapped
    to the start of its window (weeks begin on the caller's ``week_start``,
    else ``WEEK_START_DAY``) and the local midnights bounding the window are
    converted to UTC for the query. The server clock plays no part.
    """
    start_day, end_day = window_range(window, day, week_start)
    start = local_midnight_utc(start_day, tz_name)
    end = local_midnight_utc(end_day, tz_name)

    session_result = await db.execute(
        select(
            func.coalesce(func.sum(Session.focused_seconds), 0).label("focus_time"),
            func.coalesce(
                func.sum(case((Session.is_complete == True, 1), else_=0)), 0  # noqa: E712
            ).label("sessions"),
        ).where(
            Session.user_id == user_id,
            Session.start_time >= start,
            Session.start_time < end,
        )
    )
    row = session_result.one()

    tasks_done = await db.scalar(
        select(func.count(Task.id)).where(
            Task.user_id == user_id,
            Task.status == TASK_STATUS_DONE,
            Task.completed_at >= start,
            Task.completed_at < end,
        )
    )

    return {
        "window": Window(window),
        "date": start_day,
        "timezone": tz_name,
        "focus_time": row.focus_time,
        "sessions": row.sessions,
        "tasks_done": tasks_done or 0,
    }
