import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studystats.models.session import Session
from studystats.services.date_resolver import to_utc

TIMESTAMP_FIELDS = ("start_time", "end_time")


def _normalize(data: dict) -> dict:
    # Stored in UTC; the local calendar is applied when statistics are read
    return {
        key: to_utc(value) if key in TIMESTAMP_FIELDS and value is not None else value
        for key, value in data.items()
    }


async def get_sessions(
    db: AsyncSession,
    user_id: uuid.UUID,
    limit: int = 50,
    offset: int = 0,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> list[Session]:
    query = select(Session).where(Session.user_id == user_id)
    if start_date:
        query = query.where(Session.start_time >= to_utc(start_date))
    if end_date:
        query = query.where(Session.start_time <= to_utc(end_date))
    query = query.order_by(Session.start_time.desc()).limit(limit).offset(offset)
    result = await db.execute(query)
    return list(result.scalars().all())


async def _get_owned(db: AsyncSession, user_id: uuid.UUID, session_id: uuid.UUID) -> Session | None:
    result = await db.execute(
        select(Session).where(Session.id == session_id, Session.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def create_session(db: AsyncSession, user_id: uuid.UUID, data: dict) -> Session:
    session = Session(user_id=user_id, **_normalize(data))
    db.add(session)
    await db.flush()
    await db.refresh(session)
    return session


async def update_session(
    db: AsyncSession, user_id: uuid.UUID, session_id: uuid.UUID, data: dict
) -> Session | None:
    session = await _get_owned(db, user_id, session_id)
    if session is None:
        return None

    for key, value in _normalize(data).items():
        if value is not None:
            setattr(session, key, value)
    session.updated_at = datetime.now(timezone.utc)

    await db.flush()
    await db.refresh(session)
    return session


async def add_focus_time(
    db: AsyncSession, user_id: uuid.UUID, session_id: uuid.UUID, seconds: int
) -> Session | None:
    """Add focused seconds to a session, running or finished."""
    session = await _get_owned(db, user_id, session_id)
    if session is None:
        return None

    session.focused_seconds += seconds
    session.duration_seconds = max(session.duration_seconds, session.focused_seconds)
    session.updated_at = datetime.now(timezone.utc)

    await db.flush()
    await db.refresh(session)
    return session
