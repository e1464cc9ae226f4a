import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from studystats.database import get_db
from studystats.dependencies import get_current_user
from studystats.models.user import User
from studystats.schemas.stats import StatisticsResponse
from studystats.services import stats_service
from studystats.services.date_resolver import Window

router = APIRouter(prefix="/statistics", tags=["statistics"])


@router.get("", response_model=StatisticsResponse)
async def get_statistics(
    window: Window = Query(default=Window.DAILY),
    day: date = Query(alias="date"),
    user_id: uuid.UUID = Query(alias="userId"),
    tz: str | None = Query(default=None, max_length=64),
    week_start: int | None = Query(default=None, alias="weekStart", ge=0, le=6),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Pre-aggregated counters for the window containing ``date`` on the caller's calendar."""
    if user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Statistics are only available for the authenticated user",
        )

    tz_name = stats_service.timezone_for(user, tz)
    return await stats_service.get_statistics(db, user.id, window, day, tz_name, week_start)
