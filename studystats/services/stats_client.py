import logging
import uuid
from collections.abc import Mapping
from datetime import date, datetime

import httpx
from pydantic import ValidationError

from studystats.config import settings
from studystats.models.task import TASK_STATUS_DONE
from studystats.schemas.stats import StatisticsAggregate
from studystats.services.date_resolver import DateResolver, Window
from studystats.services.stats_cache import StatisticsCache

logger = logging.getLogger(__name__)

# Wire name -> display name. One object per window, renamed field by field.
FIELD_MAP = {
    "focus_time": "focusTime",
    "sessions": "sessions",
    "tasks_done": "tasksDone",
}


class StatisticsContractError(ValueError):
    """The statistics service answered with a shape other than one aggregate object."""


def map_aggregate(payload) -> StatisticsAggregate:
    """Map a ``/statistics`` response body onto the display model.

    Missing counters default to 0. Anything that is not a single JSON object
    (a list of per-event entries, a bare number, ...) is rejected here so it
    never reaches rendering code.
    """
    if not isinstance(payload, Mapping):
        logger.error(
            "Statistics response violates the single-object contract: got %s",
            type(payload).__name__,
        )
        raise StatisticsContractError(
            f"Expected a statistics object, got {type(payload).__name__}"
        )

    mapped = {local: payload.get(wire, 0) for wire, local in FIELD_MAP.items()}
    try:
        return StatisticsAggregate.model_validate(mapped)
    except ValidationError as e:
        logger.error("Statistics response has invalid counters: %s", mapped)
        raise StatisticsContractError(f"Invalid statistics counters: {e}") from e


class StatisticsClient:
    """Reads statistics through the cache and performs the writes that change them.

    Every write awaits ``cache.invalidate`` before returning, so the next read
    for the affected local day is always served fresh.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        cache: StatisticsCache,
        resolver: DateResolver,
    ):
        self.http = http_client
        self.cache = cache
        self.resolver = resolver

    @classmethod
    def create(
        cls,
        access_token: str,
        redis_client,
        resolver: DateResolver | None = None,
        base_url: str | None = None,
    ) -> "StatisticsClient":
        """Build a client with its own HTTP session against ``STATS_API_URL``."""
        resolver = resolver or DateResolver()
        http_client = httpx.AsyncClient(
            base_url=base_url or settings.STATS_API_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=settings.STATS_HTTP_TIMEOUT_SECONDS,
        )
        return cls(http_client, StatisticsCache(redis_client, resolver), resolver)

    async def aclose(self) -> None:
        await self.http.aclose()

    # --- Reads ---

    async def fetch_aggregate(
        self, window: Window, boundary: date, user_id: uuid.UUID | str
    ) -> StatisticsAggregate:
        """Fetch one pre-aggregated window from the service, bypassing the cache.

        The window start echoed back in ``date`` must be the one this
        resolver computes, otherwise the totals belong to another window.
        """
        resp = await self.http.get(
            "/statistics",
            params={
                "window": Window(window).value,
                "date": boundary.isoformat(),
                "userId": str(user_id),
                "tz": self.resolver.tz_name,
                "weekStart": self.resolver.week_start,
            },
        )
        resp.raise_for_status()
        payload = resp.json()
        aggregate = map_aggregate(payload)

        expected = self.resolver.boundary(window, boundary).isoformat()
        served = payload.get("date")
        if served is not None and served != expected:
            logger.error(
                "Statistics service answered %s window starting %s, expected %s",
                Window(window).value, served, expected,
            )
            raise StatisticsContractError(
                f"Window starts on {served}, expected {expected}"
            )
        return aggregate

    async def get_aggregate(
        self, window: Window, user_id: uuid.UUID | str, day: date | None = None
    ) -> StatisticsAggregate:
        """Read-through lookup for the window containing ``day`` (local today by default)."""
        boundary = self.resolver.boundary(window, day)
        cached = await self.cache.get(window, boundary, user_id)
        if cached is not None:
            return cached

        aggregate = await self.fetch_aggregate(window, boundary, user_id)
        await self.cache.put(window, boundary, user_id, aggregate)
        return aggregate

    async def get_overview(self, user_id: uuid.UUID | str) -> dict[Window, StatisticsAggregate]:
        return {window: await self.get_aggregate(window, user_id) for window in Window}

    # --- Writes ---

    async def start_session(
        self, user_id: uuid.UUID | str, started_at: datetime | None = None
    ) -> dict:
        start_time = started_at or self.resolver.now()
        resp = await self.http.post("/sessions", json={"start_time": start_time.isoformat()})
        resp.raise_for_status()
        await self._after_write(user_id, start_time, refresh=False)
        return resp.json()

    async def add_focus_time(
        self,
        user_id: uuid.UUID | str,
        session_id: uuid.UUID | str,
        seconds: int,
        refresh: bool = True,
    ) -> StatisticsAggregate | None:
        """Log focus time on a session; returns the refreshed aggregate of the day it started."""
        resp = await self.http.post(f"/sessions/{session_id}/focus", json={"seconds": seconds})
        resp.raise_for_status()
        session = resp.json()
        return await self._after_write(
            user_id, datetime.fromisoformat(session["start_time"]), refresh=refresh
        )

    async def complete_session(
        self,
        user_id: uuid.UUID | str,
        session_id: uuid.UUID | str,
        focused_seconds: int | None = None,
        refresh: bool = True,
    ) -> StatisticsAggregate | None:
        ended_at = self.resolver.now()
        body: dict = {"end_time": ended_at.isoformat(), "is_complete": True}
        if focused_seconds is not None:
            body["focused_seconds"] = focused_seconds

        resp = await self.http.patch(f"/sessions/{session_id}", json=body)
        resp.raise_for_status()
        session = resp.json()
        return await self._after_write(
            user_id, datetime.fromisoformat(session["start_time"]), refresh=refresh
        )

    async def create_task(self, user_id: uuid.UUID | str, title: str, **fields) -> dict:
        resp = await self.http.post("/tasks", json={"title": title, **fields})
        resp.raise_for_status()
        task = resp.json()
        if task.get("completed_at"):
            await self._after_write(
                user_id, datetime.fromisoformat(task["completed_at"]), refresh=False
            )
        return task

    async def complete_task(
        self,
        user_id: uuid.UUID | str,
        task_id: uuid.UUID | str,
        refresh: bool = True,
    ) -> StatisticsAggregate | None:
        completed_at = self.resolver.now()
        resp = await self.http.patch(
            f"/tasks/{task_id}",
            json={"status": TASK_STATUS_DONE, "completed_at": completed_at.isoformat()},
        )
        resp.raise_for_status()
        return await self._after_write(user_id, completed_at, refresh=refresh)

    async def _after_write(
        self, user_id: uuid.UUID | str, occurred_at: datetime, refresh: bool
    ) -> StatisticsAggregate | None:
        day = self.resolver.local_date(occurred_at)
        await self.cache.invalidate(user_id, day)
        if not refresh:
            return None
        return await self.get_aggregate(Window.DAILY, user_id, day)
