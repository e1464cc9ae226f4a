"""End-to-end: the statistics client against the real app, near a UTC day boundary."""
from datetime import date, datetime, timezone

import pytest

from studystats.schemas.stats import StatisticsAggregate
from studystats.services.date_resolver import Window


@pytest.mark.asyncio
async def test_late_evening_focus_time_shows_up_today(make_stats_client, test_user):
    """Log 30 minutes at 11 PM in New York (03:00 UTC next day) and read local today."""
    stats_client = make_stats_client()
    assert stats_client.resolver.today() == date(2025, 6, 19)

    # Prime the cache with the empty day, as the dashboard would on load
    empty = await stats_client.get_aggregate(Window.DAILY, test_user.id)
    assert empty == StatisticsAggregate()

    session = await stats_client.start_session(test_user.id)
    refreshed = await stats_client.add_focus_time(test_user.id, session["id"], 30 * 60)

    assert refreshed.focus_time == 1800
    assert await stats_client.cache.get(Window.DAILY, date(2025, 6, 19), test_user.id) == refreshed
    assert (await stats_client.get_aggregate(Window.DAILY, test_user.id)).focus_time == 1800


@pytest.mark.asyncio
async def test_invalidate_then_read_misses_and_refetches(make_stats_client, test_user):
    stats_client = make_stats_client()
    await stats_client.get_overview(test_user.id)

    await stats_client.cache.invalidate(test_user.id)

    today = stats_client.resolver.today()
    assert await stats_client.cache.get(Window.DAILY, today, test_user.id) is None


@pytest.mark.asyncio
async def test_full_study_day(make_stats_client, test_user):
    """Session, focus, completion and a finished task all land in every window."""
    stats_client = make_stats_client()
    overview = await stats_client.get_overview(test_user.id)
    assert all(aggregate == StatisticsAggregate() for aggregate in overview.values())

    session = await stats_client.start_session(test_user.id)
    await stats_client.add_focus_time(test_user.id, session["id"], 600, refresh=False)
    daily = await stats_client.complete_session(test_user.id, session["id"], focused_seconds=1500)
    assert daily == StatisticsAggregate(focus_time=1500, sessions=1, tasks_done=0)

    task = await stats_client.create_task(test_user.id, "Review lecture notes")
    daily = await stats_client.complete_task(test_user.id, task["id"])
    assert daily.tasks_done == 1

    overview = await stats_client.get_overview(test_user.id)
    for window in Window:
        assert overview[window].model_dump(by_alias=True) == {
            "focusTime": 1500,
            "sessions": 1,
            "tasksDone": 1,
        }


@pytest.mark.asyncio
async def test_utc_resolver_would_miss_the_local_day(make_stats_client, test_user):
    """A client reading on the UTC calendar sees the evening's work under tomorrow."""
    local_client = make_stats_client()
    session = await local_client.start_session(test_user.id)
    await local_client.add_focus_time(test_user.id, session["id"], 1800, refresh=False)

    utc_client = make_stats_client(tz="UTC")
    assert utc_client.resolver.today() == date(2025, 6, 20)
    on_local_day = await utc_client.fetch_aggregate(Window.DAILY, date(2025, 6, 19), test_user.id)
    assert on_local_day.focus_time == 0


@pytest.mark.asyncio
async def test_completed_task_yesterday_invalidates_yesterday(make_stats_client, test_user):
    stats_client = make_stats_client()
    yesterday = date(2025, 6, 18)
    await stats_client.cache.put(Window.DAILY, yesterday, test_user.id, StatisticsAggregate())

    await stats_client.create_task(
        test_user.id,
        "Late submission",
        status=2,
        completed_at=datetime(2025, 6, 18, 20, 0, tzinfo=timezone.utc).isoformat(),
    )

    assert await stats_client.cache.get(Window.DAILY, yesterday, test_user.id) is None


@pytest.mark.asyncio
async def test_client_and_service_agree_on_week_start(make_stats_client, test_user):
    sunday_client = make_stats_client(week_start=6)
    # 10 AM on Sunday June 15 in New York
    session = await sunday_client.start_session(
        test_user.id, started_at=datetime(2025, 6, 15, 14, 0, tzinfo=timezone.utc)
    )
    await sunday_client.add_focus_time(test_user.id, session["id"], 900, refresh=False)

    assert sunday_client.resolver.start_of_week() == date(2025, 6, 15)
    weekly = await sunday_client.get_aggregate(Window.WEEKLY, test_user.id)
    assert weekly.focus_time == 900
    assert await sunday_client.cache.get(Window.WEEKLY, date(2025, 6, 15), test_user.id) == weekly

    monday_client = make_stats_client()
    assert (await monday_client.get_aggregate(Window.WEEKLY, test_user.id)).focus_time == 0


@pytest.mark.asyncio
async def test_focus_on_session_started_yesterday_refreshes_yesterday(make_stats_client, test_user):
    stats_client = make_stats_client()
    # 23:50 on June 18 in New York; local today is June 19
    session = await stats_client.start_session(
        test_user.id, started_at=datetime(2025, 6, 19, 3, 50, tzinfo=timezone.utc)
    )

    refreshed = await stats_client.add_focus_time(test_user.id, session["id"], 600)

    assert refreshed.focus_time == 600
    assert await stats_client.cache.get(Window.DAILY, date(2025, 6, 18), test_user.id) == refreshed
    assert (await stats_client.get_aggregate(Window.DAILY, test_user.id)).focus_time == 0
