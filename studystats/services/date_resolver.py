"""Calendar boundaries for the statistics windows.

Every "today", "start of week" and "start of month" in the project comes from
this module, on the client side as well as the server side. Boundaries are
plain ``date`` objects in the observer's local calendar; they are never
derived from a fixed-offset clock.
"""
import enum
import logging
from collections.abc import Callable
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tzlocal import get_localzone_name

from studystats.config import settings

logger = logging.getLogger(__name__)


class Window(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def local_timezone_name() -> str:
    """IANA name of the host's zone (honours ``TZ``)."""
    name = get_localzone_name()
    if not name:
        logger.warning(
            "Host timezone has no IANA name, using %s", settings.DEFAULT_TIMEZONE
        )
        return settings.DEFAULT_TIMEZONE
    return name


def resolve_timezone(tz: str | tzinfo | None) -> tzinfo:
    """Turn an IANA name into a tzinfo. None means the host's local zone."""
    if tz is None:
        tz = local_timezone_name()
    if isinstance(tz, tzinfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {tz}")


def to_utc(value: datetime) -> datetime:
    """Normalize a timestamp to UTC. Naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def window_start(window: Window, day: date, week_start: int | None = None) -> date:
    """First calendar day of the window that contains ``day``."""
    window = Window(window)
    if week_start is None:
        week_start = settings.WEEK_START_DAY

    if window is Window.DAILY:
        return day
    if window is Window.WEEKLY:
        return day - timedelta(days=(day.weekday() - week_start) % 7)
    return day.replace(day=1)


def window_range(
    window: Window, day: date, week_start: int | None = None
) -> tuple[date, date]:
    """Return ``(start, end)`` of the window containing ``day``; ``end`` is exclusive."""
    window = Window(window)
    start = window_start(window, day, week_start)

    if window is Window.DAILY:
        end = start + timedelta(days=1)
    elif window is Window.WEEKLY:
        end = start + timedelta(days=7)
    elif start.month == 12:
        end = date(start.year + 1, 1, 1)
    else:
        end = date(start.year, start.month + 1, 1)
    return start, end


def local_midnight_utc(day: date, tz: str | tzinfo) -> datetime:
    """The UTC instant at which ``day`` begins on the wall clock of ``tz``."""
    local = datetime.combine(day, time.min, tzinfo=resolve_timezone(tz))
    return local.astimezone(timezone.utc)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DateResolver:
    """Local-calendar clock shared by the cache, the client and the UI.

    ``tz`` defaults to the host's zone and must be a named zone: the name is
    sent to the statistics service, which only understands IANA names.
    ``clock`` must return an aware datetime; it defaults to the system clock
    and exists so callers can pin the instant.
    """

    def __init__(
        self,
        tz: str | tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
        week_start: int | None = None,
    ):
        self.tz = resolve_timezone(tz)
        if self.tz is timezone.utc:
            self.tz_name = "UTC"
        else:
            self.tz_name = getattr(self.tz, "key", None)
        if not self.tz_name:
            raise ValueError(f"Timezone {self.tz!r} has no IANA name")

        self.clock = clock or _utc_now
        self.week_start = settings.WEEK_START_DAY if week_start is None else week_start
        if not 0 <= self.week_start <= 6:
            raise ValueError("week_start must be between 0 (Monday) and 6 (Sunday)")

    def now(self) -> datetime:
        return to_utc(self.clock()).astimezone(self.tz)

    def today(self) -> date:
        return self.now().date()

    def start_of_week(self) -> date:
        return window_start(Window.WEEKLY, self.today(), self.week_start)

    def start_of_month(self) -> date:
        return window_start(Window.MONTHLY, self.today(), self.week_start)

    def boundary(self, window: Window, day: date | None = None) -> date:
        """Start date of ``window`` containing ``day`` (today when omitted)."""
        return window_start(window, day or self.today(), self.week_start)

    def local_date(self, value: datetime) -> date:
        """Local calendar date of an instant."""
        return to_utc(value).astimezone(self.tz).date()
