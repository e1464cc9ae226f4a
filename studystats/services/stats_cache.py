import logging
import uuid
from datetime import date, datetime, timezone

from pydantic import ValidationError

from studystats.config import settings
from studystats.schemas.stats import CachedAggregate, StatisticsAggregate
from studystats.services.date_resolver import DateResolver, Window

logger = logging.getLogger(__name__)

KEY_PREFIX = "stats"


class StatisticsCache:
    """Redis-backed read-through cache for statistics aggregates.

    Entries are keyed by ``(window, boundary, user)``. Boundaries used for
    invalidation come from the same ``DateResolver`` the read path uses, so a
    write always evicts the key the next read will look up.
    """

    def __init__(
        self,
        redis_client,
        resolver: DateResolver,
        ttl_seconds: int | None = None,
    ):
        self.redis = redis_client
        self.resolver = resolver
        self.ttl_seconds = settings.STATS_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds

    @staticmethod
    def key(window: Window, boundary: date, user_id: uuid.UUID | str) -> str:
        return f"{KEY_PREFIX}:{Window(window).value}:{boundary.isoformat()}:{user_id}"

    async def get_entry(
        self, window: Window, boundary: date, user_id: uuid.UUID | str
    ) -> CachedAggregate | None:
        key = self.key(window, boundary, user_id)
        raw = await self.redis.get(key)
        if raw is None:
            return None
        try:
            return CachedAggregate.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable statistics cache entry %s", key)
            await self.redis.delete(key)
            return None

    async def get(
        self, window: Window, boundary: date, user_id: uuid.UUID | str
    ) -> StatisticsAggregate | None:
        """Return the cached aggregate, or None on a miss."""
        entry = await self.get_entry(window, boundary, user_id)
        return entry.aggregate if entry else None

    async def put(
        self,
        window: Window,
        boundary: date,
        user_id: uuid.UUID | str,
        aggregate: StatisticsAggregate,
    ) -> None:
        entry = CachedAggregate(aggregate=aggregate, cached_at=datetime.now(timezone.utc))
        await self.redis.set(
            self.key(window, boundary, user_id),
            entry.model_dump_json(by_alias=True),
            ex=self.ttl_seconds or None,
        )

    def keys_for(self, user_id: uuid.UUID | str, day: date | None = None) -> list[str]:
        """Keys of every window containing ``day`` (local today when omitted)."""
        day = day or self.resolver.today()
        return [
            self.key(window, self.resolver.boundary(window, day), user_id)
            for window in Window
        ]

    async def invalidate(
        self, user_id: uuid.UUID | str, day: date | None = None
    ) -> list[str]:
        """Evict the daily, weekly and monthly entries a write on ``day`` can change."""
        keys = self.keys_for(user_id, day)
        await self.redis.delete(*keys)
        logger.debug("Invalidated statistics cache keys %s", keys)
        return keys
