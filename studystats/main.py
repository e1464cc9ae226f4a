from contextlib import asynccontextmanager

import redis.asyncio as redis
import sentry_sdk
from fastapi import FastAPI
from sqlalchemy import text

from studystats.config import settings
from studystats.database import engine

# Initialize Sentry
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=0.2 if settings.ENVIRONMENT == "production" else 1.0,
        send_default_pii=False,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: verify DB connection and connect Redis
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))

    app.state.redis = redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    await app.state.redis.ping()

    yield

    # Shutdown
    await app.state.redis.aclose()
    await engine.dispose()


app = FastAPI(
    title="Study Statistics API",
    version="0.1.0",
    lifespan=lifespan,
)

from studystats.middleware.error_handler import register_error_handlers  # noqa: E402

register_error_handlers(app)

# Routers
from studystats.routers.auth import router as auth_router  # noqa: E402
from studystats.routers.sessions import router as sessions_router  # noqa: E402
from studystats.routers.stats import router as stats_router  # noqa: E402
from studystats.routers.tasks import router as tasks_router  # noqa: E402

app.include_router(auth_router)
app.include_router(tasks_router)
app.include_router(sessions_router)
app.include_router(stats_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
