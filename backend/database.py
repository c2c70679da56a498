"""
Delivery store backing: async SQLAlchemy engine and sessions.

The store URL comes from DATABASE_URL. A plain `sqlite:///` URL is upgraded to
the aiosqlite driver; any other async SQLAlchemy URL is used as given. Tables
are created on startup by init_db(); there are no migrations.
"""
import logging

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the deliveries and restaurants tables."""
    pass


def build_engine(database_url: str) -> AsyncEngine:
    url = make_url(database_url)
    connect_args = {}
    if url.drivername == "sqlite":
        url = url.set(drivername="sqlite+aiosqlite")
    if url.drivername.startswith("sqlite"):
        # Requests share the engine across event-loop callbacks
        connect_args["check_same_thread"] = False
    return create_async_engine(url, connect_args=connect_args)


# ── Engine ──────────────────────────────────────────────────────────

engine = build_engine(settings.database_url)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


# ── Helpers ─────────────────────────────────────────────────────────

async def init_db() -> None:
    """Create missing tables. Called once from the app lifespan."""
    import db_models  # noqa: F401  (registers tables on Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"Delivery store ready at {engine.url.render_as_string(hide_password=True)}")


async def ping(db: AsyncSession) -> bool:
    """Round-trip a trivial query; used by the health endpoint."""
    result = await db.execute(text("SELECT 1"))
    return result.scalar() == 1


async def get_db() -> AsyncSession:
    """FastAPI dependency — one session per request."""
    async with async_session() as session:
        yield session
