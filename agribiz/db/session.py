# agribiz/db/session.py
# -----------------------------------------------------------------------------
# SQLAlchemy async engine/session/base
# - injected into routers with FastAPI Depends(get_session)
# - SQLite by default; switch to PostgreSQL by changing the URL only
# -----------------------------------------------------------------------------
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from agribiz.core.config import settings

Base = declarative_base()


def make_engine(url: str) -> AsyncEngine:
    kwargs = {"echo": False}
    if url.startswith("sqlite"):
        # aiosqlite connections are cheap; avoid pooling them across event loops
        kwargs["poolclass"] = NullPool
    return create_async_engine(url, **kwargs)


engine = make_engine(settings.DATABASE_URL)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def create_tables(bind: AsyncEngine = engine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request scoped session."""
    async with AsyncSessionLocal() as session:
        yield session
