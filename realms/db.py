# realms/db.py
from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)

from .config import DATABASE_URL
from .models import Base


def make_engine(url: str = DATABASE_URL, **kwargs) -> AsyncEngine:
    """Create an async SQLAlchemy engine."""
    kwargs.setdefault("echo", False)  # True if you want to see SQL
    return create_async_engine(url, **kwargs)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
