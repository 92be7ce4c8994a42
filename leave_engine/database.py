"""Database wiring for the leave engine.

One async engine per process, sized by ``DATABASE_POOL_SIZE`` /
``DATABASE_MAX_OVERFLOW``. Repositories receive an ``AsyncSession``;
``get_db`` is the unit of work used by scripts and embedding services.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from leave_engine.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.ENVIRONMENT == "development",
    pool_size=settings.DATABASE_POOL_SIZE,
    max_overflow=settings.DATABASE_MAX_OVERFLOW,
    pool_pre_ping=True,
)

# Loaded policies and leaves stay readable after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base for employees, policies, periods and leaves."""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One leave-engine unit of work: commit if the caller succeeds, else roll back."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
