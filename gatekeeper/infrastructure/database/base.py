"""
Database configuration and base models.
"""
from typing import Any, Optional

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from gatekeeper.core.config import Settings, get_settings

# Custom naming convention for constraints
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)


class Base(DeclarativeBase):
    """
    Base class for all database models.
    """
    metadata = metadata


def create_engine(settings: Optional[Settings] = None, **engine_kwargs: Any) -> AsyncEngine:
    """
    Create an async engine from settings.

    Args:
        settings: Settings holding ``DATABASE_URL``
        **engine_kwargs: Extra arguments for ``create_async_engine``

    Returns:
        AsyncEngine
    """
    settings = settings or get_settings()
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        pool_pre_ping=True,
        **engine_kwargs,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables. Migrations are left to the deployment."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
