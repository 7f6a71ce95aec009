"""Database engines and sessions, built from the Settings handed to each caller.

One engine is kept per database URL and reused across requests.
:func:`get_db` is the request-scoped session: it commits when the handler
returns and rolls back when it raises.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from contractdesk.core.config import Settings, get_settings

_engines: dict[str, AsyncEngine] = {}


class Base(DeclarativeBase):
    """All ORM models inherit from this base."""


def create_engine(app_settings: Settings, **kwargs) -> AsyncEngine:
    """Create a new engine for ``app_settings.database_url``."""
    if app_settings.database_url.startswith("sqlite"):
        # aiosqlite runs the connection in a worker thread
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_async_engine(app_settings.database_url, **kwargs)


def get_engine(app_settings: Settings) -> AsyncEngine:
    engine = _engines.get(app_settings.database_url)
    if engine is None:
        engine = _engines[app_settings.database_url] = create_engine(app_settings)
    return engine


def session_factory(app_settings: Settings) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=get_engine(app_settings), expire_on_commit=False, autoflush=False)


async def dispose_engines() -> None:
    while _engines:
        _, engine = _engines.popitem()
        await engine.dispose()


async def get_db(
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory(app_settings)() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
