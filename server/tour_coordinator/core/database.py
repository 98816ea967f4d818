"""Async engine, session dependency and the unit of work used by services."""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from .config import Settings, settings
from .exceptions import ConcurrentUpdateError


def engine_options(config: Settings) -> dict[str, Any]:
    """
    Keyword arguments for ``create_async_engine``.

    In-memory SQLite needs a single shared connection; server databases
    get a sized pool.
    """
    options: dict[str, Any] = {"echo": config.db_echo, "pool_pre_ping": True}
    if not config.uses_sqlite:
        options.update(pool_size=config.db_pool_size, max_overflow=config.db_max_overflow)
        return options

    options["connect_args"] = {"check_same_thread": False}
    if ":memory:" in config.database_url:
        options["poolclass"] = StaticPool
    return options


def build_engine(config: Settings) -> AsyncEngine:
    return create_async_engine(config.database_url, **engine_options(config))


engine = build_engine(settings)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Declarative base for tours, staff, rejections and notifications
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session dependency.

    Services commit through ``unit_of_work``; anything still open when a
    request fails is rolled back here.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def unit_of_work(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a block of writes as a single transaction.

    Everything flushed inside the block is committed together when it exits
    cleanly, and rolled back together when it raises. Versioned rows that
    changed since they were read surface as ``ConcurrentUpdateError``.

    Args:
        session: Session the writes are issued on

    Yields:
        AsyncSession: The same session
    """
    try:
        yield session
        await session.commit()
    except StaleDataError as e:
        await session.rollback()
        raise ConcurrentUpdateError() from e
    except BaseException:
        await session.rollback()
        raise


async def ping(session: AsyncSession) -> None:
    """Round-trip a trivial query; raises if the database is unreachable."""
    await session.execute(text("SELECT 1"))


async def init_db() -> None:
    """Create any missing tables. Migrations own the schema outside local runs."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
