# src/daily_report/utils/database.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from src.daily_report.config import Settings
from src.daily_report.utils.errors import AppError, InternalError

logger = logging.getLogger(__name__)

# Base class for SQLAlchemy ORM models (for declarative base models)
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # report -> visit_records/comments cascade relies on FK enforcement
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the asynchronous engine.
    The process bootstrap owns it (see app.create_app); nothing here runs at import time.
    """
    url = settings.DATABASE_URL
    kwargs: dict = {
        "echo": settings.DB_ECHO,     # Logs all SQL queries if True
        "pool_pre_ping": True,        # Ensures the connections are valid before using them
    }
    is_sqlite = url.startswith("sqlite")
    if not is_sqlite:
        kwargs["pool_size"] = settings.DB_POOL_SIZE
        kwargs["max_overflow"] = settings.DB_MAX_OVERFLOW

    try:
        engine = create_async_engine(url, **kwargs)
    except SQLAlchemyError as e:
        logger.error("Error creating database engine: %s", e)
        raise

    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    logger.info("Database engine ready: %s", engine.url.render_as_string(hide_password=True))
    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,          # To avoid flushing automatically
        expire_on_commit=False,   # Don't expire objects after commit
    )


async def create_tables(engine: AsyncEngine) -> None:
    # models must be imported so their tables are registered on Base.metadata
    import src.daily_report.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Dependency to retrieve a database session in FastAPI
# Ensures the session is properly closed after use
async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.sessionmaker
    async with session_factory() as session:
        yield session


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    All-or-nothing block: commit when the body finishes, roll back on any
    error (including validation failures raised half-way through).

    Storage errors are logged and re-raised as InternalError so the
    original driver message never reaches the caller. IntegrityError is
    re-raised untouched; callers translate it into a conflict.
    """
    try:
        yield db
        await db.commit()
    except AppError:
        await db.rollback()
        raise
    except IntegrityError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Database operation failed: %s", e)
        raise InternalError() from e
    except Exception:
        await db.rollback()
        raise
