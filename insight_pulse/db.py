from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from insight_pulse.config import settings

Base = declarative_base()


def get_database_url() -> str:
    """Normalize plain driver URLs to their async counterparts."""
    db_url = settings.database_url
    if db_url.startswith("postgres://"):
        db_url = "postgresql+asyncpg://" + db_url[len("postgres://"):]
    elif db_url.startswith("postgresql://"):
        db_url = "postgresql+asyncpg://" + db_url[len("postgresql://"):]
    elif db_url.startswith("sqlite://"):
        db_url = "sqlite+aiosqlite://" + db_url[len("sqlite://"):]
    return db_url


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """SQLite ignores FOREIGN KEY clauses unless each connection opts in."""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(db_url: str) -> AsyncEngine:
    if "sqlite" in db_url:
        sqlite_engine = create_async_engine(db_url, connect_args={"check_same_thread": False}, poolclass=NullPool)
        enable_sqlite_foreign_keys(sqlite_engine)
        return sqlite_engine
    return create_async_engine(db_url, pool_pre_ping=True)


engine = build_engine(get_database_url())
SessionLocal = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session
