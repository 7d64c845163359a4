"""
Restaurant Ledger - Database Session

Async SQLAlchemy engine for reporting reads against the hosted store.
Connections are opened read-only and every request's transaction is
rolled back when the request ends.
"""

from typing import AsyncGenerator, Dict

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


class Base(DeclarativeBase):
    """Declarative base for the mapped store tables."""
    metadata = MetaData()


def server_settings() -> Dict[str, str]:
    """Postgres session settings applied to every pooled connection."""
    options = {"application_name": settings.database_application_name}
    if settings.database_read_only:
        options["default_transaction_read_only"] = "on"
    if settings.database_statement_timeout_ms:
        options["statement_timeout"] = str(settings.database_statement_timeout_ms)
    return options


engine = create_async_engine(
    settings.database_url_async,
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
    connect_args={"server_settings": server_settings()},
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session for FastAPI's Depends().

    Reports never write, so the transaction is rolled back, not committed.
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


async def close_db():
    await engine.dispose()
