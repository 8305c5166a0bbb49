"""
Database session configuration
Async PostgreSQL connection using SQLAlchemy 2.0
"""
import os
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

# Base for models
Base = declarative_base()


def build_database_url() -> str:
    """
    Database URL from environment
    Priority: DB_URL (full URL) > DB_USER/DB_PASSWORD/DB_HOST/DB_PORT/DB_NAME
    """
    db_url = os.getenv("DB_URL")

    if not db_url or db_url.startswith("jdbc:"):
        db_user = os.getenv("DB_USER", "dbadmin")
        db_password = os.getenv("DB_PASSWORD", "password")
        db_host = os.getenv("DB_HOST", "localhost")
        db_port = os.getenv("DB_PORT", "5432")
        db_name = os.getenv("DB_NAME", "cardwatch")
        db_url = f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"

    # Convert to async driver
    return db_url.replace("postgresql://", "postgresql+asyncpg://")


def create_engine(url: Optional[str] = None, echo: bool = False) -> AsyncEngine:
    url = url or build_database_url()

    if url.startswith("sqlite"):
        # One shared connection so in-memory databases survive across sessions
        return create_async_engine(url, echo=echo, poolclass=StaticPool)

    return create_async_engine(
        url,
        echo=echo,  # Set to True for SQL logging
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


async def create_schema(engine: AsyncEngine):
    """Create accounts and transactions tables if missing"""
    # Register models on Base.metadata
    from cardwatch.database import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
