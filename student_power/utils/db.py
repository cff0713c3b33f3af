"""Database connection utilities."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from student_power.config import get_settings

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


def get_db_url() -> str:
    """Build database URL from settings."""
    settings = get_settings()
    return (
        f"postgresql+asyncpg://{settings.DB_USER}:{settings.DB_PASSWORD}"
        f"@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}"
    )


class DatabaseManager:
    """Database manager handling engine and session factory lifecycle."""

    def __init__(self) -> None:
        """Initialize manager with no engine."""
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        """Get or create database engine."""
        if self._engine is None:
            settings = get_settings()
            self._engine = create_async_engine(
                get_db_url(),
                echo=settings.DEBUG,
                pool_pre_ping=True,  # Verify connections before using
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create session factory bound to the engine."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._session_factory

    async def verify_connection(self) -> bool:
        """Verify database connection. Raises exception if connection fails."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def close(self) -> None:
        """Dispose engine and drop the session factory."""
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None


# Global database manager instance
db_manager = DatabaseManager()


async def run_migrations() -> None:
    """Run database migrations using Alembic."""
    from alembic import command
    from alembic.config import Config

    project_root = Path(__file__).resolve().parents[2]
    alembic_ini_path = project_root / "alembic.ini"

    if not alembic_ini_path.exists():
        raise FileNotFoundError(
            f"Alembic configuration file not found at {alembic_ini_path}"
        )

    alembic_cfg = Config(str(alembic_ini_path))
    # configparser treats % as interpolation
    alembic_cfg.set_main_option("sqlalchemy.url", get_db_url().replace("%", "%%"))

    # env.py drives its own event loop, so run it off the current one
    await asyncio.to_thread(command.upgrade, alembic_cfg, "head")


async def init_db() -> None:
    """Run migrations and verify the connection. Exits on failure."""
    settings = get_settings()
    try:
        if settings.RUN_MIGRATIONS:
            await run_migrations()
        await db_manager.verify_connection()
        logger.info("Database initialized", extra={"db_host": settings.DB_HOST})
    except Exception as e:
        logger.critical(f"Failed to initialize database: {e}")
        sys.exit(1)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for one request."""
    async with db_manager.session_factory() as session:
        yield session


async def close_db() -> None:
    """Close database connections."""
    await db_manager.close()
