"""
Database connection using SQLAlchemy's async engine.

The only thing we persist is finished analyses (append-only), so the
schema is a single table. SQLite (via aiosqlite) is the default so the
service runs with zero setup; point DATABASE_URL at
postgresql+asyncpg://... to use Postgres instead, no code changes needed.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from claimcheck.config import get_settings

# Load configuration (database URL) from environment variables
settings = get_settings()

# Connection pool
# echo=True logs all SQL statements (useful for debugging, keep off in production)
engine = create_async_engine(settings.database_url, echo=settings.database_echo)

# Factory that creates database sessions
# expire_on_commit=False keeps objects usable after commit (needed for async)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def init_db(bind: AsyncEngine = engine) -> None:
    """
    Create all tables defined on Base.

    Safe to run repeatedly: existing tables are left alone.
    """
    # Import models so Base.metadata knows about them
    from claimcheck.models.analysis import Analysis  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncSession:
    """Dependency that yields a database session."""
    async with async_session() as session:
        yield session
