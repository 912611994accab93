"""
Database connection and session management for SEOPulse.
"""
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from app.config import settings
from app.models.base import Base

# Convert sync URL to async
DATABASE_URL = settings.DATABASE_URL.replace(
    "postgresql://", "postgresql+asyncpg://"
)

engine = create_async_engine(
    DATABASE_URL,
    echo=settings.ENVIRONMENT == "development",
    pool_pre_ping=True,
    pool_size=10,
    max_overflow=20,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


def get_sync_compatible_session_maker():
    """Create a fresh session maker for Celery task execution.

    Each Celery task runs its own event loop, so it needs an engine that
    is not bound to the loop of the importing process.
    """
    task_engine = create_async_engine(DATABASE_URL, pool_pre_ping=True, pool_size=5, max_overflow=10)
    return async_sessionmaker(task_engine, class_=AsyncSession, expire_on_commit=False)


async def init_db() -> None:
    """Initialize database tables."""
    from app.models.crawl import CrawlPage
    from app.models.audit import AuditRun, AuditIssue, IssueRecommendation

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
