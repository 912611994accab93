"""
Pytest configuration and fixtures for SEOPulse tests.
"""
import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Keep SQL echo off and audits fast under test
os.environ["ENVIRONMENT"] = "test"
os.environ["CRAWL_REQUEST_DELAY_MS"] = "0"
os.environ["PAGESPEED_API_KEY"] = ""

from app.models.base import Base
from app.services.audit_service import AuditJobStore
from app.services.audit_types import RenderedPage
from app.services.renderer import BasePageRenderer
from app.core.exceptions import PageRenderError

# Use SQLite for testing (in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def session_maker(test_engine) -> async_sessionmaker:
    """Session maker bound to the test engine."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="function")
def job_store(session_maker) -> AuditJobStore:
    """SQLAlchemy job store on the in-memory database."""
    return AuditJobStore(session_maker)


# ============================================================================
# Renderer Fixtures
# ============================================================================

class FakeRenderer(BasePageRenderer):
    """In-memory renderer serving canned pages by URL."""

    def __init__(self, pages: dict[str, str] | None = None, failing: set[str] | None = None, load_time_ms: int = 100):
        self.pages = pages or {}
        self.failing = failing or set()
        self.load_time_ms = load_time_ms
        self.calls: list[str] = []

    async def render(self, url: str, timeout_ms: int) -> RenderedPage:
        self.calls.append(url)
        if url in self.failing or url not in self.pages:
            raise PageRenderError(url, "net::ERR_NAME_NOT_RESOLVED")
        return RenderedPage(
            url=url,
            final_url=url,
            status_code=200,
            html=self.pages[url],
            load_time_ms=self.load_time_ms,
            headers={"content-type": "text/html"},
        )


@pytest.fixture
def fake_renderer_factory():
    """Build a FakeRenderer from a url -> html mapping."""
    return FakeRenderer
