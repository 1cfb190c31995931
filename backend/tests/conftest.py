"""
Shared test fixtures.

Nothing here touches the network: HTTP goes through httpx.MockTransport
and the database is an in-memory SQLite instance.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from claimcheck.database import init_db
from claimcheck.models.schemas import EvidenceSnippet


@pytest.fixture
def make_snippet():
    """Factory for EvidenceSnippet with sensible defaults."""

    def _make(
        text: str = "",
        url: str = "https://en.wikipedia.org/wiki/Sun",
        relevance_score: float = 80,
        title: str = "Result",
    ) -> EvidenceSnippet:
        return EvidenceSnippet(
            title=title,
            snippet=text,
            url=url,
            relevance_score=relevance_score,
        )

    return _make


@pytest_asyncio.fixture
async def session_factory():
    """Session factory bound to a fresh in-memory database with tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()
