import os

# must be set before event_rsvp.config builds the engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./event_rsvp.db")
os.environ.setdefault("CRON_SECRET", "")

from contextlib import asynccontextmanager  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from event_rsvp.config.database import create_tables, drop_tables, engine  # noqa: E402
from event_rsvp.main import app  # noqa: E402


@pytest_asyncio.fixture(scope="function")
async def db_schema():
    """Fresh tables in the test database for each test."""
    await drop_tables()
    await create_tables()
    yield
    await drop_tables()
    await engine.dispose()


@pytest.fixture
def client_factory():
    """Build a test client with some dependencies overridden."""

    @asynccontextmanager
    async def factory(overrides: dict | None = None):
        for dependency, override in (overrides or {}).items():
            app.dependency_overrides[dependency] = override
        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            app.dependency_overrides.clear()

    return factory


@pytest_asyncio.fixture(scope="function")
async def client(client_factory):
    """Create a test client."""
    async with client_factory() as ac:
        yield ac
