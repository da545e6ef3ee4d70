import os

# Point the app at a throwaway database before anything under src/ is imported.
os.environ["DATABASE_URL"] = "sqlite:///./test_booktracker.db"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager

from src.database.crud import BookRepository, create_tables
from src.database.database import make_engine, make_session_factory
from src.services.book_tools import BookTools


@pytest.fixture
def repo(tmp_path):
    """A repository backed by a fresh SQLite file per test."""
    engine = make_engine(f"sqlite:///{tmp_path / 'books.db'}")
    create_tables(engine)
    yield BookRepository(make_session_factory(engine))
    engine.dispose()


@pytest.fixture
def book_tools(repo):
    tools = BookTools(repo, max_workers=4)
    yield tools
    tools.shutdown()


@pytest_asyncio.fixture
async def client():
    """
    Async client against the real app, with lifespan events running.
    Rows are wiped afterwards so tests do not see each other's books.
    """
    from server import app
    from src.database import database, models

    transport = ASGITransport(app=app)
    async with LifespanManager(app) as manager:
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c

    with database.SessionLocal() as db:
        db.query(models.Book).delete()
        db.commit()


def pytest_sessionfinish(session, exitstatus):
    if os.path.exists("test_booktracker.db"):
        os.remove("test_booktracker.db")
