"""
Pytest fixtures for the URL shortener test suite.

Every test gets its own SQLite file under tmp_path, so stores and apps
never share state between tests.
"""

import pytest
from fastapi.testclient import TestClient

from shorturl.core.setting import Settings
from shorturl.db import build_engine, build_session_maker, create_tables
from shorturl.main import create_app
from shorturl.services.counter_store import DatabaseCounterStore
from shorturl.services.reachability import CheckResult, ReachabilityChecker
from shorturl.services.record_store import URLRecordStore
from shorturl.services.url_service import URLShorteningService


class StubChecker(ReachabilityChecker):
    """Reachability checker returning a fixed result and recording calls."""

    def __init__(self, result: CheckResult = CheckResult.OK):
        self.result = result
        self.calls = []

    async def check(self, url: str) -> CheckResult:
        self.calls.append(url)
        return self.result


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'shorturl-test.db'}"


@pytest.fixture
async def database(database_url):
    """Engine and adapter with all tables created."""
    engine, db_adapter = build_engine(database_url)
    await create_tables(engine)
    yield engine, db_adapter
    await engine.dispose()


@pytest.fixture
def session_maker(database):
    engine, _ = database
    return build_session_maker(engine)


@pytest.fixture
def counter(session_maker, database) -> DatabaseCounterStore:
    _, db_adapter = database
    return DatabaseCounterStore(session_maker, db_adapter)


@pytest.fixture
def records(session_maker) -> URLRecordStore:
    return URLRecordStore(session_maker)


@pytest.fixture
def checker() -> StubChecker:
    return StubChecker()


@pytest.fixture
def url_service(records, counter, checker) -> URLShorteningService:
    return URLShorteningService(records=records, counter=counter, checker=checker)


@pytest.fixture
def settings(tmp_path, database_url) -> Settings:
    return Settings(
        DATABASE_URL=database_url,
        DOCS_DIR=tmp_path / "doc",
        COUNTER_FILE=tmp_path / "count",
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
def client(settings, checker):
    """TestClient running the full app (startup and shutdown included)."""
    app = create_app(settings, checker=checker)
    with TestClient(app) as test_client:
        yield test_client
