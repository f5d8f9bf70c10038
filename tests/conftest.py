import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from bulkload.backend.api.deps import get_executor
from bulkload.backend.main import app
from bulkload.loader.executor import ConnectionLost, ExecutionError, SqlAlchemyExecutor


class RecordingExecutor:
    """Fake execution service: remembers every call, fails on request."""

    def __init__(self, fail_on=(), lose_connection_on=(), counts=None):
        self.calls = []
        self.fail_on = tuple(fail_on)
        self.lose_connection_on = tuple(lose_connection_on)
        self.counts = counts or {}

    def run(self, sql):
        self.calls.append(sql)
        if any(marker in sql for marker in self.lose_connection_on):
            raise ConnectionLost("server closed the connection unexpectedly")
        if any(marker in sql for marker in self.fail_on):
            raise ExecutionError(sql, f"rejected: {sql[:20]}")

    def scalar(self, sql):
        self.calls.append(sql)
        table = sql.rsplit(" ", 1)[-1]
        if table not in self.counts:
            raise ExecutionError(sql, f"Table not found: {table}")
        return self.counts[table]


@pytest.fixture
def recorder():
    return RecordingExecutor()


@pytest.fixture
def make_recorder():
    return RecordingExecutor


# In-memory SQLite shared by every connection of one test
@pytest.fixture(scope="function")
def sqlite_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def sqlite_executor(sqlite_engine):
    return SqlAlchemyExecutor(sqlite_engine)


@pytest.fixture
def artist_script():
    return """
-- sample catalogue
CREATE TABLE Artist (
    ArtistId INT PRIMARY KEY,
    Name VARCHAR(120)
);

INSERT INTO Artist (ArtistId, Name) VALUES
    (1, 'AC/DC'),
    (2, 'Accept'),
    (3, 'Aerosmith'),
    (4, 'it''s; fine'),
    (5, 'Alice In Chains');

CREATE INDEX idx_artist_name ON Artist (Name);
"""


# Client
@pytest_asyncio.fixture(scope="function")
async def client(sqlite_executor):
    app.dependency_overrides[get_executor] = lambda: sqlite_executor

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
