"""Pytest configuration and shared fixtures."""

import asyncio
import os
from collections.abc import Generator
from typing import Any

import pytest

os.environ.setdefault("ENV", "test")

from fastapi.testclient import TestClient  # noqa: E402

from election_graph.graph.executor import QueryExecutor  # noqa: E402
from election_graph.graph.neo4j_client import GraphClient  # noqa: E402
from election_graph.main import create_app  # noqa: E402

# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)


class FakeResult:
    """Async-iterable stand-in for ``neo4j.AsyncResult``."""

    def __init__(self, records: list[dict[str, Any]]):
        self._records = list(records)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for record in self._records:
            yield record

    async def consume(self) -> None:
        return None


class FakeSession:
    """Stand-in for ``neo4j.AsyncSession`` that records what it is asked to do."""

    def __init__(self, driver: "FakeDriver", **config: Any):
        self.driver = driver
        self.config = config
        self.statements: list[tuple[str, dict[str, Any]]] = []
        self.close_calls = 0

    async def run(self, query: str, parameters: dict[str, Any] | None = None) -> FakeResult:
        if self.close_calls:
            raise AssertionError("statement run on a closed session")
        self.statements.append((query, dict(parameters or {})))
        self.driver.statements.append((query, dict(parameters or {})))
        if self.driver.delay:
            await asyncio.sleep(self.driver.delay)
        outcome = self.driver.responses.pop(0) if self.driver.responses else []
        if isinstance(outcome, BaseException):
            raise outcome
        return FakeResult(outcome)

    async def close(self) -> None:
        self.close_calls += 1
        if self.driver.close_error is not None:
            raise self.driver.close_error


class FakeDriver:
    """
    Stand-in for ``neo4j.AsyncDriver``.

    ``responses`` is consumed one entry per ``session.run``: a list of record
    dicts is returned as the result, an exception instance is raised. Runs
    beyond the queued responses return no records.
    """

    def __init__(self, responses: list[Any] | None = None):
        self.responses: list[Any] = list(responses or [])
        self.sessions: list[FakeSession] = []
        self.statements: list[tuple[str, dict[str, Any]]] = []
        self.delay: float = 0
        self.close_error: BaseException | None = None
        self.closed = False

    def queue(self, *outcomes: Any) -> None:
        self.responses.extend(outcomes)

    def session(self, **config: Any) -> FakeSession:
        session = FakeSession(self, **config)
        self.sessions.append(session)
        return session

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def graph_client(fake_driver: FakeDriver) -> GraphClient:
    return GraphClient("bolt://fake:7687", "neo4j", "secret", driver=fake_driver)


@pytest.fixture
def executor(graph_client: GraphClient) -> QueryExecutor:
    return QueryExecutor(graph_client, timeout=5)


@pytest.fixture
def client(graph_client: GraphClient) -> Generator[TestClient, None, None]:
    """Test client over an app wired to the fake driver (lifespan not run)."""
    app = create_app(graph_client=graph_client)
    yield TestClient(app, raise_server_exceptions=False)
