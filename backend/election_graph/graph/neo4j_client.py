"""Neo4j connection pool handle with an explicit lifecycle.

The driver is created once per process by the application factory, stored on
``app.state`` and closed by the lifespan hook at shutdown. Request handlers
borrow sessions from it through :class:`~election_graph.graph.executor.QueryExecutor`.
"""

import logging
import time
from typing import Any

from neo4j import AsyncDriver, AsyncGraphDatabase, AsyncSession
from neo4j.exceptions import AuthError, DriverError, Neo4jError, ServiceUnavailable

from election_graph.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class GraphClient:
    """Owns the async driver (and thus the connection pool)."""

    def __init__(
        self,
        uri: str,
        username: str,
        password: str | None,
        database: str | None = None,
        *,
        max_connection_pool_size: int = 50,
        max_connection_lifetime: int = 3600,
        connection_acquisition_timeout: float = 30.0,
        driver: AsyncDriver | None = None,
    ):
        self.uri = uri
        self.database = database
        self._username = username
        self._password = password
        self._pool_options = {
            "max_connection_pool_size": max_connection_pool_size,
            "max_connection_lifetime": max_connection_lifetime,
            "connection_acquisition_timeout": connection_acquisition_timeout,
        }
        self._driver = driver
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "GraphClient":
        """Create a client from application settings."""
        settings = settings or default_settings
        return cls(
            uri=settings.NEO4J_URI,
            username=settings.NEO4J_USERNAME,
            password=settings.NEO4J_PASSWORD,
            database=settings.NEO4J_DATABASE,
            max_connection_pool_size=settings.NEO4J_MAX_CONNECTION_POOL_SIZE,
            max_connection_lifetime=settings.NEO4J_MAX_CONNECTION_LIFETIME,
            connection_acquisition_timeout=settings.NEO4J_CONNECTION_ACQUISITION_TIMEOUT,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def driver(self) -> AsyncDriver:
        """Return the driver, creating it on first use.

        Creating the driver does not open a connection; the pool connects
        lazily when the first session runs a statement.
        """
        if self._closed:
            raise RuntimeError("GraphClient is closed")
        if self._driver is None:
            self._driver = AsyncGraphDatabase.driver(
                self.uri,
                auth=(self._username, self._password or ""),
                **self._pool_options,
            )
            logger.info(f"Neo4j driver initialized: {self.uri}")
        return self._driver

    def connect(self) -> None:
        """Initialize the driver eagerly (called at application startup)."""
        _ = self.driver

    def session(self) -> AsyncSession:
        """Borrow a new session. The caller must close it."""
        if self.database:
            return self.driver.session(database=self.database)
        return self.driver.session()

    async def ping(self) -> tuple[bool, int | None, dict[str, Any]]:
        """
        Ping Neo4j to check connectivity.

        Returns:
            Tuple of (ok, latency_ms, details)
        """
        start = time.perf_counter()
        try:
            session = self.session()
            try:
                result = await session.run("RETURN 1 AS ok")
                await result.consume()
            finally:
                await session.close()
        except (ServiceUnavailable, AuthError) as e:
            logger.debug(f"Neo4j ping failed: {e}")
            return False, None, {"reachable": False, "error": str(e)}
        except (Neo4jError, DriverError, OSError) as e:
            logger.warning(f"Unexpected error during Neo4j ping: {e}")
            return False, None, {"reachable": False, "error": str(e)}

        latency_ms = int((time.perf_counter() - start) * 1000)
        return True, latency_ms, {"reachable": True}

    async def close(self) -> None:
        """Close the driver and release every pooled connection."""
        if self._closed:
            return
        self._closed = True
        if self._driver is not None:
            await self._driver.close()
            logger.info("Neo4j driver closed")
        self._driver = None
