"""Session-scoped execution of statement batches."""

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import Any

from neo4j import AsyncSession
from neo4j.exceptions import DriverError, Neo4jError

from election_graph.common.request_context import get_request_id, record_statement
from election_graph.core.app_exceptions import ExecutionError, QueryTimeoutError
from election_graph.graph.neo4j_client import GraphClient
from election_graph.graph.statement import Statement

logger = logging.getLogger(__name__)

Record = dict[str, Any]


def driver_message(exc: BaseException) -> str:
    """Human-readable text of a driver or server error.

    Only server errors (Neo4jError) carry the server's text in ``.message``;
    on client-side DriverError subclasses that attribute is a GQL status
    placeholder, so their text comes from the exception arguments.
    """
    if isinstance(exc, Neo4jError) and exc.message:
        return exc.message
    return str(exc) or type(exc).__name__


class QueryExecutor:
    """
    Run an ordered batch of statements on a single borrowed session.

    Behavior:
        - One session per batch, opened before the first statement and closed
          exactly once afterwards, whether the batch succeeds, fails, or is
          cancelled by the timeout
        - Statements run strictly in order; a later statement may read what an
          earlier one created (e.g. project a graph, then stream an algorithm)
        - The first failure aborts the rest of the batch; nothing is retried
        - Records are fully read inside the session scope and returned as
          plain dicts, one list per statement
    """

    def __init__(self, client: GraphClient, timeout: float | None = None):
        self._client = client
        self.timeout = timeout or None

    async def execute(self, statements: Sequence[Statement]) -> list[list[Record]]:
        """
        Execute statements in order and return their records.

        Raises:
            ExecutionError: A statement failed (carries the driver message) or
                the session could not be released after a successful batch
            QueryTimeoutError: The batch exceeded the configured timeout
        """
        batch = list(statements)
        if not batch:
            return []

        start_time = time.perf_counter()
        if self.timeout is None:
            results = await self._run_batch(batch)
        else:
            try:
                results = await asyncio.wait_for(self._run_batch(batch), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                logger.error(
                    f"Statement batch timed out after {self.timeout:g}s "
                    f"(statements={len(batch)}, first={batch[0].summary!r})",
                    extra={"request_id": get_request_id()},
                )
                raise QueryTimeoutError(f"Query timed out after {self.timeout:g}s") from e

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        logger.debug(
            f"Statement batch completed: statements={len(batch)}, "
            f"rows={[len(rows) for rows in results]}, duration_ms={duration_ms}",
            extra={"request_id": get_request_id()},
        )
        return results

    async def execute_one(self, statement: Statement) -> list[Record]:
        """Execute a single statement and return its records."""
        results = await self.execute([statement])
        return results[0]

    async def _run_batch(self, batch: list[Statement]) -> list[list[Record]]:
        session = self._client.session()
        failed = False
        position = 0
        try:
            results = []
            for position, statement in enumerate(batch, start=1):
                results.append(await self._run_statement(session, statement))
            return results
        except (Neo4jError, DriverError) as e:
            failed = True
            message = driver_message(e)
            logger.error(
                f"Statement {position}/{len(batch)} failed: {message} "
                f"(statement={batch[position - 1].summary!r})",
                extra={"request_id": get_request_id()},
            )
            raise ExecutionError(message) from e
        except BaseException:
            failed = True
            raise
        finally:
            await self._release(session, failed)

    @staticmethod
    async def _run_statement(session: AsyncSession, statement: Statement) -> list[Record]:
        start_time = time.perf_counter()
        try:
            result = await session.run(statement.text, dict(statement.parameters))
            return [dict(record.items()) async for record in result]
        finally:
            record_statement((time.perf_counter() - start_time) * 1000)

    @staticmethod
    async def _release(session: AsyncSession, failed: bool) -> None:
        try:
            await session.close()
        except Exception as e:
            if failed:
                # The batch error is already propagating and must stay the reported one
                logger.error(
                    f"Failed to close session after batch failure: {driver_message(e)}",
                    exc_info=True,
                    extra={"request_id": get_request_id()},
                )
                return
            logger.error(
                f"Failed to close session: {driver_message(e)}",
                exc_info=True,
                extra={"request_id": get_request_id()},
            )
            raise ExecutionError(f"Failed to release session: {driver_message(e)}") from e
