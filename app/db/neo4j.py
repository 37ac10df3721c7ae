"""
Neo4j driver manager for the communication graph.

Owns driver lifecycle and exposes session/query/health helpers for
repositories. Every query acquires its own session and releases it on both
the success and the error path.
"""

import asyncio
from collections.abc import Awaitable
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from neo4j import READ_ACCESS, AsyncGraphDatabase, basic_auth

from app.config import settings
from app.db.coercion import coerce
from app.features.communications.domain.errors import QueryFailed
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class Neo4jDriverManager:
    """Manage a shared Neo4j driver instance for async usage."""

    def __init__(self) -> None:
        self._driver = None
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Create the driver and verify connectivity. Safe to call repeatedly."""
        if self._initialized:
            return
        async with self._lock:
            if self._initialized:
                return
            if not settings.NEO4J_URI or not settings.NEO4J_PASSWORD:
                raise RuntimeError("Neo4j config missing: set NEO4J_URI and NEO4J_PASSWORD")

            logger.info("Initializing Neo4j driver", uri=settings.NEO4J_URI)

            driver = AsyncGraphDatabase.driver(
                settings.NEO4J_URI,
                auth=basic_auth(settings.NEO4J_USERNAME, settings.NEO4J_PASSWORD),
                **settings.get_neo4j_driver_config(),
            )
            try:
                await driver.verify_connectivity()
            except Exception:
                await driver.close()
                raise

            self._driver = driver
            self._initialized = True

            logger.info("Neo4j driver initialized", database=settings.NEO4J_DATABASE)

    async def close(self) -> None:
        """Close the driver cleanly. A later session() builds a new one."""
        if not self._initialized:
            return

        try:
            if self._driver:
                await self._driver.close()
        finally:
            self._driver = None
            self._initialized = False
            logger.info("Neo4j driver closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[Any, None]:
        """Provide a read-mode session bound to the configured database."""
        if not self._initialized:
            await self.initialize()

        async with self._driver.session(
            database=settings.NEO4J_DATABASE,
            default_access_mode=READ_ACCESS,
        ) as session:
            yield session

    async def check_connection(self) -> bool:
        """Run a trivial query; False on any failure."""
        try:
            async with self.session() as session:
                result = await session.run("RETURN 1 AS ok")
                await result.consume()
            return True
        except Exception as exc:
            logger.warning("Neo4j connection test failed", error=str(exc), error_type=type(exc).__name__)
            return False

    async def health_check(self) -> dict[str, Any]:
        """Return Neo4j driver health status."""
        if not self._initialized:
            return {
                "healthy": False,
                "service": "neo4j",
                "error": "Driver not initialized",
            }

        try:
            await self._driver.verify_connectivity()
            return {
                "healthy": True,
                "service": "neo4j",
                "database": settings.NEO4J_DATABASE,
            }
        except Exception as exc:
            return {
                "healthy": False,
                "service": "neo4j",
                "error": str(exc),
                "error_type": type(exc).__name__,
            }


neo4j_driver = Neo4jDriverManager()


@asynccontextmanager
async def get_neo4j_session() -> AsyncGenerator[Any, None]:
    """Convenience helper for retrieving a Neo4j session."""
    async with neo4j_driver.session() as session:
        yield session


async def execute_read_query(
    query: str,
    params: dict[str, Any] | None = None,
    *,
    operation: str = "read_query",
) -> list[dict[str, Any]]:
    """
    Run a read query in its own session and return coerced record dicts.

    Any driver or query error is raised as QueryFailed carrying the cause.
    """
    try:
        async with get_neo4j_session() as session:
            result = await session.run(query, params or {})
            records = await result.data()
    except QueryFailed:
        raise
    except Exception as exc:
        logger.error("Neo4j query failed", operation=operation, error=repr(exc))
        raise QueryFailed(operation, exc) from exc

    return coerce(records)


async def run_concurrently(*aws: Awaitable[Any]) -> list[Any]:
    """
    Await independent queries together.

    Every sibling is awaited to completion before the first failure (in
    argument order) is re-raised, so no session outlives the request.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


async def neo4j_health_check() -> dict[str, Any]:
    """Convenience wrapper for Neo4j health checks."""
    return await neo4j_driver.health_check()


async def check_connection() -> bool:
    return await neo4j_driver.check_connection()
