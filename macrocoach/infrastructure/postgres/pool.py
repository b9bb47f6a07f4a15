"""Lazily connected asyncpg pool bound to one endpoint.

Constructing an `AsyncConnectionPool` never touches the network. The
underlying ``asyncpg.Pool`` is created on the first operation; if that
fails the wrapper stays uninitialised and the next operation tries again,
so a database that comes up after the process needs no reconnect step.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import asyncpg
from asyncpg import Pool, Record

from ...logger import get_logger
from .exceptions import DatabaseError, translate_driver_error
from .health import EndpointHealth

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from asyncpg.pool import PoolConnectionProxy

    from .config import Endpoint
    from .enums import EndpointRole

logger = get_logger(__name__)

PROBE_QUERY = "SELECT 1"


class AsyncConnectionPool:
    """Async connection pool for a single PostgreSQL endpoint.

    Examples
    --------
    >>> pool = AsyncConnectionPool(endpoint)   # no I/O here
    >>> rows = await pool.afetch("SELECT * FROM matches")
    """

    __slots__ = ("_endpoint", "_init_lock", "_init_task", "_pool")

    def __init__(self, endpoint: Endpoint) -> None:
        self._endpoint = endpoint
        self._pool: Pool[Record] | None = None
        self._init_lock = asyncio.Lock()
        self._init_task: asyncio.Task[Pool[Record]] | None = None

    def __repr__(self) -> str:
        return f"AsyncConnectionPool(role={self.role!s}, endpoint_id={self.endpoint_id!r})"

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def endpoint_id(self) -> str:
        return self._endpoint.endpoint_id

    @property
    def role(self) -> EndpointRole:
        return self._endpoint.role

    @property
    def is_initialized(self) -> bool:
        return self._pool is not None

    def _error(self, exc: BaseException) -> DatabaseError:
        return translate_driver_error(exc, endpoint_id=self.endpoint_id, role=self.role)

    async def _acreate_pool(self) -> Pool[Record]:
        config = self._endpoint.config
        try:
            pool = await asyncpg.create_pool(**config.to_pool_params())
        except Exception as exc:
            logger.warning(
                "Connection pool creation failed",
                role=str(self.role),
                endpoint_id=self.endpoint_id,
                error=str(exc),
            )
            raise self._error(exc) from exc

        self._pool = pool
        logger.info("AsyncConnectionPool initialized", role=str(self.role), **config.to_log_params())
        return pool

    async def ainitialize(self) -> Pool[Record]:
        """Create the underlying asyncpg pool if it does not exist yet.

        Concurrent first callers share a single creation task, so exactly
        one asyncpg pool is created per endpoint and a failed attempt is
        reported to every waiter at once. The lock only guards starting
        that task, never the connect itself.

        Raises
        ------
        DatabaseConnectionError
            If the endpoint cannot be reached. The wrapper stays
            uninitialised and a later call tries again.
        """
        if self._pool is not None:
            return self._pool

        async with self._init_lock:
            if self._pool is not None:
                return self._pool
            if self._init_task is None:
                self._init_task = asyncio.create_task(self._acreate_pool())
            task = self._init_task

        try:
            # NOTE: shielded so a cancelled caller does not abort the shared attempt
            return await asyncio.shield(task)
        finally:
            if task.done() and self._init_task is task:
                self._init_task = None

    async def aclose(self) -> None:
        """Close the connection pool."""
        async with self._init_lock:
            if self._pool is None:
                return
            pool, self._pool = self._pool, None
        await pool.close()
        logger.info("AsyncConnectionPool closed", role=str(self.role), endpoint_id=self.endpoint_id)

    @asynccontextmanager
    async def aacquire(self) -> AsyncIterator[PoolConnectionProxy[Record]]:
        """Acquire a connection, initialising the pool on first use.

        Driver errors raised while connecting or inside the block are
        translated to `DatabaseConnectionError` or `QueryError`.
        """
        pool = await self.ainitialize()
        try:
            async with pool.acquire() as conn:
                yield conn
        except DatabaseError:
            raise
        except Exception as exc:
            raise self._error(exc) from exc

    async def aexecute(self, query: str, *args: object, timeout: float | None = None) -> str:
        """Execute a statement and return its command status (e.g. ``"INSERT 0 1"``)."""
        async with self.aacquire() as conn:
            return await conn.execute(query, *args, timeout=timeout)

    async def afetch(self, query: str, *args: object, timeout: float | None = None) -> list[Record]:
        """Execute a query and return all rows."""
        async with self.aacquire() as conn:
            return await conn.fetch(query, *args, timeout=timeout)

    async def afetchrow(self, query: str, *args: object, timeout: float | None = None) -> Record | None:
        async with self.aacquire() as conn:
            return await conn.fetchrow(query, *args, timeout=timeout)

    async def afetchval(self, query: str, *args: object, timeout: float | None = None) -> Any:
        async with self.aacquire() as conn:
            return await conn.fetchval(query, *args, timeout=timeout)

    async def ahealth_check(self) -> EndpointHealth:
        """Probe the endpoint with ``SELECT 1``.

        Never raises; a failed probe is reported as an unhealthy result.
        """
        started = time.perf_counter()
        try:
            await self.afetchval(PROBE_QUERY)
        except DatabaseError as exc:
            return EndpointHealth.unhealthy(
                endpoint_id=self.endpoint_id,
                role=self.role,
                pool_max_size=self.pool_max_size,
                error=exc.message,
            )

        return EndpointHealth.healthy(
            endpoint_id=self.endpoint_id,
            role=self.role,
            pool_size=self.pool_size,
            pool_max_size=self.pool_max_size,
            pool_idle_size=self.pool_idle_size,
            latency_s=time.perf_counter() - started,
        )

    @property
    def pool_size(self) -> int:
        """Current number of connections in the pool."""
        if self._pool is None:
            return 0
        return self._pool.get_size()

    @property
    def pool_max_size(self) -> int:
        """Maximum pool size from configuration."""
        return self._endpoint.config.pool.max_size

    @property
    def pool_idle_size(self) -> int:
        if self._pool is None:
            return 0
        return self._pool.get_idle_size()
