"""Registry owning one connection pool per configured endpoint.

The registry is a plain value built once at startup and handed to every
component that needs database access. It never decides *which* pool serves
a query; that is the caller's job (`DatabaseRouter` for writes,
`ReplicaSelector` for reads).

Usage
-----
>>> async with PoolRegistry.from_config(cluster_config) as registry:
...     await registry.write_pool().aexecute("INSERT ...")
...     rows = await registry.pool_for_endpoint("postgres-replica-1").afetch("SELECT ...")
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Self

from ...logger import get_logger
from .enums import EndpointRole
from .pool import AsyncConnectionPool

if TYPE_CHECKING:
    import types
    from collections.abc import Sequence

    from .config import DatabaseClusterConfig

logger = get_logger(__name__)


class PoolRegistry:
    """Holds the primary pool and the replica pools for the process lifetime.

    Attributes
    ----------
    primary : AsyncConnectionPool
        The sole writable pool.
    replicas : tuple[AsyncConnectionPool, ...]
        Read-only pools, in configured order.
    """

    __slots__ = ("_by_id", "_primary", "_replicas")

    def __init__(self, primary: AsyncConnectionPool, replicas: Sequence[AsyncConnectionPool]) -> None:
        """Initialize the registry.

        Parameters
        ----------
        primary
            Pool bound to the primary endpoint.
        replicas
            Pools bound to replica endpoints. At least one is required;
            reads never fall back to the primary.
        """
        if primary.role != EndpointRole.PRIMARY:
            msg = f"Pool {primary.endpoint_id!r} is not a primary endpoint"
            raise ValueError(msg)
        if not replicas:
            msg = "At least one replica pool is required"
            raise ValueError(msg)

        self._primary = primary
        self._replicas = tuple(replicas)
        self._by_id: dict[str, AsyncConnectionPool] = {}
        for pool in (primary, *self._replicas):
            if pool.endpoint_id in self._by_id:
                msg = f"Duplicate endpoint id {pool.endpoint_id!r}"
                raise ValueError(msg)
            self._by_id[pool.endpoint_id] = pool

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        if exc_type is not None and exc_val is not None:
            logger.error(
                "PoolRegistry exiting with exception",
                exc_type=exc_type.__name__,
                exc_val=str(exc_val),
            )
        await self.aclose()

    @classmethod
    def from_config(cls, config: DatabaseClusterConfig) -> Self:
        """Build one pool per endpoint. No connection is opened here.

        Examples
        --------
        >>> config = DatabaseClusterConfig.with_replica_hosts(
        ...     primary_cfg,
        ...     ["postgres-replica-1", "postgres-replica-2"],
        ... )
        >>> registry = PoolRegistry.from_config(config)
        """
        primary, *replicas = (AsyncConnectionPool(endpoint) for endpoint in config.endpoints())
        logger.info(
            "Pool registry created",
            primary=primary.endpoint_id,
            replicas=[pool.endpoint_id for pool in replicas],
        )
        return cls(primary, replicas)

    def write_pool(self) -> AsyncConnectionPool:
        """Return the primary pool. Every write goes here."""
        return self._primary

    def replica_pools(self) -> tuple[AsyncConnectionPool, ...]:
        return self._replicas

    def pool_for_endpoint(self, endpoint_id: str) -> AsyncConnectionPool:
        """Return the pool bound to ``endpoint_id``.

        Raises
        ------
        KeyError
            If no endpoint with that identifier is configured.
        """
        try:
            return self._by_id[endpoint_id]
        except KeyError:
            msg = f"Unknown endpoint id {endpoint_id!r}; configured: {sorted(self._by_id)}"
            raise KeyError(msg) from None

    def all_pools(self) -> tuple[AsyncConnectionPool, ...]:
        """Every pool, primary first, then replicas in configured order."""
        return (self._primary, *self._replicas)

    @property
    def primary_endpoint_id(self) -> str:
        return self._primary.endpoint_id

    @property
    def replica_count(self) -> int:
        return len(self._replicas)

    async def aclose(self) -> None:
        """Close every pool. A pool failing to close does not stop the others."""
        pools = self.all_pools()
        results = await asyncio.gather(*(pool.aclose() for pool in pools), return_exceptions=True)
        for pool, result in zip(pools, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(
                    "Pool failed to close",
                    endpoint_id=pool.endpoint_id,
                    error=str(result),
                )

        logger.info("Pool registry closed")
