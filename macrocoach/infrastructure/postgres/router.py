"""Role-based routing of statements onto the primary or a replica.

The caller states the intent of every statement:

- ``QueryRole.WRITE`` always runs on the primary.
- ``QueryRole.READ`` runs on one replica chosen by `ReplicaSelector`.

There is no auto-detection from the SQL text and no fallback between pools.
Errors from the chosen pool propagate unchanged to the caller.

Usage
-----
>>> async with DatabaseRouter.from_config(cluster_config) as router:
...     await router.initialize_schema()
...     await router.execute_write("INSERT INTO matches (...) VALUES ($1, ...)", ...)
...     rows, endpoint_id = await router.execute_read("SELECT * FROM matches")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple, Self

from pydantic import BaseModel, ConfigDict

from ...logger import get_logger
from .enums import QueryRole, SchemaState
from .health import ClusterHealthResult, HealthAggregator
from .registry import PoolRegistry
from .schema import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY_S, SchemaInitializer
from .selector import RandomSource, ReplicaSelector

if TYPE_CHECKING:
    import types

    from asyncpg import Record

    from ...resilience.types import SleepFunction
    from .config import DatabaseClusterConfig
    from .pool import AsyncConnectionPool

logger = get_logger(__name__)


class RoutingDecision(BaseModel):
    """Which endpoint serviced an operation."""

    model_config = ConfigDict(frozen=True)

    role: QueryRole
    endpoint_id: str


class QueryResult(NamedTuple):
    rows: list[Record]
    decision: RoutingDecision


class DatabaseRouter:
    """Facade combining registry, selector, schema initializer and health.

    Parameters
    ----------
    registry
        Pools for the primary and replicas.
    random_source
        Injected into the `ReplicaSelector`.
    max_retries, retry_delay_s, sleep
        Passed to the `SchemaInitializer`.
    """

    def __init__(
        self,
        registry: PoolRegistry,
        *,
        random_source: RandomSource | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay_s: float = DEFAULT_RETRY_DELAY_S,
        sleep: SleepFunction | None = None,
    ) -> None:
        self._registry = registry
        self._selector = ReplicaSelector(registry, random_source)
        self._health = HealthAggregator(registry)
        self._schema = SchemaInitializer(
            registry.write_pool(),
            max_retries=max_retries,
            retry_delay_s=retry_delay_s,
            sleep=sleep,
        )

    @classmethod
    def from_config(
        cls,
        config: DatabaseClusterConfig,
        *,
        random_source: RandomSource | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay_s: float = DEFAULT_RETRY_DELAY_S,
        sleep: SleepFunction | None = None,
    ) -> Self:
        return cls(
            PoolRegistry.from_config(config),
            random_source=random_source,
            max_retries=max_retries,
            retry_delay_s=retry_delay_s,
            sleep=sleep,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        await self.aclose()

    @property
    def registry(self) -> PoolRegistry:
        return self._registry

    @property
    def schema_state(self) -> SchemaState:
        return self._schema.state

    def route(self, role: QueryRole) -> tuple[AsyncConnectionPool, RoutingDecision]:
        """Pick the pool for ``role`` without running anything."""
        if role == QueryRole.WRITE:
            pool = self._registry.write_pool()
            endpoint_id = pool.endpoint_id
        else:
            pool, endpoint_id = self._selector.select_read_pool()
        return pool, RoutingDecision(role=role, endpoint_id=endpoint_id)

    async def execute(self, role: QueryRole, sql: str, *params: object) -> QueryResult:
        """Run ``sql`` on the pool chosen for ``role``.

        Raises
        ------
        DatabaseConnectionError
            The chosen endpoint is unreachable.
        QueryError
            The endpoint rejected the statement.
        """
        pool, decision = self.route(role)
        logger.debug("Routing query", role=str(role), endpoint_id=decision.endpoint_id)
        rows = await pool.afetch(sql, *params)
        return QueryResult(rows=rows, decision=decision)

    async def execute_write(self, sql: str, *params: object) -> list[Record]:
        """Run ``sql`` on the primary and return its rows (e.g. ``RETURNING *``)."""
        result = await self.execute(QueryRole.WRITE, sql, *params)
        return result.rows

    async def execute_read(self, sql: str, *params: object) -> tuple[list[Record], str]:
        """Run ``sql`` on a randomly chosen replica.

        Returns
        -------
        tuple[list[Record], str]
            The rows and the id of the replica that served them.
        """
        result = await self.execute(QueryRole.READ, sql, *params)
        return result.rows, result.decision.endpoint_id

    async def initialize_schema(self) -> SchemaState:
        return await self._schema.ainitialize()

    async def adetailed_health(self) -> ClusterHealthResult:
        return await self._health.acheck_all()

    async def health_check(self) -> dict[str, bool]:
        """Liveness flag per endpoint id."""
        result = await self._health.acheck_all()
        return result.as_flags()

    async def aclose(self) -> None:
        await self._registry.aclose()
