"""PostgreSQL primary/replica routing with asyncpg.

This module provides:

- `AsyncConnectionPool`: Lazily connected pool for one endpoint
- `PoolRegistry`: One pool per configured endpoint
- `ReplicaSelector`: Uniform random replica choice for reads
- `SchemaInitializer`: Bounded-retry schema bootstrap on the primary
- `HealthAggregator`: Independent liveness probe of every pool
- `DatabaseRouter`: Facade exposing write/read/health/schema operations

Usage
-----
::

    config = DatabaseClusterConfig.with_replica_hosts(
        primary_cfg,
        ["postgres-replica-1", "postgres-replica-2"],
    )
    async with DatabaseRouter.from_config(config) as router:
        await router.initialize_schema()
        await router.execute_write("INSERT ...")        # primary
        rows, source = await router.execute_read("SELECT ...")  # one replica
"""

from .config import (
    AsyncpgConfig,
    AsyncpgConnectionSettings,
    AsyncpgPoolSettings,
    AsyncpgServerSettings,
    DatabaseClusterConfig,
    Endpoint,
)
from .enums import EndpointRole, HealthStatus, QueryRole, SchemaState
from .exceptions import DatabaseConnectionError, DatabaseError, QueryError
from .health import ClusterHealthResult, EndpointHealth, HealthAggregator
from .pool import AsyncConnectionPool
from .registry import PoolRegistry
from .router import DatabaseRouter, QueryResult, RoutingDecision
from .schema import MATCHES_DDL, SchemaInitializer
from .selector import RandomSource, ReplicaSelector

__all__ = [
    "MATCHES_DDL",
    "AsyncConnectionPool",
    "AsyncpgConfig",
    "AsyncpgConnectionSettings",
    "AsyncpgPoolSettings",
    "AsyncpgServerSettings",
    "ClusterHealthResult",
    "DatabaseClusterConfig",
    "DatabaseConnectionError",
    "DatabaseError",
    "DatabaseRouter",
    "Endpoint",
    "EndpointHealth",
    "EndpointRole",
    "HealthAggregator",
    "HealthStatus",
    "PoolRegistry",
    "QueryError",
    "QueryResult",
    "QueryRole",
    "RandomSource",
    "ReplicaSelector",
    "RoutingDecision",
    "SchemaInitializer",
    "SchemaState",
]
