"""Shared fixtures for integration tests against a real PostgreSQL.

One container plays every role: the primary and both replica endpoints
point at it under distinct endpoint ids, so routing decisions stay
observable while reads see the writes immediately.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
import pytest_asyncio
from docker import from_env  # type: ignore[import-untyped]
from docker.errors import DockerException  # type: ignore[import-untyped]
from pydantic import SecretStr
from testcontainers.postgres import PostgresContainer  # type: ignore[import-untyped]

from macrocoach.infrastructure.postgres import (
    AsyncpgConfig,
    AsyncpgConnectionSettings,
    AsyncpgPoolSettings,
    AsyncpgServerSettings,
    DatabaseClusterConfig,
    DatabaseRouter,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

PRIMARY_ID = "postgres-primary"
REPLICA_IDS = ("postgres-replica-1", "postgres-replica-2")

# Nothing listens on port 1; connections are refused immediately.
UNREACHABLE_HOST = "127.0.0.1"
UNREACHABLE_PORT = 1


def pytest_configure(config: pytest.Config) -> None:  # noqa: ARG001
    """Point testcontainers at the local Docker socket when DOCKER_HOST is unset."""
    if not os.environ.get("DOCKER_HOST"):
        possible_sockets = [
            Path("/var/run/docker.sock"),
            Path.home() / ".docker" / "run" / "docker.sock",
        ]
        for socket_path in possible_sockets:
            if socket_path.exists():
                os.environ["DOCKER_HOST"] = f"unix://{socket_path}"
                os.environ["TESTCONTAINERS_DOCKER_SOCKET_OVERRIDE"] = str(socket_path)
                break

    if sys.platform == "darwin" and not os.environ.get("TESTCONTAINERS_RYUK_DISABLED"):
        os.environ["TESTCONTAINERS_RYUK_DISABLED"] = "true"


def _is_docker_available() -> bool:
    try:
        client = from_env()
        client.ping()
    except DockerException:
        return False
    else:
        return True


@pytest.fixture(scope="session")
def postgres_container() -> Iterator[PostgresContainer]:
    """Session-scoped PostgreSQL container; skips when Docker is not reachable."""
    if not _is_docker_available():
        pytest.skip("Docker daemon not accessible")

    with PostgresContainer("postgres:17-alpine", driver="asyncpg") as container:
        yield container


@pytest.fixture
def primary_config(postgres_container: PostgresContainer) -> AsyncpgConfig:
    return AsyncpgConfig(
        name=PRIMARY_ID,
        connection=AsyncpgConnectionSettings(
            host=postgres_container.get_container_host_ip(),
            port=int(postgres_container.get_exposed_port(5432)),
            database=postgres_container.dbname,
            user=postgres_container.username,
            password=SecretStr(postgres_container.password),
            connect_timeout=5.0,
        ),
        pool=AsyncpgPoolSettings(min_size=1, max_size=5, command_timeout=30.0),
        server_settings=AsyncpgServerSettings(application_name="macrocoach_test", jit="off"),
    )


@pytest.fixture
def cluster_config(primary_config: AsyncpgConfig) -> DatabaseClusterConfig:
    host = primary_config.connection.host
    return DatabaseClusterConfig(
        primary=primary_config,
        replicas=tuple(primary_config.for_replica(host, name=replica_id) for replica_id in REPLICA_IDS),
    )


@pytest_asyncio.fixture
async def router(cluster_config: DatabaseClusterConfig) -> AsyncIterator[DatabaseRouter]:
    """Router with the schema bootstrapped and an empty ``matches`` table."""
    async with DatabaseRouter.from_config(cluster_config) as database_router:
        await database_router.initialize_schema()
        await database_router.registry.write_pool().aexecute("TRUNCATE matches RESTART IDENTITY")
        yield database_router
