"""Shared fixtures for unit tests.

No database is needed: asyncpg pools are replaced by in-memory fakes and
routing tests run against `StubPool` objects that expose the same surface
as `AsyncConnectionPool`.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from macrocoach.infrastructure.postgres import (
    AsyncpgConfig,
    AsyncpgConnectionSettings,
    DatabaseClusterConfig,
    Endpoint,
    EndpointRole,
    PoolRegistry,
)

from .fakes import PRIMARY_ID, REPLICA_IDS, FakeAsyncpgPool, StubPool


@pytest.fixture
def primary_config() -> AsyncpgConfig:
    return AsyncpgConfig(connection=AsyncpgConnectionSettings(host=PRIMARY_ID, connect_timeout=1.0))


@pytest.fixture
def cluster_config(primary_config: AsyncpgConfig) -> DatabaseClusterConfig:
    return DatabaseClusterConfig.with_replica_hosts(primary_config, list(REPLICA_IDS))


@pytest.fixture
def primary_endpoint(primary_config: AsyncpgConfig) -> Endpoint:
    return Endpoint(role=EndpointRole.PRIMARY, config=primary_config)


@pytest.fixture
def stub_pools() -> tuple[StubPool, StubPool, StubPool]:
    """Primary, replica-1, replica-2."""
    return (
        StubPool(PRIMARY_ID, EndpointRole.PRIMARY),
        StubPool(REPLICA_IDS[0], EndpointRole.REPLICA),
        StubPool(REPLICA_IDS[1], EndpointRole.REPLICA),
    )


@pytest.fixture
def stub_registry(stub_pools: tuple[StubPool, StubPool, StubPool]) -> PoolRegistry:
    primary, *replicas = stub_pools
    return PoolRegistry(primary, replicas)  # type: ignore[arg-type]


@pytest.fixture
def fake_connection() -> MagicMock:
    connection = MagicMock()
    connection.execute = AsyncMock(return_value="CREATE TABLE")
    connection.fetch = AsyncMock(return_value=[])
    connection.fetchrow = AsyncMock(return_value=None)
    connection.fetchval = AsyncMock(return_value=1)
    return connection


@pytest.fixture
def create_pool_mock(monkeypatch: pytest.MonkeyPatch, fake_connection: MagicMock) -> AsyncMock:
    """Patch ``asyncpg.create_pool`` to hand back a `FakeAsyncpgPool`."""
    mock = AsyncMock(return_value=FakeAsyncpgPool(fake_connection))
    monkeypatch.setattr("asyncpg.create_pool", mock)
    return mock


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Replacement for `asyncio.sleep` that records delays without waiting."""
    return AsyncMock()
