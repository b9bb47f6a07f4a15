"""Configuration models for the primary/replica connection pools.

- `AsyncpgConfig`: Configuration for a single endpoint's pool
- `Endpoint`: An `AsyncpgConfig` tagged with its role in the topology
- `DatabaseClusterConfig`: One primary plus at least one replica
"""

from __future__ import annotations

from typing import Any, Literal, Self
from urllib.parse import quote_plus

from pydantic import BaseModel, ConfigDict, Field, SecretStr, computed_field, model_validator

from .enums import EndpointRole


class AsyncpgConnectionSettings(BaseModel):
    """Connection settings for a PostgreSQL database."""

    model_config = ConfigDict(extra="forbid")

    host: str = Field(default="localhost")
    port: int = Field(default=5432, ge=1, le=65535)
    database: str = Field(default="macrocoach_db")
    user: str = Field(default="postgres")
    password: SecretStr | None = Field(default=None)
    connect_timeout: float = Field(default=10.0, gt=0.0, le=300.0)


class AsyncpgPoolSettings(BaseModel):
    """Connection pool settings."""

    model_config = ConfigDict(extra="forbid")

    min_size: int = Field(default=1, ge=0, le=100)
    max_size: int = Field(default=10, ge=1, le=200)
    max_inactive_connection_lifetime: float = Field(default=300.0, ge=0.0)
    command_timeout: float = Field(default=60.0, ge=1.0, le=300.0)

    @model_validator(mode="after")
    def _check_bounds(self) -> Self:
        if self.min_size > self.max_size:
            msg = f"min_size ({self.min_size}) must not exceed max_size ({self.max_size})"
            raise ValueError(msg)
        return self


class AsyncpgServerSettings(BaseModel):
    """PostgreSQL server settings passed to the connection."""

    model_config = ConfigDict(extra="forbid")

    application_name: str = Field(default="macrocoach")
    jit: Literal["on", "off"] = Field(default="off")


class AsyncpgConfig(BaseModel):
    """Complete configuration for one endpoint's asyncpg pool.

    Examples
    --------
    >>> config = AsyncpgConfig(
    ...     connection=AsyncpgConnectionSettings(
    ...         host="postgres-primary",
    ...         user="postgres",
    ...         password=SecretStr("secret"),
    ...     ),
    ... )
    >>> config.endpoint_id
    'postgres-primary'
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str | None = Field(default=None, min_length=1)
    connection: AsyncpgConnectionSettings = Field(default_factory=AsyncpgConnectionSettings)
    pool: AsyncpgPoolSettings = Field(default_factory=AsyncpgPoolSettings)
    server_settings: AsyncpgServerSettings = Field(default_factory=AsyncpgServerSettings)

    @property
    def endpoint_id(self) -> str:
        """Identifier reported in routing decisions and health reports.

        Falls back to the host when no explicit ``name`` is configured.
        """
        return self.name or self.connection.host

    @computed_field  # type: ignore[prop-decorator]
    @property
    def dsn(self) -> str:
        """Build PostgreSQL DSN from connection settings."""
        password = self.connection.password.get_secret_value() if self.connection.password else ""
        escaped_user = quote_plus(self.connection.user)
        escaped_password = quote_plus(password) if password else ""
        auth = f"{escaped_user}:{escaped_password}@" if escaped_password else f"{escaped_user}@"
        return f"postgresql://{auth}{self.connection.host}:{self.connection.port}/{self.connection.database}"

    def to_pool_params(self) -> dict[str, Any]:
        """Convert config to asyncpg.create_pool() parameters."""
        return {
            "dsn": self.dsn,
            "timeout": self.connection.connect_timeout,
            **self.pool.model_dump(),
            "server_settings": self.server_settings.model_dump(),
        }

    def to_log_params(self) -> dict[str, Any]:
        """Connection parameters safe to log (no password)."""
        return {
            "endpoint_id": self.endpoint_id,
            "host": self.connection.host,
            "port": self.connection.port,
            "database": self.connection.database,
            "user": self.connection.user,
            "min_size": self.pool.min_size,
            "max_size": self.pool.max_size,
        }

    def for_replica(self, host: str, port: int | None = None, name: str | None = None) -> Self:
        """Copy this config for a replica that differs only by host (and optionally port).

        Parameters
        ----------
        host
            Hostname for the replica database.
        port
            Optional port override. Defaults to same as this config.
        name
            Optional endpoint identifier. Defaults to ``host``.
        """
        new_connection = self.connection.model_copy(
            update={"host": host, "port": port if port is not None else self.connection.port}
        )
        return self.model_copy(update={"connection": new_connection, "name": name})


class Endpoint(BaseModel):
    """A database connection target and its role in the topology."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    role: EndpointRole
    config: AsyncpgConfig

    @property
    def endpoint_id(self) -> str:
        return self.config.endpoint_id


class DatabaseClusterConfig(BaseModel):
    """Configuration for exactly one primary and one or more replicas.

    Examples
    --------
    >>> config = DatabaseClusterConfig.with_replica_hosts(
    ...     primary_cfg,
    ...     ["postgres-replica-1", "postgres-replica-2"],
    ... )
    >>> registry = PoolRegistry.from_config(config)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    primary: AsyncpgConfig
    replicas: tuple[AsyncpgConfig, ...] = Field(min_length=1)

    @model_validator(mode="after")
    def _check_unique_endpoint_ids(self) -> Self:
        seen: set[str] = set()
        for cfg in (self.primary, *self.replicas):
            if cfg.endpoint_id in seen:
                msg = f"Duplicate endpoint id {cfg.endpoint_id!r}; set a distinct `name` per endpoint"
                raise ValueError(msg)
            seen.add(cfg.endpoint_id)
        return self

    @classmethod
    def with_replica_hosts(cls, primary: AsyncpgConfig, hosts: list[str]) -> Self:
        """Create cluster config with replicas derived from primary.

        Credentials, port and pool settings are inherited from ``primary``.
        """
        replicas = tuple(primary.for_replica(host) for host in hosts)
        return cls(primary=primary, replicas=replicas)

    def endpoints(self) -> tuple[Endpoint, ...]:
        """All endpoints, primary first, then replicas in configured order."""
        return (
            Endpoint(role=EndpointRole.PRIMARY, config=self.primary),
            *(Endpoint(role=EndpointRole.REPLICA, config=cfg) for cfg in self.replicas),
        )
