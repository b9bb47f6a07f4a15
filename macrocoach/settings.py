"""Process configuration read from the environment (and ``.env``).

Environment variable names match the docker-compose deployment:
``DB_USER``, ``DB_PASS``, ``DB_NAME``, ``DB_HOST_WRITE``, ``DB_HOST_READ_1``,
``DB_HOST_READ_2``. ``DB_READ_HOSTS`` (a JSON list) replaces the two
numbered replica hosts when more or fewer replicas are deployed.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .infrastructure.postgres import (
    AsyncpgConfig,
    AsyncpgConnectionSettings,
    AsyncpgPoolSettings,
    DatabaseClusterConfig,
)


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DB_",
        extra="ignore",
        frozen=True,
    )

    user: str = Field(default="postgres")
    # NOTE: DB_PASS is the deployed name; DB_PASSWORD is accepted as well
    password: SecretStr = Field(
        default=SecretStr("admin_password"),
        validation_alias=AliasChoices("DB_PASS", "DB_PASSWORD"),
    )
    name: str = Field(default="macrocoach_db")
    port: int = Field(default=5432, ge=1, le=65535)

    host_write: str = Field(default="postgres-primary")
    host_read_1: str = Field(default="postgres-replica-1")
    host_read_2: str = Field(default="postgres-replica-2")
    read_hosts: list[str] | None = Field(default=None)

    pool_min_size: int = Field(default=1, ge=0, le=100)
    pool_max_size: int = Field(default=10, ge=1, le=200)
    connect_timeout: float = Field(default=10.0, gt=0.0)
    command_timeout: float = Field(default=60.0, ge=1.0)

    init_max_retries: int = Field(default=5, ge=1)
    init_retry_delay_s: float = Field(default=2.0, ge=0.0)

    @property
    def replica_hosts(self) -> list[str]:
        if self.read_hosts is not None:
            return self.read_hosts
        return [self.host_read_1, self.host_read_2]

    def to_cluster_config(self) -> DatabaseClusterConfig:
        """Build the cluster topology. Requires at least one replica host."""
        primary = AsyncpgConfig(
            connection=AsyncpgConnectionSettings(
                host=self.host_write,
                port=self.port,
                database=self.name,
                user=self.user,
                password=self.password,
                connect_timeout=self.connect_timeout,
            ),
            pool=AsyncpgPoolSettings(
                min_size=self.pool_min_size,
                max_size=self.pool_max_size,
                command_timeout=self.command_timeout,
            ),
        )
        return DatabaseClusterConfig.with_replica_hosts(primary, self.replica_hosts)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        extra="ignore",
        frozen=True,
    )

    host: str = Field(default="0.0.0.0")  # noqa: S104
    port: int = Field(default=3000, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
