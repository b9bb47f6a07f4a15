from __future__ import annotations

import pytest
from pydantic import ValidationError

from macrocoach.infrastructure.postgres import EndpointRole
from macrocoach.settings import AppSettings, DatabaseSettings

DB_ENV_VARS = (
    "DB_USER",
    "DB_PASS",
    "DB_NAME",
    "DB_PORT",
    "DB_HOST_WRITE",
    "DB_HOST_READ_1",
    "DB_HOST_READ_2",
    "DB_READ_HOSTS",
    "DB_INIT_MAX_RETRIES",
    "DB_INIT_RETRY_DELAY_S",
    "DB_PASSWORD",
    "PASSWORD",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in DB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDatabaseSettings:
    def test_defaults_match_compose_deployment(self) -> None:
        settings = DatabaseSettings(_env_file=None)  # type: ignore[call-arg]

        assert settings.user == "postgres"
        assert settings.password.get_secret_value() == "admin_password"
        assert settings.name == "macrocoach_db"
        assert settings.port == 5432
        assert settings.host_write == "postgres-primary"
        assert settings.replica_hosts == ["postgres-replica-1", "postgres-replica-2"]
        assert settings.init_max_retries == 5
        assert settings.init_retry_delay_s == 2.0

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_USER", "coach")
        monkeypatch.setenv("DB_PASS", "s3cret")
        monkeypatch.setenv("DB_NAME", "coach_db")
        monkeypatch.setenv("DB_HOST_WRITE", "pg-main")
        monkeypatch.setenv("DB_HOST_READ_1", "pg-ro-a")
        monkeypatch.setenv("DB_HOST_READ_2", "pg-ro-b")

        settings = DatabaseSettings(_env_file=None)  # type: ignore[call-arg]

        assert settings.user == "coach"
        assert settings.password.get_secret_value() == "s3cret"
        assert settings.name == "coach_db"
        assert settings.replica_hosts == ["pg-ro-a", "pg-ro-b"]

    def test_unprefixed_password_is_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PASSWORD", "from-the-shell")

        settings = DatabaseSettings(_env_file=None)  # type: ignore[call-arg]

        assert settings.password.get_secret_value() == "admin_password"

    def test_db_password_is_accepted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PASSWORD", "s3cret")

        settings = DatabaseSettings(_env_file=None)  # type: ignore[call-arg]

        assert settings.password.get_secret_value() == "s3cret"

    def test_read_hosts_override_numbered_hosts(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_HOST_READ_1", "ignored")
        monkeypatch.setenv("DB_READ_HOSTS", '["r1", "r2", "r3"]')

        settings = DatabaseSettings(_env_file=None)  # type: ignore[call-arg]

        assert settings.replica_hosts == ["r1", "r2", "r3"]

    def test_to_cluster_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PASS", "s3cret")

        cluster = DatabaseSettings(_env_file=None).to_cluster_config()  # type: ignore[call-arg]

        endpoints = cluster.endpoints()
        assert [endpoint.endpoint_id for endpoint in endpoints] == [
            "postgres-primary",
            "postgres-replica-1",
            "postgres-replica-2",
        ]
        assert endpoints[0].role == EndpointRole.PRIMARY
        assert all(endpoint.role == EndpointRole.REPLICA for endpoint in endpoints[1:])
        assert all(endpoint.config.connection.database == "macrocoach_db" for endpoint in endpoints)
        assert all(
            endpoint.config.connection.password is not None
            and endpoint.config.connection.password.get_secret_value() == "s3cret"
            for endpoint in endpoints
        )

    def test_empty_replica_list_is_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_READ_HOSTS", "[]")
        settings = DatabaseSettings(_env_file=None)  # type: ignore[call-arg]

        with pytest.raises(ValueError):
            settings.to_cluster_config()

    def test_rejects_invalid_retry_count(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_INIT_MAX_RETRIES", "0")

        with pytest.raises(ValidationError):
            DatabaseSettings(_env_file=None)  # type: ignore[call-arg]


class TestAppSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("APP_PORT", raising=False)

        settings = AppSettings(_env_file=None)  # type: ignore[call-arg]

        assert settings.port == 3000
        assert settings.cors_origins == ["*"]
