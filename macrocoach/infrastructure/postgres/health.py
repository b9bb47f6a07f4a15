"""Health models and the aggregator that probes every pool."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ...logger import get_logger
from .enums import EndpointRole, HealthStatus

if TYPE_CHECKING:
    from .registry import PoolRegistry

logger = get_logger(__name__)


class EndpointHealth(BaseModel):
    """Result of a liveness probe against one endpoint's pool."""

    model_config = ConfigDict(frozen=True)

    endpoint_id: str
    role: EndpointRole
    status: HealthStatus
    pool_size: int = 0
    pool_max_size: int
    pool_idle_size: int = 0
    latency_s: float | None = None
    message: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pool_utilization_pct(self) -> float:
        """Pool utilization as percentage."""
        if self.pool_max_size == 0:
            return 0.0
        return (self.pool_size / self.pool_max_size) * 100

    @property
    def is_healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    @classmethod
    def unhealthy(cls, *, endpoint_id: str, role: EndpointRole, pool_max_size: int, error: str) -> Self:
        """Create result for a failed probe.

        Parameters
        ----------
        endpoint_id
            Identifier of the probed endpoint.
        role
            Role of the probed endpoint.
        pool_max_size
            Maximum pool size from configuration.
        error
            Error message describing the failure.
        """
        return cls(
            endpoint_id=endpoint_id,
            role=role,
            status=HealthStatus.UNHEALTHY,
            pool_max_size=pool_max_size,
            message=error,
        )

    @classmethod
    def healthy(
        cls,
        *,
        endpoint_id: str,
        role: EndpointRole,
        pool_size: int,
        pool_max_size: int,
        pool_idle_size: int,
        latency_s: float,
    ) -> Self:
        return cls(
            endpoint_id=endpoint_id,
            role=role,
            status=HealthStatus.HEALTHY,
            pool_size=pool_size,
            pool_max_size=pool_max_size,
            pool_idle_size=pool_idle_size,
            latency_s=latency_s,
            message="Pool is healthy",
        )


class ClusterHealthResult(BaseModel):
    """Aggregated health across the primary and all replicas."""

    model_config = ConfigDict(frozen=True)

    status: HealthStatus
    primary: EndpointHealth
    replicas: tuple[EndpointHealth, ...]
    healthy_replica_count: int
    total_replica_count: int

    @property
    def is_healthy(self) -> bool:
        """Primary and every replica answered the probe."""
        return self.status == HealthStatus.HEALTHY

    @property
    def is_operational(self) -> bool:
        """Writes can be served (primary healthy)."""
        return self.primary.is_healthy

    def as_flags(self) -> dict[str, bool]:
        """Map each endpoint id to its liveness flag, primary first."""
        return {health.endpoint_id: health.is_healthy for health in (self.primary, *self.replicas)}


class HealthAggregator:
    """Probes every pool in a registry and summarises the results.

    Each pool is probed concurrently and independently: one pool failing,
    or even raising unexpectedly, never hides the state of the others.
    """

    def __init__(self, registry: PoolRegistry) -> None:
        self._registry = registry

    async def acheck_all(self) -> ClusterHealthResult:
        pools = self._registry.all_pools()
        results = await asyncio.gather(*(pool.ahealth_check() for pool in pools), return_exceptions=True)

        reports: list[EndpointHealth] = []
        for pool, result in zip(pools, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(
                    "Health probe raised unexpectedly",
                    endpoint_id=pool.endpoint_id,
                    error=str(result),
                )
                result = EndpointHealth.unhealthy(
                    endpoint_id=pool.endpoint_id,
                    role=pool.role,
                    pool_max_size=pool.pool_max_size,
                    error=str(result) or type(result).__name__,
                )
            reports.append(result)

        primary, *replicas = reports
        healthy_count = sum(1 for replica in replicas if replica.is_healthy)

        if not primary.is_healthy:
            overall_status = HealthStatus.UNHEALTHY
        elif healthy_count < len(replicas):
            overall_status = HealthStatus.DEGRADED
        else:
            overall_status = HealthStatus.HEALTHY

        if overall_status != HealthStatus.HEALTHY:
            logger.warning(
                "Database cluster not fully healthy",
                status=str(overall_status),
                flags={r.endpoint_id: r.is_healthy for r in reports},
            )

        return ClusterHealthResult(
            status=overall_status,
            primary=primary,
            replicas=tuple(replicas),
            healthy_replica_count=healthy_count,
            total_replica_count=len(replicas),
        )
