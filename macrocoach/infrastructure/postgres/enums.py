from enum import StrEnum


class HealthStatus(StrEnum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class EndpointRole(StrEnum):
    PRIMARY = "primary"
    REPLICA = "replica"


class QueryRole(StrEnum):
    WRITE = "WRITE"
    READ = "READ"


class SchemaState(StrEnum):
    PENDING = "pending"
    READY = "ready"
    DEGRADED = "degraded"
