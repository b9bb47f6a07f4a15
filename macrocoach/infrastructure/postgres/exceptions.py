"""Errors raised by the routing layer.

Driver exceptions never escape a pool: they are translated into one of the
types below and chained via ``raise ... from exc``.
"""

from __future__ import annotations

import asyncpg

from .enums import EndpointRole

# NOTE: asyncpg raises plain OSError/TimeoutError for socket and DNS failures.
# Server-side: class 08 (connection), 28 (auth), 3D000 (unknown database),
# 53 (insufficient resources) and 57 (operator intervention, e.g. shutdown).
CONNECTION_FAILURES: tuple[type[BaseException], ...] = (
    OSError,
    TimeoutError,
    asyncpg.exceptions.PostgresConnectionError,
    asyncpg.exceptions.OperatorInterventionError,
    asyncpg.exceptions.InvalidAuthorizationSpecificationError,
    asyncpg.exceptions.InvalidCatalogNameError,
    asyncpg.exceptions.InsufficientResourcesError,
)


class DatabaseError(Exception):
    """Base class for errors attributed to a single endpoint."""

    def __init__(self, message: str, *, endpoint_id: str, role: EndpointRole) -> None:
        super().__init__(message)
        self.message = message
        self.endpoint_id = endpoint_id
        self.role = role


class DatabaseConnectionError(DatabaseError, ConnectionError):
    """The endpoint could not be reached."""


class QueryError(DatabaseError):
    """The endpoint was reachable but the statement failed."""


def translate_driver_error(exc: BaseException, *, endpoint_id: str, role: EndpointRole) -> DatabaseError:
    """Map a driver exception onto the routing layer's taxonomy."""
    if isinstance(exc, CONNECTION_FAILURES):
        detail = str(exc) or type(exc).__name__
        return DatabaseConnectionError(
            f"Cannot reach {role} endpoint {endpoint_id!r}: {detail}",
            endpoint_id=endpoint_id,
            role=role,
        )
    return QueryError(str(exc), endpoint_id=endpoint_id, role=role)
