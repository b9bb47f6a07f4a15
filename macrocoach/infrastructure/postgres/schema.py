"""Startup schema bootstrap with a bounded, fixed-delay retry.

The primary is often still starting when the API container comes up, so
the ``CREATE TABLE IF NOT EXISTS`` is attempted up to ``max_retries``
times. Running out of attempts is not fatal: the initializer ends in
`SchemaState.DEGRADED`, logs the last error and returns. Nothing retries
afterwards; writes keep failing until the primary is reachable and the
process is restarted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...logger import get_logger
from ...resilience import RetryConfig, retry
from .enums import SchemaState
from .exceptions import DatabaseError

if TYPE_CHECKING:
    from tenacity import RetryCallState

    from ...resilience.types import SleepFunction
    from .pool import AsyncConnectionPool

logger = get_logger(__name__)

MATCHES_DDL = """
CREATE TABLE IF NOT EXISTS matches (
    id SERIAL PRIMARY KEY,
    summoner_name VARCHAR(255) NOT NULL,
    champion VARCHAR(100) NOT NULL,
    kda VARCHAR(50) DEFAULT '0/0/0',
    win BOOLEAN DEFAULT FALSE,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""

DEFAULT_MAX_RETRIES = 5
DEFAULT_RETRY_DELAY_S = 2.0


class SchemaInitializer:
    """Ensures the ``matches`` table exists on the primary.

    Parameters
    ----------
    pool
        The primary pool.
    max_retries
        Total number of attempts before giving up.
    retry_delay_s
        Fixed delay between attempts, in seconds.
    sleep
        Awaitable used for the delay; defaults to `asyncio.sleep`.
    ddl
        Idempotent statement to run.
    """

    def __init__(
        self,
        pool: AsyncConnectionPool,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay_s: float = DEFAULT_RETRY_DELAY_S,
        sleep: SleepFunction | None = None,
        ddl: str = MATCHES_DDL,
    ) -> None:
        self._pool = pool
        self._ddl = ddl
        self._state = SchemaState.PENDING
        self._attempts = 0
        self._config = RetryConfig(
            max_attempts=max_retries,
            delay_s=retry_delay_s,
            retry_on_exceptions=(DatabaseError,),
        )
        self._sleep = sleep

    @property
    def state(self) -> SchemaState:
        return self._state

    @property
    def attempts(self) -> int:
        """Attempts made by the last `ainitialize` call."""
        return self._attempts

    @property
    def max_retries(self) -> int:
        return self._config.max_attempts

    def _log_failed_attempt(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.error(
            "Schema initialization attempt failed",
            attempt=retry_state.attempt_number,
            max_retries=self._config.max_attempts,
            endpoint_id=self._pool.endpoint_id,
            error=str(error),
        )

    def _log_before_sleep(self, retry_state: RetryCallState) -> None:
        logger.info(
            "Retrying schema initialization",
            next_attempt=retry_state.attempt_number + 1,
            delay_s=self._config.delay_s,
        )

    async def _attempt(self) -> None:
        self._attempts += 1
        await self._pool.aexecute(self._ddl)

    async def ainitialize(self) -> SchemaState:
        """Run the bounded retry loop once.

        Returns
        -------
        SchemaState
            ``READY`` on success, ``DEGRADED`` once every attempt failed.
        """
        self._attempts = 0
        attempt = retry(
            self._config,
            after=self._log_failed_attempt,
            before_sleep=self._log_before_sleep,
            sleep=self._sleep,
        )(self._attempt)

        try:
            await attempt()
        except DatabaseError as exc:
            self._state = SchemaState.DEGRADED
            logger.error(
                "Schema initialization gave up; continuing without a verified schema",
                attempts=self._attempts,
                endpoint_id=self._pool.endpoint_id,
                error=exc.message,
            )
            return self._state

        self._state = SchemaState.READY
        logger.info(
            "Schema ready on primary",
            table="matches",
            endpoint_id=self._pool.endpoint_id,
            attempts=self._attempts,
        )
        return self._state
