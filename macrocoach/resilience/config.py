from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RetryConfig(BaseModel):
    """Bounded retry with a fixed delay between attempts.

    The last exception is re-raised once every attempt has failed.
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=5, ge=1, description="Total attempts, including the first")
    delay_s: float = Field(default=2.0, ge=0, description="Fixed wait between attempts in seconds")

    retry_on_exceptions: tuple[type[Exception], ...] | None = Field(
        default=None,
        description="Exception types that trigger retry (None = all exceptions)",
    )
