from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator

KDA_PATTERN = r"^[0-9]+/[0-9]+/[0-9]+$"


class MatchCreate(BaseModel):
    """Body of ``POST /api/match``.

    ``kda`` and ``win`` are optional; missing values fall back to ``"0/0/0"``
    and ``False`` before the insert.
    """

    model_config = ConfigDict(extra="ignore")

    summoner_name: StrictStr = Field(min_length=1, max_length=255)
    champion: StrictStr = Field(min_length=1, max_length=100)
    kda: StrictStr = Field(default="0/0/0", pattern=KDA_PATTERN, max_length=50)
    win: StrictBool = Field(default=False)

    @field_validator("kda", mode="before")
    @classmethod
    def _blank_kda_means_default(cls, value: Any) -> Any:
        if value is None or value == "":
            return "0/0/0"
        return value


class MatchRecord(BaseModel):
    """A persisted row of the ``matches`` table."""

    model_config = ConfigDict(frozen=True)

    id: int
    summoner_name: str
    champion: str
    kda: str | None
    win: bool | None
    created_at: datetime
