"""Match persistence on top of `DatabaseRouter`.

Inserts go to the primary; history reads go to a replica and report which
one served them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..infrastructure.postgres import QueryRole
from ..logger import get_logger
from .models import MatchCreate, MatchRecord

if TYPE_CHECKING:
    from ..infrastructure.postgres import DatabaseRouter

logger = get_logger(__name__)

INSERT_MATCH_SQL = (
    "INSERT INTO matches (summoner_name, champion, kda, win) VALUES ($1, $2, $3, $4) RETURNING *"
)
RECENT_MATCHES_SQL = "SELECT * FROM matches ORDER BY created_at DESC, id DESC LIMIT $1"

HISTORY_LIMIT = 10


class MatchService:
    def __init__(self, router: DatabaseRouter) -> None:
        self._router = router

    async def create(self, match: MatchCreate) -> tuple[MatchRecord, str]:
        """Insert ``match`` on the primary.

        Returns
        -------
        tuple[MatchRecord, str]
            The stored row and the primary's endpoint id.
        """
        result = await self._router.execute(
            QueryRole.WRITE, INSERT_MATCH_SQL, match.summoner_name, match.champion, match.kda, match.win
        )
        record = MatchRecord.model_validate(dict(result.rows[0]))
        logger.info("Match recorded", match_id=record.id, summoner_name=record.summoner_name)
        return record, result.decision.endpoint_id

    async def recent(self, limit: int = HISTORY_LIMIT) -> tuple[list[MatchRecord], str]:
        """Most recent matches, newest first, from one replica."""
        rows, source = await self._router.execute_read(RECENT_MATCHES_SQL, limit)
        return [MatchRecord.model_validate(dict(row)) for row in rows], source

    async def latest(self) -> tuple[MatchRecord | None, str]:
        records, source = await self.recent(limit=1)
        return (records[0] if records else None), source
