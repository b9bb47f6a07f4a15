from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ..infrastructure.postgres import QueryRole
from ..matches import MatchCreate, MatchRecord
from .dependencies import MatchServiceDep, RouterDep

matches_router = APIRouter(prefix="/api", tags=["matches"])
diagnostics_router = APIRouter(prefix="/db", tags=["diagnostics"])

TEST_MATCH = MatchCreate(summoner_name="Test Summoner", champion="Test Champion", kda="0/0/0", win=False)


@matches_router.post("/match", status_code=status.HTTP_201_CREATED, response_model=MatchRecord)
async def create_match(match: MatchCreate, service: MatchServiceDep) -> MatchRecord:
    """Insert a match on the primary."""
    record, _ = await service.create(match)
    return record


@matches_router.get("/history")
async def match_history(service: MatchServiceDep) -> dict[str, Any]:
    """Last ten matches, read from one replica."""
    records, source = await service.recent()
    return {"source": source, "data": [record.model_dump(mode="json") for record in records]}


@diagnostics_router.get("/status")
async def database_status(router: RouterDep) -> JSONResponse:
    """Liveness of the primary and every replica."""
    # TODO: include router.schema_state so a DEGRADED bootstrap is visible here
    flags = await router.health_check()
    if all(flags.values()):
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={
                "status": "success",
                "connections": flags,
                "message": f"API is connected to all {len(flags)} databases.",
            },
        )

    down = [endpoint_id for endpoint_id, up in flags.items() if not up]
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "error",
            "connections": flags,
            "message": f"Unreachable: {', '.join(down)}",
        },
    )


@diagnostics_router.post("/write-test")
async def write_test(service: MatchServiceDep) -> dict[str, Any]:
    record, host_used = await service.create(TEST_MATCH)
    return {
        "host_used": host_used,
        "role": QueryRole.WRITE,
        "inserted_id": record.id,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@diagnostics_router.get("/read-test")
async def read_test(service: MatchServiceDep) -> Any:
    record, host_used = await service.latest()
    if record is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": "No data found in matches table", "host_used": host_used},
        )
    return {"host_used": host_used, "role": QueryRole.READ, "data": record.model_dump(mode="json")}
