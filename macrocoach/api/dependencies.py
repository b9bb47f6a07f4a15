from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from ..infrastructure.postgres import DatabaseRouter
from ..matches import MatchService


def get_router(request: Request) -> DatabaseRouter:
    return request.app.state.router


def get_match_service(router: Annotated[DatabaseRouter, Depends(get_router)]) -> MatchService:
    return MatchService(router)


RouterDep = Annotated[DatabaseRouter, Depends(get_router)]
MatchServiceDep = Annotated[MatchService, Depends(get_match_service)]
