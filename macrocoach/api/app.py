"""FastAPI application factory.

Startup builds the `DatabaseRouter` from the environment and runs the
bounded schema bootstrap before requests are accepted. A bootstrap that
ends `DEGRADED` is logged and the server starts anyway, so ``/db/status``
stays reachable for diagnosis. Shutdown closes every pool.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..infrastructure.postgres import DatabaseRouter
from ..logger import configure_logging, get_logger
from ..settings import AppSettings, DatabaseSettings
from .errors import register_exception_handlers
from .routes import diagnostics_router, matches_router

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from contextlib import AbstractAsyncContextManager

logger = get_logger(__name__)


def _build_lifespan(
    db_settings: DatabaseSettings | None,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.router is not None:
            yield
            return

        configure_logging()
        settings = db_settings or DatabaseSettings()
        router = DatabaseRouter.from_config(
            settings.to_cluster_config(),
            max_retries=settings.init_max_retries,
            retry_delay_s=settings.init_retry_delay_s,
        )
        app.state.router = router

        state = await router.initialize_schema()
        logger.info("API starting", schema_state=str(state), primary=router.registry.primary_endpoint_id)

        try:
            yield
        finally:
            await router.aclose()
            app.state.router = None
            logger.info("API stopped")

    return lifespan


def create_app(
    app_settings: AppSettings | None = None,
    db_settings: DatabaseSettings | None = None,
    router: DatabaseRouter | None = None,
) -> FastAPI:
    """Build the application.

    Passing ``router`` skips the startup bootstrap; the caller owns its
    lifecycle.
    """
    settings = app_settings or AppSettings()

    app = FastAPI(title="MacroCoach API", version=__version__, lifespan=_build_lifespan(db_settings))
    app.state.router = router

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(matches_router)
    app.include_router(diagnostics_router)
    return app
