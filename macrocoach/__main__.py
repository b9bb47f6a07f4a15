"""Run the API with uvicorn: ``python -m macrocoach``."""

from __future__ import annotations

import uvicorn

from .api import create_app
from .logger import configure_logging
from .settings import AppSettings


def main() -> None:
    configure_logging()
    settings = AppSettings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
