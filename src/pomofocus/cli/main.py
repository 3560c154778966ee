# src/pomofocus/cli/main.py

"""
CLI entrypoints.

- `pomofocus`: initializes logging, builds AppState, runs the console REPL.
- `pomofocus-server`: initializes logging and serves the HTTP API with uvicorn.
"""

from __future__ import annotations

import logging

import uvicorn

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import level_from_name, setup_logging

logger = logging.getLogger(__name__)


def _init_logging(settings) -> None:
    console_level = level_from_name(getattr(settings, "log_level", "INFO"))
    setup_logging(log_dir=getattr(settings, "data_dir", ".local/pomofocus"), console_level=console_level)


def main() -> None:
    settings = get_settings()
    _init_logging(settings)
    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)
    try:
        run_console_loop(state)
    finally:
        logger.info("Bye.")


def serve() -> None:
    from ..web.app import create_app

    settings = get_settings()
    _init_logging(settings)
    logger.info("Starting %s HTTP API on %s:%s", settings.app_name, settings.host, settings.port)

    app = create_app(create_initial_state(settings=settings))
    # Logging is already configured; keep uvicorn from installing its own handlers.
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
