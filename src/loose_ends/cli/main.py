# src/loose_ends/cli/main.py

"""
`loose-ends` console script.

Order matters: logging first (so settings/store warnings are captured), then the
AppState and the FastAPI app, then uvicorn in the foreground until Ctrl+C.
"""

from __future__ import annotations

import logging

import uvicorn

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..web.app import create_app

logger = logging.getLogger(__name__)


def _console_level(settings) -> int:
    name = str(getattr(settings, "log_level", "INFO")).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _close_store(state: AppState) -> None:
    close = getattr(state.task_store, "close", None)
    if close is None:
        return
    try:
        close()
    except Exception:
        logger.debug("Task store close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()
    log_file = setup_logging(log_dir=settings.data_dir, console_level=_console_level(settings))
    logger.info("Starting %s on http://%s:%s (log: %s)", settings.app_name, settings.host, settings.port, log_file)

    state = create_initial_state(settings=settings)
    app = create_app(state)

    try:
        # log_config=None: keep uvicorn on the root handlers from setup_logging().
        uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    finally:
        _close_store(state)
        logger.info("Stopped.")


if __name__ == "__main__":
    main()
