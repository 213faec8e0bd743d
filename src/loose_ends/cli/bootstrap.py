# src/loose_ends/cli/bootstrap.py

"""
Composition root for the server process.

create_initial_state() turns a settings object into an AppState:
- the data dir and the SQLite file's parent exist,
- TaskStore is opened (schema created or migrated),
- GitHub sign-in is wired, or flagged when its credentials are missing.
"""

from __future__ import annotations

import logging
from typing import Any

from ..auth.github import GitHubOAuth
from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def create_initial_state(*, settings: Any = None) -> AppState:
    """Build AppState from ``settings`` (default: the process-wide get_settings())."""
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    identity = GitHubOAuth(settings)
    if not identity.configured:
        logger.warning("GitHub OAuth credentials are missing; sign-in will not work.")

    store = TaskStore(settings.tasks_db_path)
    logger.info(
        "State ready db=%s sign-in=%s default_tz=%s",
        settings.tasks_db_path,
        "github" if identity.configured else "disabled",
        settings.default_timezone,
    )
    return AppState(settings=settings, task_store=store, identity=identity)
