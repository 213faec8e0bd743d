# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from loose_ends.core.state import AppState
from loose_ends.tasks.task_store import TaskStore

from .fakes import FakeIdentityProvider


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the web app.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="Loose Ends (test)",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        session_secret="test-secret",
        session_cookie="__session",
        session_max_age=3600,
        cookie_secure=False,
        github_client_id="client-id",
        github_client_secret="client-secret",
        github_callback_url="http://testserver/auth/github/callback",
        github_authorize_url="https://github.example.test/login/oauth/authorize",
        github_token_url="https://github.example.test/login/oauth/access_token",
        github_api_url="https://api.github.example.test",
        http_timeout_seconds=5.0,
        default_timezone="UTC",
        default_locale="en",
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_db_path)


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore) -> AppState:
    """
    AppState wired with a fake identity provider.

    NOTE: We keep the real SQLite store here because its correctness is part
    of what we want to test.
    """
    return AppState(settings=settings, task_store=store, identity=FakeIdentityProvider())
