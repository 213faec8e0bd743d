# src/loose_ends/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Local overrides may come from a gitignored config_local.py.
"""

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "LOOSE_ENDS"

logger = logging.getLogger(__name__)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- HTTP server ----
    host: str
    port: int

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path

    # ---- Session cookie ----
    session_secret: str
    session_cookie: str
    session_max_age: int
    cookie_secure: bool

    # ---- GitHub OAuth ----
    github_client_id: str
    github_client_secret: str
    github_callback_url: str
    github_authorize_url: str
    github_token_url: str
    github_api_url: str
    http_timeout_seconds: float

    # ---- Presentation defaults ----
    default_timezone: str
    default_locale: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "Loose Ends")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        host = _env(_k("HOST"), "127.0.0.1")
        port = _env_int(_k("PORT"), _env_int("PORT", 8000))

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/loose_ends"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")

        session_secret = (_first_env(_k("SESSION_SECRET"), "SESSION_SECRET", default="") or "").strip()
        if not session_secret:
            # Sessions will not survive a restart; fine for local runs only.
            session_secret = secrets.token_urlsafe(32)
            logger.warning("No %s set; using a random per-process session secret.", _k("SESSION_SECRET"))
        session_cookie = _env(_k("SESSION_COOKIE"), "__session")
        session_max_age = _env_int(_k("SESSION_MAX_AGE"), 365 * 24 * 60 * 60)
        cookie_secure = _env_bool(_k("COOKIE_SECURE"), False)

        github_client_id = (_first_env(_k("GITHUB_CLIENT_ID"), "GITHUB_CLIENT_ID", default="") or "").strip()
        github_client_secret = (
            _first_env(_k("GITHUB_CLIENT_SECRET"), "GITHUB_CLIENT_SECRET", default="") or ""
        ).strip()
        github_callback_url = (
            _first_env(
                _k("GITHUB_CALLBACK_URL"),
                "GITHUB_CALLBACK_URL",
                default=f"http://{host}:{port}/auth/github/callback",
            )
            or ""
        ).strip()
        github_authorize_url = _env(_k("GITHUB_AUTHORIZE_URL"), "https://github.com/login/oauth/authorize")
        github_token_url = _env(_k("GITHUB_TOKEN_URL"), "https://github.com/login/oauth/access_token")
        github_api_url = _env(_k("GITHUB_API_URL"), "https://api.github.com")
        http_timeout_seconds = _env_float(_k("HTTP_TIMEOUT_SECONDS"), 10.0)

        default_timezone = _env(_k("DEFAULT_TIMEZONE"), "UTC").strip() or "UTC"
        default_locale = _env(_k("DEFAULT_LOCALE"), "en").strip() or "en"

        return Settings(
            app_name=app_name,
            log_level=log_level,
            host=host,
            port=port,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            session_secret=session_secret,
            session_cookie=session_cookie,
            session_max_age=session_max_age,
            cookie_secure=cookie_secure,
            github_client_id=github_client_id,
            github_client_secret=github_client_secret,
            github_callback_url=github_callback_url,
            github_authorize_url=github_authorize_url,
            github_token_url=github_token_url,
            github_api_url=github_api_url,
            http_timeout_seconds=http_timeout_seconds,
            default_timezone=default_timezone,
            default_locale=default_locale,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env for secrets; use config_local.py only for safe overrides.
try:
    import config_local as _config_local  # type: ignore

    if hasattr(_config_local, "DEFAULT_TIMEZONE"):
        object.__setattr__(SETTINGS, "default_timezone", str(_config_local.DEFAULT_TIMEZONE))  # type: ignore[misc]
    if hasattr(_config_local, "COOKIE_SECURE"):
        object.__setattr__(SETTINGS, "cookie_secure", bool(_config_local.COOKIE_SECURE))  # type: ignore[misc]
except Exception:
    pass


def get_settings() -> Settings:
    return SETTINGS
