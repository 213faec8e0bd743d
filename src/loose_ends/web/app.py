# src/loose_ends/web/app.py

"""
HTTP surface.

Thin route wiring over the task engine:
- /auth/github, /auth/github/callback, /signout: sign-in flow + session
- /todos:        GET lists + views (projected through the caller's in-flight
                 commands), POST executes a command
- /account:      GET profile, POST executes a command (DeleteAccount)
- /account/zone: POST stores the browser's IANA time zone in the session
- /stats:        completion stats

Task routes need a signed-in session; anonymous requests are sent to "/".
"""

from __future__ import annotations

import logging
from dataclasses import replace

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.middleware.sessions import SessionMiddleware

from ..auth.github import OAuthError
from ..core.state import AppState
from ..tasks.dispatch import execute_command
from ..tasks.stats import StatsScopes, get_stats
from ..tasks.views import build_task_view
from ..timeutil import is_valid_zone, today_label
from .session import (
    SessionUser,
    clear_session,
    get_user,
    new_oauth_state,
    pop_oauth_state,
    set_user,
)

logger = logging.getLogger(__name__)


class NotAuthenticated(Exception):
    pass


def require_user(request: Request) -> SessionUser:
    user = get_user(request)
    if user is None:
        raise NotAuthenticated()
    return user


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


def create_app(app_state: AppState) -> FastAPI:
    settings = app_state.settings
    store = app_state.task_store

    app = FastAPI(title=settings.app_name)
    app.state.app_state = app_state
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.cookie_secure,
    )

    async def _not_authenticated(request: Request, exc: NotAuthenticated) -> RedirectResponse:
        return _redirect("/")

    app.add_exception_handler(NotAuthenticated, _not_authenticated)

    def zone_of(user: SessionUser) -> str:
        return user.timezone or settings.default_timezone

    def locale_of(request: Request) -> str:
        header = request.headers.get("accept-language", "")
        first = header.split(",", 1)[0].split(";", 1)[0].strip()
        return first or settings.default_locale

    async def run_command(request: Request, user: SessionUser) -> JSONResponse:
        form = await request.form()
        outcome = await run_in_threadpool(
            execute_command, form, user_id=user.id, repo=store, tracker=app_state.pending_for(user.id)
        )
        if outcome.ends_session:
            logger.info("Account deleted user=%s; ending session", user.id)
            clear_session(request)
            app_state.drop_pending(user.id)
        return JSONResponse(outcome.to_dict(), status_code=int(outcome.status))

    # ---- public ----

    @app.get("/health")
    def health() -> dict:
        return {"ok": True}

    @app.get("/")
    def index(request: Request) -> dict:
        user = get_user(request)
        return {
            "app": settings.app_name,
            "authenticated": user is not None,
            "user": user.to_dict() if user else None,
            "signin": "/auth/github",
        }

    # ---- sign-in ----

    @app.get("/auth/github")
    def auth_github(request: Request) -> RedirectResponse:
        try:
            url = app_state.identity.authorize_url(new_oauth_state(request))
        except OAuthError:
            logger.exception("Cannot start GitHub sign-in")
            return _redirect("/")
        return _redirect(url)

    @app.get("/auth/github/callback")
    async def auth_github_callback(request: Request, code: str = "", state: str = "") -> RedirectResponse:
        expected = pop_oauth_state(request)
        if not state or state != expected:
            logger.warning("OAuth callback with mismatched state")
            return _redirect("/")

        try:
            identity = await app_state.identity.authenticate(code)
        except OAuthError:
            logger.exception("GitHub sign-in failed")
            return _redirect("/")

        set_user(request, SessionUser(id=identity.id, name=identity.name, timezone=identity.timezone))
        logger.info("Signed in user=%s", identity.id)
        return _redirect("/todos")

    @app.get("/signout")
    def signout(request: Request) -> RedirectResponse:
        clear_session(request)
        return _redirect("/")

    # ---- tasks ----

    @app.get("/todos")
    def list_todos(request: Request, user: SessionUser = Depends(require_user)) -> dict:
        tz = zone_of(user)
        locale = locale_of(request)
        tasks = store.list_tasks(user.id, tz)
        tracker = app_state.pending.get(user.id)
        view = build_task_view(tasks, tracker.by_task() if tracker is not None else None, tz)
        return {
            **view.to_dict(locale),
            "today": today_label(tz, locale, now=view.now),
            "todos": [t.to_dict() for t in tasks],
        }

    @app.post("/todos")
    async def todo_command(request: Request, user: SessionUser = Depends(require_user)) -> JSONResponse:
        return await run_command(request, user)

    # ---- account ----

    @app.get("/account")
    def account(user: SessionUser = Depends(require_user)) -> dict:
        return {"user": user.to_dict()}

    @app.post("/account")
    async def account_command(request: Request, user: SessionUser = Depends(require_user)) -> JSONResponse:
        return await run_command(request, user)

    @app.get("/account/zone")
    def account_zone_get() -> RedirectResponse:
        return _redirect("/")

    @app.post("/account/zone")
    async def account_zone(request: Request, user: SessionUser = Depends(require_user)) -> JSONResponse:
        form = await request.form()
        timezone = str(form.get("timezone") or "").strip()
        if not is_valid_zone(timezone):
            return JSONResponse({"ok": False, "error": f"Unknown time zone: {timezone!r}"}, status_code=400)

        set_user(request, replace(user, timezone=timezone))
        return JSONResponse({"ok": True})

    # ---- stats ----

    @app.get("/stats")
    def stats(request: Request, user: SessionUser = Depends(require_user)) -> JSONResponse:
        try:
            scopes = StatsScopes.from_query(request.query_params)
        except ValidationError as exc:
            return JSONResponse({"error": str(exc)}, status_code=400)

        result = get_stats(store, user.id, scopes, zone_of(user))
        return JSONResponse(result.to_dict())

    return app
