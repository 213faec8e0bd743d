# src/loose_ends/web/session.py

"""
Session cookie helpers.

The cookie itself is Starlette's signed SessionMiddleware cookie; these helpers
only define what goes in it: the signed-in user ({id, name, timezone}) and the
OAuth ``state`` between the redirect and the callback.
"""

from __future__ import annotations

import secrets
from dataclasses import asdict, dataclass
from typing import Any

from starlette.requests import Request

USER_KEY = "user"
OAUTH_STATE_KEY = "oauth_state"


@dataclass(frozen=True, slots=True)
class SessionUser:
    id: str
    name: str
    timezone: str

    @classmethod
    def from_session(cls, raw: Any) -> "SessionUser | None":
        if not isinstance(raw, dict) or not raw.get("id"):
            return None
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name") or ""),
            timezone=str(raw.get("timezone") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def get_user(request: Request) -> SessionUser | None:
    return SessionUser.from_session(request.session.get(USER_KEY))


def set_user(request: Request, user: SessionUser) -> None:
    request.session[USER_KEY] = user.to_dict()


def clear_session(request: Request) -> None:
    request.session.clear()


def new_oauth_state(request: Request) -> str:
    state = secrets.token_urlsafe(24)
    request.session[OAUTH_STATE_KEY] = state
    return state


def pop_oauth_state(request: Request) -> str | None:
    value = request.session.pop(OAUTH_STATE_KEY, None)
    return str(value) if value else None
