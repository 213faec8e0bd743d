# src/loose_ends/auth/github.py

"""
GitHub OAuth sign-in.

Two steps:
- authorize_url(state): where to send the browser
- authenticate(code):   trade the callback code for an access token, then read
                        the profile (id + display name)

The time zone reported for a fresh sign-in is only a first guess (the configured
default); the browser corrects it later through /account/zone.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.ports import Identity

logger = logging.getLogger(__name__)


class OAuthError(Exception):
    """Sign-in could not be completed."""


class GitHubOAuth:
    def __init__(self, settings: Any, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._client_id = str(getattr(settings, "github_client_id", "") or "")
        self._client_secret = str(getattr(settings, "github_client_secret", "") or "")
        self._callback_url = str(getattr(settings, "github_callback_url", "") or "")
        self._authorize_url = str(
            getattr(settings, "github_authorize_url", "https://github.com/login/oauth/authorize")
        )
        self._token_url = str(getattr(settings, "github_token_url", "https://github.com/login/oauth/access_token"))
        self._api_url = str(getattr(settings, "github_api_url", "https://api.github.com")).rstrip("/")
        self._default_timezone = str(getattr(settings, "default_timezone", "UTC") or "UTC")
        self._timeout = httpx.Timeout(float(getattr(settings, "http_timeout_seconds", 10.0)))
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    def _require_configured(self) -> None:
        if not self.configured:
            raise OAuthError(
                "GitHub OAuth is not configured. Set LOOSE_ENDS_GITHUB_CLIENT_ID and "
                "LOOSE_ENDS_GITHUB_CLIENT_SECRET in your .env."
            )

    def authorize_url(self, state: str) -> str:
        self._require_configured()
        params = {"client_id": self._client_id, "state": state}
        if self._callback_url:
            params["redirect_uri"] = self._callback_url
        return str(httpx.URL(self._authorize_url, params=params))

    async def authenticate(self, code: str) -> Identity:
        self._require_configured()
        if not code:
            raise OAuthError("Missing authorization code")

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                token = await self._exchange_code(client, code)
                profile = await self._fetch_profile(client, token)
            except httpx.HTTPError as exc:
                logger.warning("GitHub OAuth request failed: %s", exc)
                raise OAuthError(f"GitHub request failed: {exc}") from exc

        user_id = profile.get("id")
        if user_id is None:
            raise OAuthError("GitHub profile has no id")

        return Identity(
            id=str(user_id),
            name=str(profile.get("name") or profile.get("login") or ""),
            timezone=self._default_timezone,
        )

    async def _exchange_code(self, client: httpx.AsyncClient, code: str) -> str:
        data = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "code": code,
        }
        if self._callback_url:
            data["redirect_uri"] = self._callback_url

        resp = await client.post(self._token_url, data=data, headers={"Accept": "application/json"})
        resp.raise_for_status()
        body = resp.json()

        # GitHub reports bad codes with 200 + {"error": ...}.
        if "error" in body:
            raise OAuthError(str(body.get("error_description") or body["error"]))
        token = body.get("access_token")
        if not token:
            raise OAuthError("GitHub did not return an access token")
        return str(token)

    async def _fetch_profile(self, client: httpx.AsyncClient, token: str) -> dict[str, Any]:
        resp = await client.get(
            f"{self._api_url}/user",
            headers={"Authorization": f"Bearer {token}", "Accept": "application/vnd.github+json"},
        )
        resp.raise_for_status()
        body = resp.json()
        if not isinstance(body, dict):
            raise OAuthError("Unexpected GitHub profile payload")
        return body
