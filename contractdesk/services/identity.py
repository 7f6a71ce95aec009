"""Identity-provider client (Supabase GoTrue REST API).

Only the four calls the credential bridge needs are wrapped:
user lookup by bearer token, admin user upsert, password grant and
refresh-token grant. Every failed call (transport error, non-2xx response or
unreadable body) is raised as an :class:`UpstreamError` naming the stage,
except token rejections which surface as :class:`UnauthorizedError`.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from contractdesk.core.config import Settings
from contractdesk.core.exceptions import ConfigurationError, UnauthorizedError, UpstreamError

logger = logging.getLogger(__name__)


def _session_payload(stage: str, res: httpx.Response) -> dict[str, Any]:
    """Reduce a GoTrue token response to ``{access_token, refresh_token, expires_at}``."""
    try:
        data = res.json()
        expires_at = data.get("expires_at")
        if expires_at is None and data.get("expires_in") is not None:
            expires_at = int(time.time()) + int(data["expires_in"])
        return {
            "access_token": data["access_token"],
            "refresh_token": data["refresh_token"],
            "expires_at": expires_at,
        }
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise UpstreamError(stage, f"malformed token response ({exc!r})") from exc


class IdentityProviderClient:
    """Thin async wrapper over the GoTrue endpoints used by the API."""

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self._settings = settings
        self._http = http

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        base = self._settings.supabase_url or ""
        if not base.startswith("http"):
            raise ConfigurationError("SUPABASE_URL")
        return f"{base.rstrip('/')}/auth/v1{path}"

    def _anon_headers(self) -> dict[str, str]:
        if not self._settings.supabase_anon_key:
            raise ConfigurationError("SUPABASE_ANON_KEY")
        return {"apikey": self._settings.supabase_anon_key}

    def _service_headers(self) -> dict[str, str]:
        key = self._settings.supabase_service_role_key
        if not key:
            raise ConfigurationError("SUPABASE_SERVICE_ROLE_KEY")
        return {"apikey": key, "Authorization": f"Bearer {key}"}

    async def _send(self, stage: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise UpstreamError(stage, repr(exc)) from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_user(self, access_token: str) -> dict[str, Any]:
        """Return the identity-provider user (``{"id": ..., "email": ...}``) for a bearer token."""
        res = await self._send(
            "auth_user_lookup",
            "GET",
            self._url("/user"),
            headers={**self._anon_headers(), "Authorization": f"Bearer {access_token}"},
        )
        if res.status_code >= 400:
            raise UnauthorizedError(
                f"Invalid access token. details={res.text or f'status={res.status_code}'}"
            )
        try:
            user = res.json()
        except ValueError as exc:
            raise UpstreamError("auth_user_lookup", f"unreadable user response: {res.text[:200]}") from exc
        if not isinstance(user, dict):
            raise UpstreamError("auth_user_lookup", "unexpected user response")
        return user

    async def upsert_user(self, user_id: str, email: str, password: str) -> None:
        """Set *email* / *password* on user *user_id*, creating the user if it does not exist.

        Always overwrites, so concurrent logins for the same employee converge
        on the same derived credentials.
        """
        payload = {"email": email, "password": password, "email_confirm": True}
        res = await self._send(
            "auth_user_upsert",
            "PUT",
            self._url(f"/admin/users/{user_id}"),
            headers=self._service_headers(),
            json=payload,
        )
        if res.status_code == 404:
            logger.info("Shadow account %s missing in identity provider; creating it", user_id)
            res = await self._send(
                "auth_user_upsert",
                "POST",
                self._url("/admin/users"),
                headers=self._service_headers(),
                json={"id": user_id, **payload},
            )
        if res.status_code >= 400:
            raise UpstreamError("auth_user_upsert", res.text)

    async def password_grant(self, email: str, password: str) -> dict[str, Any]:
        res = await self._send(
            "session_issue",
            "POST",
            self._url("/token"),
            params={"grant_type": "password"},
            headers=self._anon_headers(),
            json={"email": email, "password": password},
        )
        if res.status_code >= 400:
            raise UpstreamError("session_issue", res.text)
        return _session_payload("session_issue", res)

    async def refresh_grant(self, refresh_token: str) -> dict[str, Any]:
        res = await self._send(
            "session_refresh",
            "POST",
            self._url("/token"),
            params={"grant_type": "refresh_token"},
            headers=self._anon_headers(),
            json={"refresh_token": refresh_token},
        )
        if res.status_code in (400, 401):
            raise UnauthorizedError(f"Refresh token rejected. details={res.text}")
        if res.status_code >= 400:
            raise UpstreamError("session_refresh", res.text)
        return _session_payload("session_refresh", res)
