"""Google API access-token acquisition.

Credential sources, in priority order:
  1. OAuth refresh-token exchange (client id + secret + refresh token)
  2. A statically configured access token (also the fallback when 1 fails)
  3. Service-account JWT-bearer exchange (RS256 assertion)
"""

from __future__ import annotations

import json
import logging
import time

import httpx
from jose import jwt

from contractdesk.core.config import Settings
from contractdesk.core.exceptions import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
SCOPES = " ".join([
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/documents",
])


class GoogleCredentialProvider:
    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self._settings = settings
        self._http = http

    async def get_access_token(self) -> str:
        s = self._settings
        if not s.google_auth_configured:
            raise ConfigurationError(
                "set GOOGLE_OAUTH_CLIENT_ID/SECRET/REFRESH_TOKEN, "
                "GOOGLE_OAUTH_ACCESS_TOKEN or GOOGLE_SERVICE_ACCOUNT_JSON"
            )

        if s.has_google_oauth_refresh:
            try:
                token = await self._token_request("OAuth refresh", {
                    "grant_type": "refresh_token",
                    "client_id": s.google_oauth_client_id,
                    "client_secret": s.google_oauth_client_secret,
                    "refresh_token": s.google_oauth_refresh_token,
                })
                logger.debug("Google token acquired via refresh token")
                return token
            except UpstreamError as exc:
                if not s.google_oauth_access_token:
                    raise
                logger.warning("Google %s; using static access token", exc.detail)

        if s.google_oauth_access_token:
            return s.google_oauth_access_token
        return await self._service_account_token(s.google_service_account_json)

    async def _token_request(self, label: str, form: dict) -> str:
        """POST *form* to the token endpoint; any failure is an ``UpstreamError("google_auth")``."""
        try:
            res = await self._http.post(TOKEN_URL, data=form)
        except httpx.HTTPError as exc:
            raise UpstreamError("google_auth", f"{label} request error: {exc!r}") from exc
        if res.status_code >= 400:
            raise UpstreamError("google_auth", f"{label} failed: {res.text}")
        try:
            return res.json()["access_token"]
        except (ValueError, KeyError, TypeError) as exc:
            raise UpstreamError("google_auth", f"{label} response has no access_token") from exc

    async def _service_account_token(self, raw_json: str) -> str:
        try:
            sa = json.loads(raw_json)
            client_email = sa["client_email"]
            private_key = sa["private_key"]
        except (ValueError, KeyError) as exc:
            raise ConfigurationError(f"GOOGLE_SERVICE_ACCOUNT_JSON is invalid ({exc})") from exc

        now = int(time.time())
        assertion = jwt.encode(
            {
                "iss": client_email,
                "sub": client_email,
                "aud": TOKEN_URL,
                "iat": now,
                "exp": now + 3600,
                "scope": SCOPES,
            },
            private_key,
            algorithm="RS256",
        )
        token = await self._token_request("service account token issue", {
            "grant_type": JWT_BEARER_GRANT,
            "assertion": assertion,
        })
        logger.debug("Google token acquired via service account %s", client_email)
        return token
