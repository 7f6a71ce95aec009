"""FastAPI dependencies: settings, outbound HTTP, upstream clients and the current caller.

Routers depend on these instead of constructing clients themselves so tests
can swap the identity provider and the Google workspace through
``app.dependency_overrides``.

Bearer tokens are never logged.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

import httpx
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from contractdesk.core.config import Settings, get_settings
from contractdesk.core.exceptions import AuthorizationError, UnauthorizedError
from contractdesk.db.base import get_db
from contractdesk.domain.employee import Employee
from contractdesk.services.auth import CredentialBridge
from contractdesk.services.google_workspace import GoogleWorkspace
from contractdesk.services.identity import IdentityProviderClient

# auto_error=False so a missing header gets our own 401 body
bearer = HTTPBearer(auto_error=False)


async def get_http_client(
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """One outbound HTTP client per request, closed when the response is done."""
    async with httpx.AsyncClient(timeout=app_settings.upstream_timeout) as client:
        yield client


def get_identity_provider(
    app_settings: Annotated[Settings, Depends(get_settings)],
    http: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> IdentityProviderClient:
    return IdentityProviderClient(app_settings, http)


def get_workspace(
    app_settings: Annotated[Settings, Depends(get_settings)],
    http: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> GoogleWorkspace:
    return GoogleWorkspace(app_settings, http)


def get_credential_bridge(
    session: Annotated[AsyncSession, Depends(get_db)],
    app_settings: Annotated[Settings, Depends(get_settings)],
    identity: Annotated[IdentityProviderClient, Depends(get_identity_provider)],
) -> CredentialBridge:
    return CredentialBridge(session, app_settings, identity)


async def get_current_employee(
    bridge: Annotated[CredentialBridge, Depends(get_credential_bridge)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer)] = None,
) -> Employee:
    """Resolve the ``Authorization: Bearer`` session to an active employee."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()
    return await bridge.resolve_caller(credentials.credentials)


async def require_admin(
    caller: Annotated[Employee, Depends(get_current_employee)],
) -> Employee:
    if not caller.is_admin:
        raise AuthorizationError("admin role required.")
    return caller


CurrentEmployee = Annotated[Employee, Depends(get_current_employee)]
AdminEmployee = Annotated[Employee, Depends(require_admin)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
