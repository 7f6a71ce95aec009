"""Employee login and session refresh."""

from typing import Annotated

from fastapi import APIRouter, Depends

from contractdesk.core.deps import get_credential_bridge
from contractdesk.schemas.auth import LoginRequest, LoginResponse, RefreshRequest, SessionOut
from contractdesk.services.auth import CredentialBridge

router = APIRouter(prefix="/auth", tags=["Auth"])

Bridge = Annotated[CredentialBridge, Depends(get_credential_bridge)]


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, bridge: Bridge):
    """Exchange (name, dob, 4-digit PIN) for an identity-provider session."""
    result = await bridge.login(body.name, body.dob, body.pin)
    return {"session": result.session, "profile": result.profile}


@router.post("/refresh", response_model=SessionOut)
async def refresh(body: RefreshRequest, bridge: Bridge):
    return await bridge.refresh(body.refresh_token)
