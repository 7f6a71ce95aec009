"""Login / session schemas."""

from pydantic import BaseModel

from contractdesk.schemas.common import CamelModel


class LoginRequest(BaseModel):
    # Optional so missing fields produce the service's own 400 message
    name: str | None = None
    dob: str | None = None
    pin: str | None = None


class RefreshRequest(BaseModel):
    refresh_token: str | None = None


class SessionOut(BaseModel):
    access_token: str
    refresh_token: str
    expires_at: int | None = None


class ProfileOut(CamelModel):
    employee_id: str
    name: str
    role: str


class LoginResponse(BaseModel):
    session: SessionOut
    profile: ProfileOut
