"""Credential bridge: (name, date of birth, PIN) in, identity-provider session out.

Staff never hold a real identity-provider login. Each employee has a
shadow account ``{employee_id}@{shadow_email_domain}`` whose password is
derived from the employee id and a server-held pepper. A successful PIN
check resets that password (idempotent upsert, so concurrent logins
converge) and exchanges it for a session through the password grant. The
shadow account is never used interactively, so rewriting its password on
every login is harmless.

Rule: No FastAPI here. Raise AppException subclasses only.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Any

import bcrypt
from sqlalchemy.ext.asyncio import AsyncSession

from contractdesk.core.config import Settings
from contractdesk.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    UnauthorizedError,
    ValidationError,
)
from contractdesk.core.normalize import normalize_date_of_birth
from contractdesk.domain.employee import Employee
from contractdesk.repositories.employee import EmployeeRepository
from contractdesk.services.identity import IdentityProviderClient

logger = logging.getLogger(__name__)

_PIN_RE = re.compile(r"^\d{4}$")


@dataclass(frozen=True)
class LoginResult:
    session: dict[str, Any]
    employee: Employee

    @property
    def profile(self) -> dict[str, str]:
        return {
            "employee_id": self.employee.auth_user_id,
            "name": self.employee.name,
            "role": self.employee.role,
        }


def hash_pin(pin: str) -> str:
    return bcrypt.hashpw(pin.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_pin(pin: str, pin_hash: str) -> bool:
    """Constant-time bcrypt comparison; an unparsable hash counts as a mismatch."""
    try:
        return bcrypt.checkpw(pin.encode("utf-8"), pin_hash.encode("utf-8"))
    except ValueError:
        logger.error("Stored PIN hash is not a valid bcrypt hash")
        return False


def shadow_credentials(employee_id: str, pepper: str, email_domain: str) -> tuple[str, str]:
    """Return the deterministic ``(email, password)`` of an employee's shadow account."""
    return f"{employee_id}@{email_domain}", f"PW-{employee_id}-{pepper}"


class CredentialBridge:
    def __init__(self, session: AsyncSession, settings: Settings, identity: IdentityProviderClient):
        self._employees = EmployeeRepository(session)
        self._settings = settings
        self._identity = identity

    async def login(self, name: str | None, dob: str | None, pin: str | None) -> LoginResult:
        s = self._settings
        if not s.supabase_service_role_key:
            raise ConfigurationError("SUPABASE_SERVICE_ROLE_KEY")
        if not s.auth_password_pepper:
            raise ConfigurationError("AUTH_PASSWORD_PEPPER")

        if not name or not dob or not pin:
            raise ValidationError("name, dob, pin is required.")
        normalized_dob = normalize_date_of_birth(dob)
        if not normalized_dob:
            raise ValidationError("dob must be YYYY-MM-DD, YYYYMMDD or YYMMDD.")
        if not _PIN_RE.match(pin):
            raise ValidationError("PIN must be 4 digits.")

        employee = await self._employees.find_active_by_name_and_dob(
            name, date.fromisoformat(normalized_dob),
        )
        if employee is None:
            logger.info("Login rejected: no active employee (name=%s, dob=%s)", name, normalized_dob)
            raise AuthenticationError()
        if not verify_pin(pin, employee.pin_hash):
            logger.info("Login rejected: PIN mismatch for employee %s", employee.auth_user_id)
            raise AuthenticationError()

        email, password = shadow_credentials(
            employee.auth_user_id, s.auth_password_pepper, s.shadow_email_domain,
        )
        await self._identity.upsert_user(employee.auth_user_id, email, password)
        session = await self._identity.password_grant(email, password)

        logger.info("Employee %s (%s) logged in", employee.auth_user_id, employee.role)
        return LoginResult(session=session, employee=employee)

    async def refresh(self, refresh_token: str | None) -> dict[str, Any]:
        if not refresh_token:
            raise ValidationError("refresh_token is required.")
        return await self._identity.refresh_grant(refresh_token)

    async def resolve_caller(self, access_token: str) -> Employee:
        """Validate a bearer session and return the active employee behind it."""
        user = await self._identity.get_user(access_token)
        user_id = user.get("id")
        if not user_id:
            raise UnauthorizedError("Invalid access token.")

        employee = await self._employees.get_by_auth_user_id(user_id)
        if employee is None or not employee.is_active:
            raise AuthorizationError("inactive employee or no permission.")
        return employee
