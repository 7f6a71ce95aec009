"""HTTP surface of /auth."""

import httpx
import pytest

from contractdesk.core.deps import get_identity_provider
from contractdesk.main import app
from contractdesk.services.identity import IdentityProviderClient
from tests.conftest import STAFF_ID


class TestLoginEndpoint:
    @pytest.mark.asyncio
    async def test_success_shape(self, client):
        response = await client.post(
            "/auth/login", json={"name": "김직원", "dob": "1995-05-10", "pin": "0000"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["session"] == {
            "access_token": f"token-{STAFF_ID}",
            "refresh_token": f"refresh-{STAFF_ID}",
            "expires_at": 1_900_000_000,
        }
        assert data["profile"] == {"employeeId": STAFF_ID, "name": "김직원", "role": "staff"}

    @pytest.mark.asyncio
    async def test_wrong_pin_is_400(self, client):
        response = await client.post(
            "/auth/login", json={"name": "김직원", "dob": "1995-05-10", "pin": "1234"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "AUTHENTICATION_ERROR"
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_missing_fields(self, client):
        response = await client.post("/auth/login", json={"name": "김직원"})
        assert response.status_code == 400
        assert response.json() == {"error": "name, dob, pin is required.", "code": "VALIDATION_ERROR"}

    @pytest.mark.asyncio
    async def test_malformed_body(self, client):
        response = await client.post(
            "/auth/login", content="not json", headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestRefreshEndpoint:
    @pytest.mark.asyncio
    async def test_refresh(self, client):
        response = await client.post("/auth/refresh", json={"refresh_token": f"refresh-{STAFF_ID}"})
        assert response.status_code == 200
        assert response.json()["access_token"] == f"token-{STAFF_ID}"

    @pytest.mark.asyncio
    async def test_rejected_refresh_token(self, client):
        response = await client.post("/auth/refresh", json={"refresh_token": "bogus"})
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"


class TestUnreachableIdentityProvider:
    @pytest.mark.asyncio
    async def test_login_reports_the_failed_stage(self, client, settings):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        http = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
        app.dependency_overrides[get_identity_provider] = lambda: IdentityProviderClient(settings, http)
        async with http:
            response = await client.post(
                "/auth/login", json={"name": "김직원", "dob": "1995-05-10", "pin": "0000"},
            )

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "UPSTREAM_ERROR"
        assert body["stage"] == "auth_user_upsert"
