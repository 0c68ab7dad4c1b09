"""Tests for local authentication and CORS hardening."""

import os
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def authed_client(fresh_store):
    """Client with auth disabled (standard for most tests)."""
    # conftest.py sets CRM_CHART_NO_AUTH=true
    from app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def auth_required_client(fresh_store):
    """Client where auth IS required — need X-Local-Token header."""
    with patch.dict(os.environ, {"CRM_CHART_NO_AUTH": "", "CRM_CHART_LOCAL_TOKEN": "test-secret-token"}):
        import app.services.local_auth as la
        la._token = None

        from app.main import app

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c

        la._token = None


def test_verify_token_when_disabled():
    from app.services.local_auth import get_or_create_token, verify_local_token

    assert get_or_create_token() is None
    assert verify_local_token("anything") is True


def test_no_token_configured_means_dev_mode():
    with patch.dict(os.environ, {"CRM_CHART_NO_AUTH": "", "CRM_CHART_LOCAL_TOKEN": ""}):
        import app.services.local_auth as la
        la._token = None
        assert la.get_or_create_token() is None


@pytest.mark.anyio
async def test_health_no_auth_required(auth_required_client: AsyncClient):
    resp = await auth_required_client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.anyio
async def test_api_without_token_returns_401(auth_required_client: AsyncClient):
    resp = await auth_required_client.get("/api/chart/status")
    assert resp.status_code == 401
    assert "auth token" in resp.json()["detail"].lower()


@pytest.mark.anyio
async def test_api_with_valid_token_passes(auth_required_client: AsyncClient):
    resp = await auth_required_client.get(
        "/api/chart/status",
        headers={"X-Local-Token": "test-secret-token"},
    )
    assert resp.status_code == 200
    assert resp.json()["loaded"] is True


@pytest.mark.anyio
async def test_api_with_invalid_token_returns_401(auth_required_client: AsyncClient):
    resp = await auth_required_client.get(
        "/api/chart/orgs/org-001",
        headers={"X-Local-Token": "wrong-token"},
    )
    assert resp.status_code == 401


@pytest.mark.anyio
async def test_security_headers_present(authed_client: AsyncClient):
    resp = await authed_client.get("/api/health")
    assert resp.headers.get("X-Content-Type-Options") == "nosniff"
    assert resp.headers.get("X-Frame-Options") == "DENY"
    assert "max-age" in resp.headers.get("Strict-Transport-Security", "")


@pytest.mark.anyio
async def test_cors_restricted_methods(authed_client: AsyncClient):
    """CORS should only allow GET, POST, OPTIONS."""
    resp = await authed_client.options(
        "/api/health",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "DELETE",
        },
    )
    allowed = resp.headers.get("Access-Control-Allow-Methods", "")
    assert "DELETE" not in allowed


@pytest.mark.anyio
async def test_cors_allows_local_token_header(authed_client: AsyncClient):
    resp = await authed_client.options(
        "/api/chart/build",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-Local-Token",
        },
    )
    allowed = resp.headers.get("Access-Control-Allow-Headers", "")
    assert "X-Local-Token" in allowed
