"""Health endpoint and cross-cutting middleware."""

import pytest
from httpx import AsyncClient

from academy.config import settings


@pytest.mark.asyncio
async def test_health_check(async_client: AsyncClient):
    resp = await async_client.get("/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["app_name"] == settings.APP_NAME
    assert body["environment"] == "test"


@pytest.mark.asyncio
async def test_request_id_is_echoed(async_client: AsyncClient):
    resp = await async_client.get("/health", headers={"X-Request-ID": "req-123"})

    assert resp.headers["X-Request-ID"] == "req-123"
    assert "X-Process-Time" in resp.headers


@pytest.mark.asyncio
async def test_security_headers_present(async_client: AsyncClient):
    resp = await async_client.get("/health")

    assert resp.headers["X-Content-Type-Options"] == "nosniff"


@pytest.mark.asyncio
async def test_api_responses_are_not_cached(async_client: AsyncClient, api_base: str):
    api_resp = await async_client.get(f"{api_base}/auth/me")
    health_resp = await async_client.get("/health")

    assert api_resp.headers["Cache-Control"] == "no-store"
    assert "Cache-Control" not in health_resp.headers


@pytest.mark.asyncio
async def test_request_id_is_minted_when_absent(async_client: AsyncClient):
    first = await async_client.get("/health")
    second = await async_client.get("/health")

    assert first.headers["X-Request-ID"]
    assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]
