from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.api.routes import health


@pytest.mark.asyncio
async def test_health_endpoint_returns_service_metadata(
    async_client: AsyncClient,
    session_factory: async_sessionmaker[AsyncSession],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(health, "get_session_factory", lambda: session_factory)

    response = await async_client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["service"]
    assert payload["status"] == "ok"
    assert payload["datastores"]["database"] == {"status": "ok"}


@pytest.mark.asyncio
async def test_health_reports_degraded_when_database_unreachable(
    async_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def broken_check() -> dict:
        return {"status": "error", "message": "connection refused"}

    monkeypatch.setattr(health, "check_database", broken_check)

    response = await async_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"


@pytest.mark.asyncio
async def test_responses_echo_request_id(async_client: AsyncClient) -> None:
    response = await async_client.get("/permissions/me", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"
