"""Tests for health check endpoints."""

import logging
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from cardport.db.database import get_session, init_db
from cardport.main import app
from cardport.models.db import CatalogCardDB


class TestHealthEndpoint:
    async def test_health_returns_healthy(self, client: AsyncClient) -> None:
        """Liveness check returns healthy."""
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data.get("database") is None


class TestReadyEndpoint:
    async def test_ready_returns_ready(self, client: AsyncClient) -> None:
        """Readiness check returns ready when DB is connected."""
        response = await client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["database"] == "connected"
        assert data["catalog_cards"] == 0

    async def test_ready_reports_catalog_size(
        self, client: AsyncClient, catalog: dict[str, CatalogCardDB]
    ) -> None:
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json()["catalog_cards"] == len(catalog)

    async def test_ready_returns_503_on_db_failure(self) -> None:
        """Readiness check returns 503 when DB is unavailable."""

        async def override_get_session_broken():
            mock_session = AsyncMock()
            mock_session.execute.side_effect = OperationalError(
                "SELECT count(id) FROM catalog_cards", {}, Exception("Database connection failed")
            )
            yield mock_session

        app.dependency_overrides[get_session] = override_get_session_broken

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/ready")

        app.dependency_overrides.clear()

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not ready"
        assert data["database"] == "disconnected"
        assert data["catalog_cards"] is None


class TestInitDb:
    async def test_creates_tables_idempotently(
        self, async_engine, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Running against an engine that already has the schema is a no-op."""
        with caplog.at_level(logging.INFO, logger="cardport.db.database"):
            await init_db(async_engine)

        record = next(r for r in caplog.records if r.message == "database_initialized")
        assert "catalog_cards" in record.tables
        assert "deck_versions" in record.tables
        assert record.dialect == "sqlite"
