"""Tests for POST /api/v1/nearby/search."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from voter_radius.api.v1.nearby import nearby_router
from voter_radius.core.dependencies import get_retrieval_service
from voter_radius.lib.errors import GeocodeFailure, SearchValidationError, StoreError

URL = "/api/v1/nearby/search"
BODY = {"address": "120 N Woodland Blvd, DeLand, FL", "radius": 0.1, "county": "VOL"}


@pytest.fixture
def mock_service() -> MagicMock:
    service = MagicMock()
    service.search = AsyncMock()
    return service


def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def _app(service) -> FastAPI:
    app = FastAPI()
    app.include_router(nearby_router, prefix="/api/v1")
    app.dependency_overrides[get_retrieval_service] = lambda: service
    return app


class TestErrorMapping:
    """Retrieval errors map to HTTP status codes."""

    async def test_validation_error_is_422(self, mock_service) -> None:
        mock_service.search.side_effect = SearchValidationError("county", "Invalid county.")
        async with _client(_app(mock_service)) as client:
            resp = await client.post(URL, json=BODY)

        assert resp.status_code == 422
        assert resp.json()["detail"] == "Invalid county."

    async def test_geocode_failure_is_404(self, mock_service) -> None:
        mock_service.search.side_effect = GeocodeFailure("Geocoding failed: address not recognized")
        async with _client(_app(mock_service)) as client:
            resp = await client.post(URL, json=BODY)

        assert resp.status_code == 404
        assert resp.json()["detail"].startswith("Geocoding failed")

    async def test_store_error_is_503_without_internals(self, mock_service) -> None:
        mock_service.search.side_effect = StoreError("registry", "connection refused to 10.0.0.5:3306")
        async with _client(_app(mock_service)) as client:
            resp = await client.post(URL, json=BODY)

        assert resp.status_code == 503
        assert "10.0.0.5" not in resp.text

    async def test_unknown_order_rejected_by_schema(self, mock_service) -> None:
        async with _client(_app(mock_service)) as client:
            resp = await client.post(URL, json={**BODY, "order": "zigzag"})

        assert resp.status_code == 422
        mock_service.search.assert_not_awaited()

    async def test_service_not_initialized_is_503(self) -> None:
        app = FastAPI()
        app.include_router(nearby_router, prefix="/api/v1")
        async with _client(app) as client:
            resp = await client.post(URL, json=BODY)

        assert resp.status_code == 503


class TestSearchEndpoint:
    """End to end over the SQLite stores with a stubbed geocoder."""

    async def test_returns_ordered_records(self, retrieval_service, add_addresses, add_voter) -> None:
        await add_addresses(
            [
                (301, 29.0287, -81.3031, "130 N WOODLAND BLVD, DELAND, FL"),
                (302, 29.0283, -81.3028, "110 E RICH AVE, DELAND, FL"),
            ]
        )
        await add_voter(11, 301, street="130 N WOODLAND BLVD", first_name="Ana", last_name="Diaz")
        await add_voter(12, 302, street="110 E RICH AVE", apt="4", first_name="Ben", last_name="Ochoa")

        async with _client(_app(retrieval_service)) as client:
            resp = await client.post(URL, json={**BODY, "party": "all"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["party"] == "ALL"
        assert data["candidates"] == 2
        assert [r["voter_id"] for r in data["records"]] == [12, 11]
        assert data["records"][0]["voter_address"] == "110 E RICH AVE\n4"
        assert data["records"][0]["latitude"] == 29.0283

    async def test_overflowing_radius_rejected(self, retrieval_service, geocoder) -> None:
        body = b'{"address": "1 Main St", "radius": 1e999, "county": "VOL"}'
        async with _client(_app(retrieval_service)) as client:
            resp = await client.post(URL, content=body, headers={"Content-Type": "application/json"})

        assert resp.status_code == 422
        assert resp.json()["detail"] == "Please enter a valid radius greater than 0."
        geocoder.geocode.assert_not_awaited()

    async def test_invalid_radius(self, retrieval_service, geocoder) -> None:
        async with _client(_app(retrieval_service)) as client:
            resp = await client.post(URL, json={**BODY, "radius": 0})

        assert resp.status_code == 422
        assert resp.json()["detail"] == "Please enter a valid radius greater than 0."
        geocoder.geocode.assert_not_awaited()


def test_create_app_mounts_nearby_route(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("REGISTRY_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    from voter_radius.main import create_app

    app = create_app()
    assert app.url_path_for("search_nearby") == URL
