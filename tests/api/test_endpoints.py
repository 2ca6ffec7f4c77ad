"""
API endpoint tests
"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from api.main import app
from api.dependencies import get_db, get_weights_service
from models.base import Game, Rarity
from schemas.weights import ItemWeightRecord, LoadResult, WeightStatus

LOADED_AT = datetime(2025, 1, 15, 10, 0, 0)


def _record(name, league="Keepers", weight=121400, rarity=Rarity.COMMON, from_boss=False):
    return ItemWeightRecord(
        item_name=name,
        game=Game.POE1,
        league=league,
        weight=weight,
        rarity=rarity,
        from_boss=from_boss,
        loaded_at=LOADED_AT,
    )


@pytest.fixture
def service():
    mock = MagicMock()
    mock.load = AsyncMock(return_value=LoadResult(
        success=True, card_count=5, league="Keepers", loaded_at=LOADED_AT.isoformat()
    ))
    mock.status = AsyncMock(return_value=WeightStatus(
        has_data=True, last_loaded_at=LOADED_AT, card_count=5, league="Keepers", app_version="1.0.0"
    ))
    mock.weights = AsyncMock(return_value=[_record("Rain of Chaos"), _record("The Doctor", weight=0, rarity=Rarity.UNKNOWN)])
    mock.boss_items = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def db_session_mock():
    session = MagicMock()
    session.execute = AsyncMock()
    return session


@pytest.fixture
def client(service, db_session_mock):
    """Test client with the service and database overridden; startup hooks do not run"""

    async def override_get_db():
        yield db_session_mock

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_weights_service] = lambda: service
    app.state.weights_service = service

    yield TestClient(app)

    app.dependency_overrides.clear()
    del app.state.weights_service


def test_get_weights(client, service):
    response = client.get("/weights/poe1", params={"league": "Keepers"})

    assert response.status_code == 200
    data = response.json()
    assert data["game"] == "poe1"
    assert data["league"] == "Keepers"
    assert data["fallback_used"] is False
    assert data["count"] == 2
    assert data["items"][0]["item_name"] == "Rain of Chaos"
    assert data["items"][1]["rarity"] == 0
    service.weights.assert_awaited_once_with(Game.POE1, "Keepers")
    assert "X-Request-ID" in response.headers


def test_get_weights_reports_fallback(client, service):
    response = client.get("/weights/poe1", params={"league": "Mercenaries"})

    data = response.json()
    assert data["requested_league"] == "Mercenaries"
    assert data["league"] == "Keepers"
    assert data["fallback_used"] is True


def test_get_weights_empty(client, service):
    service.weights.return_value = []

    response = client.get("/weights/poe2", params={"league": "Dawn"})

    assert response.status_code == 200
    assert response.json()["items"] == []
    assert response.json()["league"] is None


def test_get_weights_requires_league(client):
    assert client.get("/weights/poe1").status_code == 422


def test_unknown_game(client):
    assert client.get("/weights/poe3", params={"league": "Keepers"}).status_code == 422


def test_boss_items(client, service):
    service.boss_items.return_value = [_record("The Eye of Terror", weight=7, rarity=Rarity.EXTREMELY_RARE, from_boss=True)]

    response = client.get("/weights/poe1/boss-items", params={"league": "Keepers"})

    assert response.status_code == 200
    assert [item["item_name"] for item in response.json()["items"]] == ["The Eye of Terror"]
    service.boss_items.assert_awaited_once_with(Game.POE1, "Keepers")


def test_status(client):
    response = client.get("/weights/poe1/status")

    assert response.status_code == 200
    status = response.json()["status"]
    assert status["has_data"] is True
    assert status["card_count"] == 5
    assert status["league"] == "Keepers"


def test_reload_forces_load(client, service):
    response = client.post("/weights/poe1/reload")

    assert response.status_code == 200
    assert response.json()["result"]["card_count"] == 5
    service.load.assert_awaited_once_with(Game.POE1, force=True)


def test_reload_failure(client, service):
    service.load.return_value = LoadResult(success=False, error="CSV parse failed: missing column")

    response = client.post("/weights/poe1/reload")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Reload failed"
    assert body["detail"] == "CSV parse failed: missing column"
    assert "timestamp" in body


def test_reload_documents_error_schema(client):
    schema = client.get("/openapi.json").json()

    failure = schema["paths"]["/weights/{game}/reload"]["post"]["responses"]["500"]
    assert failure["content"]["application/json"]["schema"]["$ref"] == "#/components/schemas/ErrorResponse"


def test_health_endpoint_database_connected(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["database_connected"] is True
    assert data["status"] == "healthy"
    assert [entry["game"] for entry in data["games"]] == ["poe1", "poe2"]


def test_health_degraded_without_data(client, service):
    service.status.return_value = WeightStatus(has_data=False)

    data = client.get("/health").json()

    assert data["status"] == "degraded"


def test_health_database_down(client, db_session_mock):
    db_session_mock.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))

    data = client.get("/health").json()

    assert data["database_connected"] is False
    assert data["status"] == "unhealthy"
    assert data["games"] == []


def test_service_not_initialised():
    app.dependency_overrides.clear()
    response = TestClient(app).get("/weights/poe1/status")
    assert response.status_code == 503
