"""Integration tests for FastAPI endpoints."""

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from personashop.api.main import create_app
from personashop.config import EngineConfig


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Test client whose lifespan trains a small classifier."""
    config = EngineConfig(
        storage_dir=None,
        reevaluate_interval_seconds=0,
        time_tick_seconds=0,
        training_epochs=20,
    )
    with TestClient(create_app(config)) as test_client:
        yield test_client


def test_root_endpoint(client: TestClient) -> None:
    """Test root endpoint returns API info."""
    response = client.get("/")
    assert response.status_code == 200

    data = response.json()
    assert data["name"] == "Personashop API"
    assert data["version"] == "0.1.0"


def test_health_endpoint(client: TestClient) -> None:
    """Test health reports a running engine and a trained classifier."""
    response = client.get("/api/v1/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "ok"
    assert data["services"] == {"engine": True, "classifier": True}


def test_state_endpoint(client: TestClient) -> None:
    """Test the published state has every section."""
    response = client.get("/api/v1/state")
    assert response.status_code == 200

    data = response.json()
    assert set(data["scores"]) == {
        "bargain_hunter",
        "impulse_buyer",
        "researcher",
        "loyal_customer",
        "new_visitor",
    }
    assert sum(data["scores"].values()) == pytest.approx(1.0, abs=1e-6)
    assert data["persona_label"]
    assert data["behavior"]["sessionCount"] == 1
    assert data["is_loading"] is False


def test_record_events(client: TestClient) -> None:
    """Test events update the behavior profile."""
    client.post("/api/v1/events", json={"kind": "product_viewed", "value": "P1"})
    client.post("/api/v1/events", json={"kind": "scrolled", "value": 75})
    response = client.post("/api/v1/events", json={"kind": "clicked"})
    assert response.status_code == 200

    behavior = response.json()["behavior"]
    assert behavior["productViews"] == ["P1"]
    assert behavior["scrollDepth"] == 75
    assert behavior["clickCount"] == 1


@pytest.mark.parametrize(
    "body,status",
    [
        ({"kind": "scrolled", "value": "deep"}, 400),
        ({"kind": "clicked", "value": "x"}, 400),
        ({"kind": "device_detected", "value": "smartwatch"}, 400),
        ({"kind": "teleported"}, 422),
    ],
)
def test_invalid_events_rejected(client: TestClient, body, status) -> None:
    """Test malformed events are rejected."""
    response = client.post("/api/v1/events", json=body)
    assert response.status_code == status


def test_feedback_adjusts_preferences(client: TestClient) -> None:
    """Test a colors dislike moves the default scheme to vibrant."""
    client.post("/api/v1/reset")

    response = client.post("/api/v1/feedback", json={"kind": "dislike", "target": "colors"})
    assert response.status_code == 200
    assert response.json()["preferences"]["color_scheme"] == "vibrant"


def test_manual_preference(client: TestClient) -> None:
    """Test manual overrides survive re-evaluation."""
    response = client.put("/api/v1/preferences/layout_style", json={"value": "spacious"})
    assert response.status_code == 200
    assert response.json()["preferences"]["layout_style"] == "spacious"

    response = client.post("/api/v1/reevaluate")
    assert response.json()["preferences"]["layout_style"] == "spacious"


@pytest.mark.parametrize(
    "field_name,value",
    [
        ("sparkles", True),
        ("layout_style", "carousel"),
        ("show_deals", "yes"),
    ],
)
def test_invalid_preference_rejected(client: TestClient, field_name, value) -> None:
    response = client.put(f"/api/v1/preferences/{field_name}", json={"value": value})
    assert response.status_code == 400


def test_reevaluate_and_reset(client: TestClient) -> None:
    """Test reset returns the default state after activity."""
    for _ in range(8):
        client.post("/api/v1/events", json={"kind": "price_filter_used"})
    client.post("/api/v1/feedback", json={"kind": "dislike", "target": "layout"})
    assert client.post("/api/v1/reevaluate").status_code == 200

    data = client.post("/api/v1/reset").json()

    assert data["persona"] == "new_visitor"
    assert all(score == pytest.approx(0.2) for score in data["scores"].values())
    assert data["preferences"]["layout_style"] == "grid"
    assert data["behavior"]["priceFilterUsage"] == 0
