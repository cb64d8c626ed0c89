"""Tests for the lookup and health endpoints."""

from datetime import datetime
from typing import Any, Dict
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from hypothesis import given, settings, strategies as st

from phone_location_service.api.app import create_app
from phone_location_service.config.settings import Settings
from phone_location_service.models.schemas import LocationRecord

from fakes import FrozenClock, ScriptedRandomSource


def get_test_client(random_source=None, clock=None) -> TestClient:
    """Create a test client whose artificial delay does not actually wait."""
    app = create_app(
        Settings(),
        clock=clock or FrozenClock(),
        random_source=random_source or ScriptedRandomSource(floats=[0.3, 0.7, 0.1, 0.9]),
    )
    return TestClient(app)


def has_lookup_fields(data: Dict[str, Any]) -> bool:
    if set(data) != {"phoneNumber", "location", "carrier", "timestamp", "legal"}:
        return False
    return (
        set(data["location"]) == {"latitude", "longitude", "accuracy", "address", "city", "country"}
        and set(data["carrier"]) == {"name", "network", "type"}
        and set(data["legal"]) == {"authorized", "source"}
    )


class TestTrackLocation:

    def test_us_number(self):
        client = get_test_client()
        response = client.post("/track-location", json={"phoneNumber": "+1-555-123-4567"})

        assert response.status_code == 200
        data = response.json()
        assert has_lookup_fields(data)
        assert data["phoneNumber"] == "+1-555-123-4567"
        assert data["location"]["city"] == "New York"
        assert data["carrier"]["name"] == "Verizon Wireless"
        assert data["legal"] == {"authorized": False, "source": "Simulated Demo Data"}
        datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))

    def test_uk_number(self):
        client = get_test_client()
        response = client.post("/track-location", json={"phoneNumber": "+44-20-7946-0958"})

        assert response.status_code == 200
        assert response.json()["location"]["city"] == "London"
        assert response.json()["carrier"]["name"] == "EE Limited"

    def test_unhandled_country_code_uses_default_bucket(self):
        client = get_test_client()
        response = client.post("/track-location", json={"phoneNumber": "+81-3-1234-5678"})

        assert response.status_code == 200
        data = response.json()
        assert data["location"]["city"] == "San Francisco"
        assert data["carrier"]["name"] == "AT&T Mobility"
        assert data["legal"]["authorized"] is False

    def test_short_number_is_rejected(self):
        client = get_test_client()
        response = client.post("/track-location", json={"phoneNumber": "123"})

        assert response.status_code == 400
        assert "Invalid phone number format" in response.json()["error"]

    def test_missing_phone_number(self):
        client = get_test_client()
        response = client.post("/track-location", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Phone number is required"}

    @pytest.mark.parametrize("body", [
        {"phoneNumber": ""},
        {"phoneNumber": 15551234567},
        {"phoneNumber": None},
        ["+15551234567"],
        "+15551234567",
    ])
    def test_non_string_phone_number(self, body):
        client = get_test_client()
        response = client.post("/track-location", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Phone number is required"}

    def test_malformed_json_body(self):
        client = get_test_client()
        response = client.post(
            "/track-location",
            content=b"{not json",
            headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Phone number is required"}

    @pytest.mark.parametrize("method", ["get", "put", "delete", "patch", "options"])
    def test_other_methods_are_not_allowed(self, method):
        client = get_test_client()
        response = getattr(client, method)("/track-location")

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed. Use POST to track location."}
        assert response.headers["allow"] == "POST"

    def test_head_is_not_allowed(self):
        client = get_test_client()
        response = client.head("/track-location")

        assert response.status_code == 405
        assert response.headers["allow"] == "POST"

    def test_internal_failure_does_not_leak_details(self):
        client = get_test_client()
        resolver = client.app.state.lookup_service.resolver

        with patch.object(resolver, "resolve", side_effect=RuntimeError("secret stack detail")):
            response = client.post("/track-location", json={"phoneNumber": "+15551234567"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error during location lookup"}

    def test_repeated_calls_jitter_coordinates_only(self):
        client = get_test_client()
        first = client.post("/track-location", json={"phoneNumber": "+33 1 42 86 83 26"}).json()
        second = client.post("/track-location", json={"phoneNumber": "+33 1 42 86 83 26"}).json()

        assert (first["location"]["latitude"], first["location"]["longitude"]) != \
            (second["location"]["latitude"], second["location"]["longitude"])
        for key in ("address", "city", "country"):
            assert first["location"][key] == second["location"][key]
        assert first["carrier"] == second["carrier"]

    def test_artificial_delay_is_awaited(self):
        clock = FrozenClock()
        client = get_test_client(clock=clock, random_source=ScriptedRandomSource(floats=[0.5]))

        client.post("/track-location", json={"phoneNumber": "+49 30 123456789"})
        client.post("/track-location", json={"phoneNumber": "123"})

        assert clock.sleeps == [pytest.approx(2.0)]

    def test_correlation_id_is_propagated(self):
        client = get_test_client()
        response = client.post(
            "/track-location",
            json={"phoneNumber": "+15551234567"},
            headers={"X-Correlation-ID": "demo-correlation"}
        )
        assert response.headers["X-Correlation-ID"] == "demo-correlation"

    def test_correlation_id_is_generated(self):
        client = get_test_client()
        response = client.post("/track-location", json={"phoneNumber": "123"})
        assert response.headers["X-Correlation-ID"]


class TestConsistentResponseFormat:
    """Every successful lookup has the same schema and invariants."""

    @given(digits=st.text(alphabet="0123456789", min_size=10, max_size=15))
    @settings(max_examples=50, deadline=None)
    def test_successful_lookups_have_consistent_format(self, digits):
        client = get_test_client()
        response = client.post("/track-location", json={"phoneNumber": "+" + digits})

        assert response.status_code == 200
        data = response.json()
        assert has_lookup_fields(data)
        assert data["legal"]["authorized"] is False
        assert isinstance(data["location"]["accuracy"], int)
        assert 50 <= data["location"]["accuracy"] < 150

    @given(invalid_phone=st.text(alphabet="abcxyz0123456789-", max_size=12))
    @settings(max_examples=50, deadline=None)
    def test_error_responses_have_consistent_format(self, invalid_phone):
        client = get_test_client()
        response = client.post("/track-location", json={"phoneNumber": invalid_phone})

        assert response.status_code == 400
        error_json = response.json()
        assert set(error_json) == {"error"}
        assert isinstance(error_json["error"], str)
        assert len(error_json["error"]) > 0


def test_health_check():
    client = get_test_client()
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == "0.1.0"
    assert "timestamp" in data


def test_random_seed_makes_lookups_reproducible():
    def lookup(seed):
        app = create_app(Settings(random_seed=seed), clock=FrozenClock())
        return TestClient(app).post("/track-location", json={"phoneNumber": "+61 2 9374 4000"}).json()

    first, second = lookup(7), lookup(7)

    assert first["location"] == second["location"]
    assert first["location"]["city"] == "San Francisco"
    assert lookup(8)["location"] != first["location"]


def test_unhandled_route_errors_become_generic_500():
    app = create_app(Settings(), clock=FrozenClock(), random_source=ScriptedRandomSource())

    @app.get("/broken")
    async def broken():
        LocationRecord(latitude=500, longitude=0, accuracy=50, address="a", city="b", country="c")

    response = TestClient(app).get("/broken")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}
    assert "X-Correlation-ID" in response.headers
