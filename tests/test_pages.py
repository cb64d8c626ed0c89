"""Tests for the server-rendered demo page and report download."""

import html
import json
import re

import pytest
from fastapi.testclient import TestClient

from phone_location_service.api.app import create_app
from phone_location_service.config.settings import Settings
from phone_location_service.presentation.history import SearchHistory

from fakes import FrozenClock, ScriptedRandomSource


def get_test_client(**settings_overrides) -> TestClient:
    app = create_app(
        Settings(**settings_overrides),
        clock=FrozenClock(),
        random_source=ScriptedRandomSource(floats=[0.2, 0.4, 0.6, 0.8]),
    )
    return TestClient(app)


def hidden_field(page: str, name: str) -> str:
    match = re.search(rf'name="{name}"[^>]*value="([^"]*)"', page)
    assert match, f"hidden field {name} not found"
    return html.unescape(match.group(1))


def carried_history(page: str) -> SearchHistory:
    return SearchHistory.from_json(hidden_field(page, "history"))


def search(client: TestClient, phone_number: str, history: str = "") -> str:
    response = client.post("/", data={"action": "search", "phone_number": phone_number, "history": history})
    assert response.status_code == 200
    return response.text


def test_index_renders_empty_page():
    client = get_test_client()
    response = client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Track Location" in response.text
    assert "Your recent location searches will appear here" in response.text
    assert 'id="privacy-notice"' in response.text
    assert "+44-20-7946-0958" in response.text
    assert len(carried_history(response.text)) == 0


def test_search_renders_result_and_records_history():
    client = get_test_client()
    page = search(client, "+1 555 123 4567")

    assert "New York" in page
    assert "Verizon Wireless" in page
    assert "Demo Only" in page
    assert "Detected: US/Canada" in page

    history = carried_history(page)
    assert len(history) == 1
    assert history.get(0).phone_number == "+1-555-123-4567"
    assert history.get(0).location.city == "New York"


def test_domestic_number_is_prefixed_before_lookup():
    client = get_test_client()
    page = search(client, "(555) 123-4567")

    history = carried_history(page)
    assert history.get(0).phone_number == "+1-555-123-4567"
    assert "New York" in page


def test_invalid_input_is_rejected_without_lookup():
    clock = FrozenClock()
    app = create_app(Settings(), clock=clock, random_source=ScriptedRandomSource())
    client = TestClient(app)

    page = search(client, "123")

    assert "Please enter a valid phone number with country code" in page
    assert clock.sleeps == []


def test_history_is_newest_first_and_capped():
    client = get_test_client(history_limit=3)
    history_json = ""
    numbers = ["+15551234567", "+442079460958", "+33142868326", "+4930123456789"]

    for number in numbers:
        page = search(client, number, history_json)
        history_json = hidden_field(page, "history")

    history = SearchHistory.from_json(history_json)
    assert [entry.location.city for entry in history] == ["Berlin", "Paris", "London"]


def test_select_redisplays_entry_without_new_lookup():
    clock = FrozenClock()
    client = TestClient(create_app(Settings(), clock=clock, random_source=ScriptedRandomSource()))
    first = search(client, "+442079460958")
    second = search(client, "+15551234567", hidden_field(first, "history"))
    history_json = hidden_field(second, "history")
    lookups = len(clock.sleeps)

    response = client.post("/", data={"action": "select:1", "history": history_json})

    assert response.status_code == 200
    assert "10 Downing Street" in response.text
    assert len(clock.sleeps) == lookups
    assert hidden_field(response.text, "history") == history_json


def test_select_out_of_range_shows_error():
    client = get_test_client()
    response = client.post("/", data={"action": "select:7", "history": ""})

    assert response.status_code == 200
    assert "no longer in the history" in response.text


def test_clear_empties_history():
    client = get_test_client()
    page = search(client, "+15551234567")

    response = client.post("/", data={"action": "clear", "history": hidden_field(page, "history")})

    assert response.status_code == 200
    assert len(carried_history(response.text)) == 0
    assert "Your recent location searches will appear here" in response.text


def test_tampered_history_is_discarded():
    client = get_test_client()
    page = search(client, "+15551234567", history="[{\"broken\": true}]")

    assert len(carried_history(page)) == 1


def test_distance_is_shown_when_viewer_location_is_known():
    client = get_test_client()
    response = client.post("/", data={
        "action": "search",
        "phone_number": "+442079460958",
        "viewer_latitude": "48.8566",
        "viewer_longitude": "2.3522",
    })

    assert "Distance from your location:" in response.text
    assert re.search(r"Distance from your location: 3\d\d\.\d km", response.text)


def test_report_download():
    client = get_test_client()
    page = search(client, "+1-555-123-4567")

    response = client.post("/report", data={"result": hidden_field(page, "result")})

    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="location-report-15551234567.json"'
    report = response.json()
    assert report["searchDetails"]["phoneNumber"] == "+1-555-123-4567"
    assert report["searchDetails"]["legal"]["authorized"] is False
    assert report["locationData"]["city"] == "New York"
    assert report["carrierInfo"]["name"] == "Verizon Wireless"
    assert "simulated data" in report["disclaimer"]


def test_report_without_result_is_rejected():
    client = get_test_client()
    response = client.post("/report", data={"result": ""})

    assert response.status_code == 400
    assert json.loads(response.text) == {"error": "No lookup result available for a report"}


def test_history_with_unparseable_timestamp_is_discarded():
    client = get_test_client()
    entry = json.loads(hidden_field(search(client, "+15551234567"), "history"))[0]
    entry["timestamp"] = "yesterday"

    response = client.post("/", data={"action": "clear", "history": json.dumps([entry])})

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert len(carried_history(response.text)) == 0


@pytest.mark.parametrize("latitude, longitude", [
    ("inf", "2.3522"),
    ("nan", "2.3522"),
    ("1e400", "2.3522"),
    ("91", "2.3522"),
    ("48.8566", "-180.5"),
    ("north", "2.3522"),
])
def test_unusable_viewer_location_is_ignored(latitude, longitude):
    client = get_test_client()
    response = client.post("/", data={
        "action": "search",
        "phone_number": "+442079460958",
        "viewer_latitude": latitude,
        "viewer_longitude": longitude,
    })

    assert response.status_code == 200
    assert "London" in response.text
    assert "Distance from your location:" not in response.text
    assert hidden_field(response.text, "viewer_latitude") == "" or hidden_field(response.text, "viewer_longitude") == ""


def test_example_number_fills_the_input_without_lookup():
    clock = FrozenClock()
    app = create_app(Settings(), clock=clock, random_source=ScriptedRandomSource())
    client = TestClient(app)

    response = client.post("/", data={"action": "example:+44-20-7946-0958", "phone_number": ""})

    assert response.status_code == 200
    assert 'value="+44-20-7946-0958"' in response.text
    assert "Detected: United Kingdom" in response.text
    assert clock.sleeps == []
    assert len(carried_history(response.text)) == 0


def test_unknown_example_is_not_copied_into_the_input():
    client = get_test_client()
    response = client.post("/", data={"action": "example:<script>", "phone_number": "+33"})

    assert response.status_code == 200
    assert 'id="phone-input" name="phone_number" type="tel" placeholder="+1-555-123-4567" value="+33"' in response.text


def test_result_links_to_google_maps():
    client = get_test_client()
    page = search(client, "+1-555-123-4567")
    result = carried_history(page).get(0)

    assert (f"https://www.google.com/maps/@{result.location.latitude},{result.location.longitude},15z"
            in page)
