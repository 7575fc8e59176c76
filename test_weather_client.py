"""Unit tests for the weather client's state machine.

The client must always be in exactly one of loading / error / success, must
surface the gateway's error message when there is one, and must never let a
response to an older request overwrite the state of a newer one.
"""

import threading

import pytest
import requests
from structlog.testing import capture_logs

from conftest import FakeSession, make_response
from weather_client import WeatherClient, WeatherStatus


def test_successful_lookup_transitions_loading_then_success(client_config, london_payload):
    seen = []
    client = WeatherClient(client_config, FakeSession(make_response(200, london_payload)),
                           on_change=lambda state: seen.append(state.status), city="London")

    state = client.load()

    assert seen == [WeatherStatus.LOADING, WeatherStatus.SUCCESS]
    assert [status.value for status in seen] == ["loading", "success"]
    assert state.is_success
    assert state.data == london_payload
    assert state.error is None


def test_request_targets_gateway_with_url_encoded_city(client_config, london_payload):
    session = FakeSession(make_response(200, london_payload))

    WeatherClient(client_config, session).set_city("New York")

    assert session.calls[0]["prepared_url"] == "http://gateway.test/api/weather?city=New+York"
    assert session.calls[0]["timeout"] == 5


def test_gateway_error_message_is_surfaced(client_config):
    body = {"error": "Failed to fetch weather data. Please try again later or check the city name."}
    client = WeatherClient(client_config, FakeSession(make_response(404, body)))

    state = client.set_city("Atlantis")

    assert state.is_error
    assert state.error == body["error"]
    assert state.data is None


@pytest.mark.parametrize("response", [
    make_response(500, {"message": "no error field"}),
    make_response(500, text="Internal Server Error"),
    make_response(500, text=""),
])
def test_generic_message_when_error_body_has_no_error_field(client_config, response):
    state = WeatherClient(client_config, FakeSession(response)).load()

    assert state.is_error
    assert state.error == "Error: 500"


def test_transport_failure_surfaces_exception_text(client_config):
    error = requests.exceptions.ConnectionError("Failed to establish a new connection")

    state = WeatherClient(client_config, FakeSession(error)).load()

    assert state.is_error
    assert state.error == "Failed to establish a new connection"


@pytest.mark.parametrize("response", [make_response(200, text="not json"), make_response(200, [1, 2, 3])])
def test_malformed_success_body_is_an_error(client_config, response):
    state = WeatherClient(client_config, FakeSession(response)).load()

    assert state.is_error
    assert state.error


def test_success_clears_a_previous_error(client_config, london_payload):
    session = FakeSession(make_response(503, {"error": "Could not connect"}), make_response(200, london_payload))
    client = WeatherClient(client_config, session)

    assert client.load().is_error
    state = client.retry()

    assert state.is_success
    assert state.error is None


def test_retry_reissues_the_same_request(client_config, london_payload):
    session = FakeSession(make_response(200, london_payload))
    client = WeatherClient(client_config, session, city="London")

    client.load()
    client.retry()

    assert [call["params"] for call in session.calls] == [{"city": "London"}, {"city": "London"}]
    assert client.generation == 2


@pytest.mark.parametrize("city", ["", "   ", None])
def test_blank_city_is_ignored(client_config, london_payload, city):
    session = FakeSession(make_response(200, london_payload))
    client = WeatherClient(client_config, session, city="London")
    before = client.load()

    after = client.set_city(city)

    assert after is before
    assert client.city == "London"
    assert len(session.calls) == 1


def test_city_change_is_trimmed_and_remembered(client_config, london_payload):
    session = FakeSession(make_response(200, london_payload))
    client = WeatherClient(client_config, session)

    client.set_city("  Paris ")

    assert client.city == "Paris"
    assert session.calls[0]["params"] == {"city": "Paris"}


def test_stale_completion_is_discarded(client_config, london_payload):
    client = WeatherClient(client_config, FakeSession(make_response(200, london_payload)))
    old_generation = client.begin_request("Paris")
    new_generation = client.begin_request("Rome")

    stale_outcome = client.request_weather("Paris", old_generation)

    with capture_logs() as logs:
        assert client.complete_request(stale_outcome) is False

    assert client.state.is_loading
    assert client.state.city == "Rome"
    assert client.state.generation == new_generation
    assert logs == [{"event": "Discarding stale weather response.", "log_level": "debug", "city": "Paris",
                     "generation": old_generation, "latest_generation": new_generation}]


class BlockingSession:
    """Holds the response for one city until released, so it completes after a newer request."""
    def __init__(self, slow_city, payload):
        self.slow_city = slow_city
        self.payload = payload
        self.slow_started = threading.Event()
        self.release = threading.Event()

    def get(self, url, params=None, **kwargs):
        if params["city"] == self.slow_city:
            self.slow_started.set()
            self.release.wait(timeout=5)
        return make_response(200, dict(self.payload, name=params["city"]))


def test_late_response_from_superseded_request_does_not_overwrite_state(client_config, london_payload):
    session = BlockingSession("Paris", london_payload)
    client = WeatherClient(client_config, session)

    slow = threading.Thread(target=client.set_city, args=("Paris",))
    slow.start()
    assert session.slow_started.wait(timeout=5)

    latest = client.set_city("Rome")
    session.release.set()
    slow.join(timeout=5)

    assert latest.is_success
    assert client.state.is_success
    assert client.state.data["name"] == "Rome"
    assert client.generation == 2
