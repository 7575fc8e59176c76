"""Weatherly Client Module.

This module implements the client side of Weatherly: it asks the gateway for
a city's weather and keeps track of what the front end should show. At any
moment the client is in exactly one state: loading, error(message) or
success(WeatherResult).

Every request is tagged with a generation number when it is issued. When a
request completes, its result is applied only if no newer request has been
issued in the meantime; otherwise it is discarded. A slow response for a city
the user has already moved away from therefore never overwrites the newer
state.
"""

import threading
from enum import Enum
from typing import Any, Callable, Optional

import requests
import structlog

from config import ClientConfig

logger = structlog.get_logger(__name__)

DEFAULT_CITY = "Nairobi"


class WeatherStatus(Enum):
    """The three mutually exclusive client states."""
    LOADING = "loading"
    ERROR = "error"
    SUCCESS = "success"


class WeatherState:
    """An immutable snapshot of the client state.

        Attributes:
            status: LOADING, ERROR or SUCCESS.
            city: The city the state refers to.
            generation: The generation number of the request that produced this state.
            error: The message to surface, set only when status is ERROR.
            data: The WeatherResult payload, set only when status is SUCCESS.
    """
    __slots__ = ("status", "city", "generation", "error", "data")

    def __init__(self, status: WeatherStatus, city: str, generation: int,
                 error: Optional[str] = None, data: Optional[dict] = None):
        self.status = status
        self.city = city
        self.generation = generation
        self.error = error
        self.data = data

    @classmethod
    def loading(cls, city: str, generation: int) -> "WeatherState":
        return cls(WeatherStatus.LOADING, city, generation)

    @classmethod
    def failed(cls, city: str, generation: int, error: str) -> "WeatherState":
        return cls(WeatherStatus.ERROR, city, generation, error=error)

    @classmethod
    def succeeded(cls, city: str, generation: int, data: dict) -> "WeatherState":
        return cls(WeatherStatus.SUCCESS, city, generation, data=data)

    @property
    def is_loading(self) -> bool:
        return self.status is WeatherStatus.LOADING

    @property
    def is_error(self) -> bool:
        return self.status is WeatherStatus.ERROR

    @property
    def is_success(self) -> bool:
        return self.status is WeatherStatus.SUCCESS

    def __repr__(self):
        """Returns a string representation of the WeatherState instance."""
        return (
            f"{self.__class__.__name__}("
            f"status={self.status.name}, "
            f"city={self.city!r}, "
            f"generation={self.generation!r}, "
            f"error={self.error!r})"
        )


def extract_error_message(response: requests.Response) -> str:
    """Returns the gateway's 'error' message from a failed response, or 'Error: <status>' if it has none."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"Error: {response.status_code}"


class WeatherClient:
    """Requests weather data from the gateway and tracks the resulting state.

        Thread-safe: fetches may run concurrently, and only the result of the
        latest issued request is ever applied.

        Attributes:
            config: The read-only client configuration.
            session: The requests session used to reach the gateway.
    """
    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None,
                 on_change: Optional[Callable[[WeatherState], Any]] = None, city: str = DEFAULT_CITY):
        """Initializes the client in the loading state for its initial city.

                Args:
                    config: The client configuration (gateway base URL, timeout).
                    session: An optional requests session; a new one is created otherwise.
                    on_change: Called with the new state after each applied transition. It runs
                        while the client lock is held, so it must not block on another thread
                        that uses this client.
                    city: The initial city, fetched by load().
        """
        self.config = config
        self.session = session or requests.Session()
        self._on_change = on_change
        self._lock = threading.RLock()
        self._generation = 0
        self._city = city
        self._state = WeatherState.loading(city, 0)

    @property
    def city(self) -> str:
        return self._city

    @property
    def state(self) -> WeatherState:
        return self._state

    @property
    def generation(self) -> int:
        """The generation number of the most recently issued request."""
        return self._generation

    @property
    def weather_url(self) -> str:
        return f"{self.config.api_base_url}/weather"

    def load(self) -> WeatherState:
        """Fetches the current city, as the front end does when it is first shown."""
        return self.fetch_weather(self._city)

    def set_city(self, city: Optional[str]) -> WeatherState:
        """Switches to a new city and fetches it. Blank input is ignored and leaves the state unchanged."""
        city = (city or "").strip()
        if not city:
            return self.state
        with self._lock:
            self._city = city
        return self.fetch_weather(city)

    def retry(self) -> WeatherState:
        """The 'Try Again' action: re-issues the request for the current city."""
        return self.fetch_weather(self._city)

    def fetch_weather(self, city: str) -> WeatherState:
        """Enters the loading state, requests the city's weather and applies the outcome unless it is stale.

            Returns:
                The client state after the request completed. If a newer request was issued
                meanwhile, that is the newer request's state, not this one's outcome.
        """
        generation = self.begin_request(city)
        outcome = self.request_weather(city, generation)
        self.complete_request(outcome)
        return self.state

    def begin_request(self, city: str) -> int:
        """Issues a new generation number and transitions to loading.

            Returns:
                The generation number tagging the new request.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._apply(WeatherState.loading(city, generation))
        return generation

    def request_weather(self, city: str, generation: int) -> WeatherState:
        """Performs the HTTP request to the gateway and returns the resulting (not yet applied) state."""
        try:
            response = self.session.get(self.weather_url, params={"city": city},
                                        timeout=self.config.timeout_seconds)
        except requests.exceptions.RequestException as e:
            return WeatherState.failed(city, generation, str(e))

        if not response.ok:
            return WeatherState.failed(city, generation, extract_error_message(response))

        try:
            data = response.json()
        except ValueError as e:
            return WeatherState.failed(city, generation, str(e))

        if not isinstance(data, dict):
            return WeatherState.failed(city, generation, "Unexpected response format from the weather service.")

        return WeatherState.succeeded(city, generation, data)

    def complete_request(self, outcome: WeatherState) -> bool:
        """Applies a completed request's state if it belongs to the latest issued request.

            Returns:
                True if the state was applied, False if it was discarded as stale.
        """
        with self._lock:
            if outcome.generation != self._generation:
                logger.debug("Discarding stale weather response.", city=outcome.city,
                             generation=outcome.generation, latest_generation=self._generation)
                return False
            self._apply(outcome)
        return True

    def _apply(self, state: WeatherState) -> None:
        self._state = state
        if self._on_change is not None:
            self._on_change(state)
