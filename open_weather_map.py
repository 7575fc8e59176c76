"""OpenWeatherMap Service Provider Module.

This module implements the integration with the OpenWeatherMap "current
weather" endpoint (/data/2.5/weather). It performs exactly one request per
call and hands the provider's JSON back untouched; translating failures into
user-facing errors is left to the gateway.

The module follows a clean separation of concerns:
    1. Exception handling for HTTP-level, connection-level and other request errors.
    2. API interaction through the fetch_data_open_weather_map function.
"""

from concurrent import futures
from typing import Any, Optional

import requests

from config import GatewayConfig
from weather_service import WeatherServiceError

CURRENT_WEATHER_PATH = "/data/2.5/weather"

# Calls run here so the caller can stop waiting at the deadline; a call still running
# past it only ties up its worker until requests' own per-read timeouts expire.
_provider_calls = futures.ThreadPoolExecutor(max_workers=8, thread_name_prefix="open-weather-map")


class OpenWeatherMapError(WeatherServiceError):
    """Base exception for errors originating from the OpenWeatherMap service."""
    pass


class OpenWeatherMapHTTPError(OpenWeatherMapError):
    """Raised when OpenWeatherMap answers with a failure status code (4xx or 5xx).

        Attributes:
            status_code: The HTTP status code returned by OpenWeatherMap.
            body: The raw response body, kept for diagnostics only.
    """
    def __init__(self, status_code: int, body: str):
        super().__init__(f"OpenWeatherMap returned HTTP {status_code}")
        self.status_code = status_code
        self.body = body

    def __repr__(self):
        """Returns a string representation of the OpenWeatherMapHTTPError instance."""
        return f"{self.__class__.__name__}(status_code={self.status_code!r})"


class OpenWeatherMapConnectionError(OpenWeatherMapError):
    """Raised when OpenWeatherMap could not be reached: DNS, TLS, refused connection or timeout.

        Attributes:
            error: The underlying requests exception that triggered this error.
    """
    def __init__(self, error: requests.exceptions.RequestException):
        super().__init__(str(error))
        self.error = error

    def __repr__(self):
        """Returns a string representation of the OpenWeatherMapConnectionError instance, including the wrapped error."""
        return f"{self.__class__.__name__}({repr(self.error)})"


class OpenWeatherMapRequestError(OpenWeatherMapError):
    """Raised for any other protocol-level error during the request (invalid URL, too many redirects, ...).

        Attributes:
            error: The underlying requests exception that triggered this error.
    """
    def __init__(self, error: requests.exceptions.RequestException):
        super().__init__(str(error))
        self.error = error

    def __repr__(self):
        """Returns a string representation of the OpenWeatherMapRequestError instance, including the wrapped error."""
        return f"{self.__class__.__name__}({repr(self.error)})"


def build_current_weather_params(city_name: str, config: GatewayConfig) -> dict:
    """Returns the query parameters of a current-weather request for a city."""
    return {"q": city_name, "appid": config.api_key, "units": config.units}


def fetch_data_open_weather_map(city_name: str, config: GatewayConfig,
                                session: Optional[requests.Session] = None) -> Any:
    """Fetches current weather data for a city from OpenWeatherMap.

        A single attempt is made. The whole call, from connecting to the last
        byte of the body, is bounded by config.timeout_seconds. TLS
        certificates are verified unless the configuration explicitly opts out.

        Args:
            city_name: The name of the city to query (e.g., "London" or "Tel Aviv").
            config: The gateway configuration holding the API key, host, units and timeout.
            session: An optional requests session; the module-level requests API is used otherwise.

        Returns:
            The decoded JSON body of the provider's response, unmodified.

        Raises:
            OpenWeatherMapHTTPError: If the provider returns a failure status code.
            OpenWeatherMapConnectionError: If the provider cannot be reached or the request times out.
            OpenWeatherMapRequestError: If any other requests error occurs.
            ValueError: If a successful response does not carry valid JSON.
    """
    http = session or requests
    future = _provider_calls.submit(http.get, f"{config.api_base_url}{CURRENT_WEATHER_PATH}",
                                    params=build_current_weather_params(city_name, config),
                                    timeout=config.timeout_seconds,
                                    verify=config.verify_ssl)
    try:
        # requests' timeout bounds each socket read, not the whole request
        response = future.result(timeout=config.timeout_seconds)
    except futures.TimeoutError:
        future.cancel()
        raise OpenWeatherMapConnectionError(requests.exceptions.Timeout(
            f"OpenWeatherMap did not respond within {config.timeout_seconds} seconds"))
    except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as err:
        raise OpenWeatherMapConnectionError(err)
    except requests.exceptions.RequestException as err:
        raise OpenWeatherMapRequestError(err)

    try:
        # Raise an exception for bad status codes (4xx or 5xx)
        response.raise_for_status()
    except requests.exceptions.HTTPError as err:
        raise OpenWeatherMapHTTPError(err.response.status_code, err.response.text)

    return response.json()
