"""Weather Gateway Business Logic Module.

This module holds the request/response mapping between a gateway caller and
the OpenWeatherMap provider. It validates the requested city, checks that the
operator configured an API key, performs the single provider call and
translates every failure mode into one of the gateway errors defined in
weather_service, logging the internal detail as it goes.

The provider's payload is returned exactly as received. The gateway keeps no
state between requests: no cache, no retries, no shared mutable data.
"""

from typing import Any, Optional

import requests
import structlog

import open_weather_map
from config import GatewayConfig
from open_weather_map import OpenWeatherMapConnectionError, OpenWeatherMapHTTPError
from weather_service import (
    CityValidationError,
    ConfigurationError,
    UnexpectedGatewayError,
    UpstreamConnectionError,
    UpstreamHTTPError,
)

logger = structlog.get_logger(__name__)


def normalize_city(city: Optional[str]) -> str:
    """Trims the requested city and rejects missing or blank values.

        Raises:
            CityValidationError: If the city is None or empty after trimming.
    """
    city = city.strip() if isinstance(city, str) else ""
    if not city:
        raise CityValidationError()
    return city


class WeatherGateway:
    """Proxies city weather lookups to OpenWeatherMap.

        Attributes:
            config: The read-only gateway configuration, injected at construction.
            session: An injected requests session, or None to use the module-level requests API
                (a fresh connection per request, no state shared between requests).
    """
    def __init__(self, config: GatewayConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session

    def __repr__(self):
        return f"{self.__class__.__name__}(config={self.config!r})"

    def fetch_weather(self, city: Optional[str]) -> Any:
        """Fetches the current weather payload for a city.

            Flow:
                1. Validate the city (before any network call).
                2. Check that an API key is configured (before any network call).
                3. Query OpenWeatherMap once, with the configured timeout.
                4. Return the provider's JSON unchanged, or raise the matching gateway error.

            Args:
                city: The raw value of the 'city' query parameter.

            Returns:
                The provider's JSON payload, unmodified.

            Raises:
                CityValidationError: If the city is missing or empty.
                ConfigurationError: If no API key is configured.
                UpstreamHTTPError: If the provider returned a failure status (mirrored).
                UpstreamConnectionError: If the provider could not be reached.
                UnexpectedGatewayError: For any other failure.
        """
        city = normalize_city(city)

        if not self.config.api_key:
            logger.error("OpenWeatherMap API key not configured.")
            raise ConfigurationError()

        try:
            return open_weather_map.fetch_data_open_weather_map(city, self.config, self.session)
        except OpenWeatherMapHTTPError as e:
            logger.error("OpenWeatherMap API request failed.", city=city, status=e.status_code, response=e.body)
            raise UpstreamHTTPError(e.status_code)
        except OpenWeatherMapConnectionError as e:
            logger.error("Connection error while calling OpenWeatherMap API.", city=city, error=str(e))
            raise UpstreamConnectionError()
        except Exception as e:
            logger.error("An unexpected error occurred while fetching weather data.", city=city, error=str(e))
            raise UnexpectedGatewayError()
