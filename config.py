"""Process-wide configuration for the Weatherly gateway and client.

Configuration objects are built once, at process start (a Lambda cold start or
the start of the development server / terminal client), and are read-only
thereafter. They are passed explicitly to the components that need them,
never looked up from the environment at request time.

The provider API key is a secret. It is read from OPENWEATHERMAP_API_KEY, or,
when that is absent and OPENWEATHERMAP_API_KEY_PARAMETER names an AWS SSM
parameter, fetched from Parameter Store with decryption. A missing key is not
a startup failure: the gateway reports it per request as a configuration error.
"""

import os
from typing import Mapping, Optional

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

logger = structlog.get_logger(__name__)

DEFAULT_OPENWEATHERMAP_BASE_URL = "https://api.openweathermap.org"
DEFAULT_PROVIDER_TIMEOUT_SECONDS = 10.0
DEFAULT_GATEWAY_BASE_URL = "http://localhost:8000/api"
DEFAULT_CLIENT_TIMEOUT_SECONDS = 15.0

TRUTHY_VALUES = ("1", "true", "yes", "on")


class GatewayConfig:
    """Read-only settings for the weather gateway.

        Attributes:
            api_key: The OpenWeatherMap API key, or None when it has not been configured.
            api_base_url: Scheme and host of the provider (no trailing slash).
            units: Unit system requested from the provider.
            timeout_seconds: Upper bound for the single provider call of a request.
            verify_ssl: Whether TLS certificates of the provider are verified.
    """
    __slots__ = ("api_key", "api_base_url", "units", "timeout_seconds", "verify_ssl")

    def __init__(self, api_key: Optional[str], api_base_url: str = DEFAULT_OPENWEATHERMAP_BASE_URL,
                 units: str = "metric", timeout_seconds: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS,
                 verify_ssl: bool = True):
        object.__setattr__(self, "api_key", api_key or None)
        object.__setattr__(self, "api_base_url", api_base_url.rstrip("/"))
        object.__setattr__(self, "units", units)
        object.__setattr__(self, "timeout_seconds", timeout_seconds)
        object.__setattr__(self, "verify_ssl", verify_ssl)

    def __setattr__(self, name, value):
        raise AttributeError(f"{self.__class__.__name__} is read-only")

    def __repr__(self):
        """Returns a string representation of the configuration, with the API key masked."""
        masked_api_key = "***" if self.api_key else None
        return (
            f"{self.__class__.__name__}("
            f"api_key={masked_api_key!r}, "
            f"api_base_url={self.api_base_url!r}, "
            f"units={self.units!r}, "
            f"timeout_seconds={self.timeout_seconds!r}, "
            f"verify_ssl={self.verify_ssl!r})"
        )


class ClientConfig:
    """Read-only settings for the weather client.

        Attributes:
            api_base_url: Base URL under which the gateway serves '/weather'.
            timeout_seconds: Timeout for a single gateway request.
    """
    __slots__ = ("api_base_url", "timeout_seconds")

    def __init__(self, api_base_url: str = DEFAULT_GATEWAY_BASE_URL,
                 timeout_seconds: float = DEFAULT_CLIENT_TIMEOUT_SECONDS):
        object.__setattr__(self, "api_base_url", api_base_url.rstrip("/"))
        object.__setattr__(self, "timeout_seconds", timeout_seconds)

    def __setattr__(self, name, value):
        raise AttributeError(f"{self.__class__.__name__} is read-only")

    def __repr__(self):
        return (f"{self.__class__.__name__}(api_base_url={self.api_base_url!r}, "
                f"timeout_seconds={self.timeout_seconds!r})")


def parse_bool(value: Optional[str]) -> bool:
    """Interprets an environment flag such as '1', 'true' or 'yes' as True."""
    return value is not None and value.strip().lower() in TRUTHY_VALUES


def parse_timeout(value: Optional[str], default: float) -> float:
    """Parses a positive timeout in seconds.

        Raises:
            ValueError: If the value is not a positive number.
    """
    if value is None or not value.strip():
        return default
    timeout = float(value)
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {value!r}")
    return timeout


def fetch_api_key_from_ssm(parameter_name: str, ssm_client=None) -> Optional[str]:
    """Reads the provider API key from AWS SSM Parameter Store.

        Args:
            parameter_name: Name of the (SecureString) parameter holding the key.
            ssm_client: An optional boto3 SSM client; one is created when omitted.

        Returns:
            The decrypted parameter value, or None when the lookup failed.
    """
    try:
        ssm_client = ssm_client or boto3.client("ssm")
        response = ssm_client.get_parameter(Name=parameter_name, WithDecryption=True)
        return response.get("Parameter", {}).get("Value") or None
    except (ClientError, BotoCoreError) as e:
        logger.error("Could not read OpenWeatherMap API key from SSM.", parameter=parameter_name, error=str(e))
        return None


def load_gateway_config(environ: Optional[Mapping[str, str]] = None, ssm_client=None) -> GatewayConfig:
    """Builds the gateway configuration from the process environment.

        Args:
            environ: Mapping to read settings from. Defaults to os.environ.
            ssm_client: Optional boto3 SSM client used for the API key parameter lookup.

        Returns:
            A read-only GatewayConfig.

        Raises:
            ValueError: If OPENWEATHERMAP_TIMEOUT is not a positive number.
    """
    environ = os.environ if environ is None else environ

    api_key = environ.get("OPENWEATHERMAP_API_KEY") or None
    parameter_name = environ.get("OPENWEATHERMAP_API_KEY_PARAMETER")
    if api_key is None and parameter_name:
        api_key = fetch_api_key_from_ssm(parameter_name, ssm_client)

    verify_ssl = not parse_bool(environ.get("OPENWEATHERMAP_DISABLE_SSL_VERIFY"))
    if not verify_ssl:
        logger.warning("TLS certificate verification for OpenWeatherMap is disabled. "
                       "Use this for local development only.")

    return GatewayConfig(
        api_key=api_key,
        api_base_url=environ.get("OPENWEATHERMAP_BASE_URL") or DEFAULT_OPENWEATHERMAP_BASE_URL,
        timeout_seconds=parse_timeout(environ.get("OPENWEATHERMAP_TIMEOUT"), DEFAULT_PROVIDER_TIMEOUT_SECONDS),
        verify_ssl=verify_ssl,
    )


def load_client_config(environ: Optional[Mapping[str, str]] = None,
                       api_base_url: Optional[str] = None) -> ClientConfig:
    """Builds the client configuration, letting an explicit base URL win over WEATHER_API_BASE_URL."""
    environ = os.environ if environ is None else environ
    return ClientConfig(
        api_base_url=api_base_url or environ.get("WEATHER_API_BASE_URL") or DEFAULT_GATEWAY_BASE_URL,
        timeout_seconds=parse_timeout(environ.get("WEATHER_CLIENT_TIMEOUT"), DEFAULT_CLIENT_TIMEOUT_SECONDS),
    )
