"""AWS Lambda Handler and Request Orchestration Module.

This module is the entry point of the Weatherly gateway. It serves
GET /weather?city=<name> behind an HTTP API (Lambda proxy integration) and
manages the lifecycle of a request:
    1. Extracting the 'city' query parameter from the proxy event.
    2. Delegating the lookup to the WeatherGateway built at cold start.
    3. Mapping the outcome to an HTTP status code and JSON body.

On success the body is the provider's payload and nothing else. On failure
the body is {"error": <fixed message>} with the status of the gateway error.

Environment Requirements:
    - OPENWEATHERMAP_API_KEY, or OPENWEATHERMAP_API_KEY_PARAMETER naming an SSM parameter.
"""
from __future__ import annotations

import json
from typing import Any, Optional, TYPE_CHECKING

# makes AWS specific type hinting available in IDE, without bundling the library when deploying to the cloud
if TYPE_CHECKING:
    from aws_lambda_typing.context import Context

import structlog

from config import load_gateway_config
from logging_utils import configure_logging
from weather_gateway import WeatherGateway
from weather_service import GatewayError

SERVICE_NAME = "weather-gateway"

logger = structlog.get_logger(__name__)

_gateway: Optional[WeatherGateway] = None


def get_gateway() -> WeatherGateway:
    """Returns the process-wide gateway, building it and its configuration on the first (cold start) call."""
    global _gateway
    if _gateway is None:
        configure_logging(SERVICE_NAME)
        _gateway = WeatherGateway(load_gateway_config())
    return _gateway


def get_request_city_param(event: dict) -> Optional[str]:
    """Retrieves the 'city' query string parameter from the incoming request."""
    # API Gateway sends null, not {}, when the request has no query string
    return (event.get('queryStringParameters') or {}).get('city', None)


def get_request_id(context: Context) -> str:
    return getattr(context, "aws_request_id", "")


def get_response(status_code: int, context: Context, body: Any) -> dict:
    """Constructs an HTTP response for the Lambda proxy integration.

        Args:
            status_code: HTTP status code to return.
            context: AWS Lambda context object (used for Request ID).
            body: JSON-serialisable body, sent as-is.

        Returns:
            A dictionary formatted as an AWS Lambda HTTP response.
    """
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': "application/json",
            'Access-Control-Allow-Origin': "*",
            "X-Request-ID": get_request_id(context)
        },
        'body': json.dumps(body)
    }


def handle_gateway_error(context: Context, error: GatewayError) -> dict:
    """Returns the response for a gateway error: its status and its fixed message, nothing more."""
    return get_response(error.http_status, context, {"error": error.message})


def handle_weather_request(event: dict, context: Context, gateway: WeatherGateway) -> dict:
    """Serves one weather lookup with the given gateway.

        Returns:
            A 200 response carrying the provider's payload, or the mapped gateway error response.
    """
    city = get_request_city_param(event)

    try:
        weather_data = gateway.fetch_weather(city)
    except GatewayError as e:
        return handle_gateway_error(context, e)

    return get_response(200, context, weather_data)


def lambda_handler(event, context: Context) -> dict:
    """The primary execution entry point for the AWS Lambda function.

        Execution Flow:
            1. Obtain the gateway (configuration is loaded once per cold start).
            2. Parse the 'city' query parameter.
            3. Fetch the city weather from OpenWeatherMap.
            4. Return the provider JSON with status 200, or an {"error": ...} body
            with the matching status.
    """
    return handle_weather_request(event, context, get_gateway())
