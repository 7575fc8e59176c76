"""Local development server for the Weatherly gateway.

Serves the Lambda handler's logic at GET /api/weather with Flask, so the
front end can be pointed at http://localhost:8000/api without deploying. Each
Flask request is translated into a Lambda proxy event and the handler's
response is returned unchanged (status, headers and body).

Environment Variables:
    WEATHERLY_HOST: Interface to bind (default: 127.0.0.1).
    WEATHERLY_PORT: Port to bind (default: 8000).
"""

import os
import uuid
from typing import Optional

from flask import Flask, Response, request

import lambda_function
from config import load_gateway_config
from logging_utils import configure_logging
from weather_gateway import WeatherGateway

SERVICE_NAME = "weather-gateway-local"


class LocalContext:
    """Stands in for the Lambda context object; only the request id is used."""
    def __init__(self):
        self.aws_request_id = str(uuid.uuid4())


def build_proxy_event() -> dict:
    """Translates the current Flask request into a Lambda proxy (payload 2.0) event."""
    return {
        "rawPath": request.path,
        "queryStringParameters": request.args.to_dict() or None,
        "requestContext": {
            "http": {
                "method": request.method,
                "path": request.path,
                "sourceIp": request.remote_addr,
            }
        },
    }


def create_app(gateway: Optional[WeatherGateway] = None) -> Flask:
    """Creates the Flask app serving the gateway.

        Args:
            gateway: The gateway to serve. Built from the environment when omitted.
    """
    if gateway is None:
        gateway = WeatherGateway(load_gateway_config())

    app = Flask(__name__)

    @app.get("/api/weather")
    def weather():
        result = lambda_function.handle_weather_request(build_proxy_event(), LocalContext(), gateway)
        return Response(result["body"], status=result["statusCode"], headers=result["headers"])

    return app


def main() -> None:
    configure_logging(SERVICE_NAME)
    app = create_app()
    app.run(host=os.getenv("WEATHERLY_HOST", "127.0.0.1"), port=int(os.getenv("WEATHERLY_PORT", "8000")))


if __name__ == "__main__":
    main()
