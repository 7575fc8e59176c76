"""Custom exception hierarchy for the Weatherly gateway.

This module defines the structured set of exceptions the gateway uses to
report failures to its callers. Every gateway error carries exactly one HTTP
status code and one fixed, user-facing message; internal detail such as the
provider's response body or the text of a network exception is logged, never
returned to the caller.

Example:
    try:
        data = gateway.fetch_weather(city)
    except GatewayError as e:
        return get_response(e.http_status, context, error=e.message)
"""


class WeatherServiceError(Exception):
    """Base class for any exception raised by a weather service.

        Catching this exception will intercept any error specifically defined
        within this application, regardless of the underlying service provider.
    """
    pass


class GatewayError(WeatherServiceError):
    """Base class for errors the gateway reports back to its HTTP callers.

        Attributes:
            http_status: The HTTP status code returned to the caller.
            message: The fixed, user-facing error message.
    """
    http_status = 500
    message = "An unexpected error occurred. Please try again later."

    def __init__(self, http_status: int | None = None):
        """Initializes the error, optionally overriding the class-level HTTP status.

                Args:
                    http_status: The HTTP status code to report instead of the default.
        """
        super().__init__(self.message)
        if http_status is not None:
            self.http_status = http_status

    def __repr__(self):
        """Returns a string representation of the error, including its HTTP status."""
        return f"{self.__class__.__name__}(http_status={self.http_status!r})"


class CityValidationError(GatewayError):
    """Raised when the 'city' query parameter is missing or empty."""
    http_status = 422
    message = "The city field is required."


class ConfigurationError(GatewayError):
    """Raised when the provider API key has not been configured by the operator."""
    http_status = 500
    message = "API key not configured. Please contact support."


class UpstreamHTTPError(GatewayError):
    """Raised when the provider answers with a failure status. Mirrors that status."""
    message = "Failed to fetch weather data. Please try again later or check the city name."

    def __init__(self, http_status: int):
        super().__init__(http_status)


class UpstreamConnectionError(GatewayError):
    """Raised when the provider cannot be reached (DNS, TLS, refused connection, timeout)."""
    http_status = 503
    message = "Could not connect to the weather service. Please try again later."


class UnexpectedGatewayError(GatewayError):
    """Raised for any other failure while fetching weather data."""
    http_status = 500
    message = "An unexpected error occurred. Please try again later."
