"""Weatherly terminal front end.

Shows the current weather for a city by asking the Weatherly gateway, in the
terminal instead of the browser. The screen follows the client state: a
loading line, then either the dashboard or the error message with a
"Try again?" prompt.

Usage:
    weatherly London --unit fahrenheit
    weatherly --interactive
"""

from typing import Optional

import typer

from config import load_client_config
from logging_utils import configure_logging
from weather_client import DEFAULT_CITY, WeatherClient, WeatherState
from weather_display import TemperatureUnit, render_dashboard

SERVICE_NAME = "weatherly-cli"

app = typer.Typer(help="Weatherly: current weather for a city, in the terminal.", add_completion=False)


def build_client(city: str, api_base_url: Optional[str], on_change) -> WeatherClient:
    """Creates the weather client for the CLI session."""
    return WeatherClient(load_client_config(api_base_url=api_base_url), on_change=on_change, city=city)


def show_state(state: WeatherState, unit: TemperatureUnit) -> None:
    if state.is_loading:
        typer.echo(f"Loading Weatherly... ({state.city})")
    elif state.is_error:
        typer.secho(f"Error: {state.error}", fg=typer.colors.RED, err=True)
    else:
        typer.echo(render_dashboard(state.data, unit))


def offer_retry(client: WeatherClient, state: WeatherState) -> WeatherState:
    """Keeps offering 'Try again?' while the lookup fails and the user accepts."""
    while state.is_error and typer.confirm("Try again?", default=False):
        state = client.retry()
    return state


@app.command()
def show(
    city: str = typer.Argument(DEFAULT_CITY, help="City to look up, e.g. London or 'New York'"),
    unit: TemperatureUnit = typer.Option(TemperatureUnit.CELSIUS, "--unit", "-u", case_sensitive=False,
                                         help="Temperature unit"),
    api_base_url: Optional[str] = typer.Option(None, "--api-base-url", envvar="WEATHER_API_BASE_URL",
                                               help="Base URL of the Weatherly gateway"),
    interactive: bool = typer.Option(False, "--interactive", "-i",
                                     help="Keep prompting for other cities until a blank line"),
) -> None:
    """Show the current weather for CITY."""
    configure_logging(SERVICE_NAME)

    client = build_client(city.strip() or DEFAULT_CITY, api_base_url,
                          on_change=lambda state: show_state(state, unit))
    state = offer_retry(client, client.load())

    while interactive:
        next_city = typer.prompt("Search for a city (blank to quit)", default="", show_default=False)
        if not next_city.strip():
            break
        state = offer_retry(client, client.set_city(next_city))

    raise typer.Exit(code=0 if state.is_success else 1)


if __name__ == "__main__":
    app()
