"""Weather Dashboard Presentation Module.

This module turns a WeatherResult (the OpenWeatherMap payload forwarded by the
gateway) into what the Weatherly front end shows. Every function here is a
pure function of the payload and the view state (temperature unit): no I/O,
no error conditions of its own. Fields missing from the payload are shown as
"N / A" instead of raising.

Main components:
    - TemperatureUnit: Celsius / Fahrenheit view state and conversion.
    - Icon and theme selection from the provider's condition data.
    - Local date/time formatting using the payload's UTC offset.
    - Static placeholder panels for the hourly and 7-day forecasts.
    - render_dashboard: The full text rendering.
"""

from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple

import utils

NOT_AVAILABLE = "N / A"


class TemperatureUnit(str, Enum):
    """Temperature units the dashboard can display. Values double as the CLI choices."""
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"

    @property
    def symbol(self) -> str:
        return "°F" if self is TemperatureUnit.FAHRENHEIT else "°C"


class BackgroundTheme(Enum):
    """Dashboard themes derived from the main weather condition.

        Each member contains a tuple of (id, display_name).
    """
    RAIN = (0, "Rain")
    CLOUDS = (1, "Clouds")
    CLEAR = (2, "Clear")
    SNOW = (3, "Snow")
    DEFAULT = (4, "Default")


# OpenWeatherMap icon code -> (glyph, label)
WEATHER_ICONS = {
    "01d": ("☀", "Sun"),
    "01n": ("🌙", "Moon"),
    "02d": ("🌤", "Cloud and sun"),
    "02n": ("☁", "Cloud and moon"),
    "03d": ("☁", "Cloud"),
    "03n": ("☁", "Cloud"),
    "04d": ("☁", "Broken clouds"),
    "04n": ("☁", "Broken clouds"),
    "09d": ("🌧", "Heavy showers"),
    "09n": ("🌧", "Heavy showers"),
    "10d": ("🌦", "Sun and rain"),
    "10n": ("🌧", "Moon and rain"),
    "11d": ("⚡", "Thunderstorm"),
    "11n": ("⚡", "Thunderstorm"),
    "13d": ("❄", "Snow"),
    "13n": ("❄", "Snow"),
    "50d": ("🌫", "Mist"),
    "50n": ("🌫", "Mist"),
}
UNKNOWN_WEATHER_ICON = ("?", "Unknown")

PLACEHOLDER_WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def convert_temp(temp_c: float, unit: TemperatureUnit) -> int:
    """Converts a Celsius temperature to the display unit, rounded to a whole degree."""
    if unit is TemperatureUnit.FAHRENHEIT:
        return utils.round_half_up(temp_c * 9 / 5 + 32)
    return utils.round_half_up(temp_c)


def get_weather_icon(icon_code: Optional[str]) -> Tuple[str, str]:
    """Maps an OpenWeatherMap icon code (e.g. '01d') to a (glyph, label) pair."""
    return WEATHER_ICONS.get(icon_code, UNKNOWN_WEATHER_ICON)


def get_primary_condition(result: Mapping[str, Any]) -> Mapping[str, Any]:
    """Returns the first entry of the payload's 'weather' list, or an empty mapping."""
    conditions = result.get("weather") or []
    if conditions and isinstance(conditions[0], Mapping):
        return conditions[0]
    return {}


def get_background_theme(result: Optional[Mapping[str, Any]]) -> BackgroundTheme:
    """Selects the dashboard theme from the main weather condition (e.g. 'Rain', 'Clouds')."""
    if not result:
        return BackgroundTheme.DEFAULT

    condition = str(get_primary_condition(result).get("main") or "").lower()
    if "rain" in condition:
        return BackgroundTheme.RAIN
    elif "clouds" in condition:
        return BackgroundTheme.CLOUDS
    elif "clear" in condition:
        return BackgroundTheme.CLEAR
    elif "snow" in condition:
        return BackgroundTheme.SNOW
    else:
        return BackgroundTheme.DEFAULT


def format_date(timestamp_epoch: int, timezone_offset: int) -> str:
    """Formats a timestamp as the location's date, e.g. 'Tuesday, November 14, 2023'."""
    local = utils.epoch_timestamp_to_location_datetime(timestamp_epoch, timezone_offset)
    return f"{local:%A}, {local:%B} {local.day}, {local.year}"


def format_time(timestamp_epoch: int, timezone_offset: int) -> str:
    """Formats a timestamp as the location's wall-clock time, e.g. '10:13 PM'."""
    local = utils.epoch_timestamp_to_location_datetime(timestamp_epoch, timezone_offset)
    return local.strftime("%I:%M %p")


def format_visibility_km(visibility_m: float) -> str:
    """Formats a visibility in metres as kilometres with one decimal, e.g. '10.0'."""
    return f"{visibility_m / 1000:.1f}"


def hourly_forecast_placeholder() -> List[Tuple[str, int]]:
    """Returns the static hourly panel: eight (hour label, temperature) slots.

        These are placeholder values, not a forecast.
    """
    return [(f"{10 + i}:00", 20 + i) for i in range(8)]


def daily_forecast_placeholder() -> List[Tuple[str, str, int, int]]:
    """Returns the static 7-day panel: (weekday, condition, high, low) per day.

        These are placeholder values, not a forecast.
    """
    return [(day, "Rain", 25 + i, 15 + i) for i, day in enumerate(PLACEHOLDER_WEEKDAYS)]


def _format_degrees(temp_c: Any, unit: TemperatureUnit) -> str:
    if not isinstance(temp_c, (int, float)):
        return NOT_AVAILABLE
    return f"{convert_temp(temp_c, unit)}°"


def _format_local(formatter, timestamp_epoch: Any, timezone_offset: Any) -> str:
    if not isinstance(timestamp_epoch, (int, float)):
        return NOT_AVAILABLE
    offset = timezone_offset if isinstance(timezone_offset, int) else 0
    return formatter(int(timestamp_epoch), offset)


def render_dashboard(result: Mapping[str, Any], unit: TemperatureUnit = TemperatureUnit.CELSIUS) -> str:
    """Renders a WeatherResult as the text dashboard shown by the terminal front end.

        Args:
            result: The OpenWeatherMap payload, as forwarded by the gateway.
            unit: The temperature unit selected by the user.

        Returns:
            A multi-line string: current conditions, details, then the placeholder panels.
    """
    main = result.get("main") or {}
    wind = result.get("wind") or {}
    sys_block = result.get("sys") or {}
    condition = get_primary_condition(result)
    timezone_offset = result.get("timezone", 0)
    glyph, icon_label = get_weather_icon(condition.get("icon"))

    location = result.get("name") or NOT_AVAILABLE
    if sys_block.get("country"):
        location = f"{location}, {sys_block['country']}"

    visibility = result.get("visibility")
    gust = wind.get("gust")

    lines = [
        f"Weatherly  [{unit.symbol}]  theme: {get_background_theme(result).value[1]}",
        "",
        location,
        _format_local(format_date, result.get("dt"), timezone_offset),
        f"{glyph}  {_format_degrees(main.get('temp'), unit)}  {condition.get('description') or icon_label}",
        f"Feels like {_format_degrees(main.get('feels_like'), unit)}",
        "",
        f"Wind:       {wind.get('speed', NOT_AVAILABLE)} m/s, {wind.get('deg', NOT_AVAILABLE)}°",
    ]
    if gust:
        lines.append(f"            Gusts: {gust} m/s")
    lines += [
        f"Humidity:   {main.get('humidity', NOT_AVAILABLE)}%",
        f"Pressure:   {main.get('pressure', NOT_AVAILABLE)} hPa",
        f"Visibility: "
        f"{format_visibility_km(visibility) if isinstance(visibility, (int, float)) else NOT_AVAILABLE} km",
        f"Sunrise:    {_format_local(format_time, sys_block.get('sunrise'), timezone_offset)}",
        f"Sunset:     {_format_local(format_time, sys_block.get('sunset'), timezone_offset)}",
        "",
        "Hourly Forecast",
        "  ".join(f"{hour} {temp}°" for hour, temp in hourly_forecast_placeholder()),
        "",
        "7-Day Forecast",
    ]
    lines += [f"{day:<10} {text:<5} {high}° / {low}°" for day, text, high, low in daily_forecast_placeholder()]

    return "\n".join(lines)
