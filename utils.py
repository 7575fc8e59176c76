import math
from datetime import datetime, timedelta, timezone


def epoch_timestamp_to_location_datetime(timestamp_epoch: int, timezone_offset: int) -> datetime:
    """Converts a Unix epoch timestamp to the wall-clock time of a location.

        OpenWeatherMap reports a location's timezone as a shift in seconds from
        UTC, so the result carries a fixed-offset tzinfo rather than a named zone.

        Args:
            timestamp_epoch: The integer Unix timestamp (seconds since the epoch).
            timezone_offset: The location's shift from UTC, in seconds.

        Returns:
            An aware datetime in the location's fixed offset.

        Example:
            >>> epoch_timestamp_to_location_datetime(1700000000, 3600).isoformat()
            '2023-11-14T23:13:20+01:00'
    """
    tz = timezone(timedelta(seconds=timezone_offset))
    return datetime.fromtimestamp(timestamp_epoch, tz=tz)


def round_half_up(value: float) -> int:
    """
        Rounds to the nearest integer, with halves going up.

        Python's round() uses banker's rounding (round(0.5) == 0); temperatures
        are displayed the way people expect instead.

        Example:
            >>> round_half_up(2.5), round_half_up(-2.5), round_half_up(15.2)
            (3, -2, 15)
    """
    return math.floor(value + 0.5)
