"""
Duration Utilities

This module parses certificate time-to-live values written as Go-style
duration strings ("8760h", "1h30m", "90s") and converts durations to the
forms used on the wire and in log output.
"""

import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Union

from certvault.lib.errors import InvalidDuration

# Constants for time calculations (in seconds)
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400
SECONDS_PER_WEEK = 604800
SECONDS_PER_MONTH = 2592000  # 30-day month approximation
SECONDS_PER_YEAR = 31536000  # 365-day year approximation

# Largest duration representable as signed 64-bit nanoseconds
MAX_DURATION_SECONDS = Decimal(2**63 - 1) / Decimal(10**9)

# Seconds per accepted unit suffix
UNIT_SECONDS = {
    "ns": Decimal("0.000000001"),
    "us": Decimal("0.000001"),
    "µs": Decimal("0.000001"),  # micro sign
    "μs": Decimal("0.000001"),  # greek mu
    "ms": Decimal("0.001"),
    "s": Decimal(1),
    "m": Decimal(60),
    "h": Decimal(SECONDS_PER_HOUR),
}

# One "<number><unit>" component, e.g. "1.5h"
_COMPONENT = re.compile(r"([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: str) -> timedelta:
    """
    Parse a duration string such as "24h" or "1h30m".

    The grammar is an optional sign followed by one or more decimal numbers,
    each with a unit suffix (ns, us, ms, s, m, h). A bare "0" is accepted.

    Args:
        value: Duration string

    Returns:
        The parsed duration

    Raises:
        InvalidDuration: If the string is malformed, negative or out of range
    """
    if not isinstance(value, str) or not value:
        raise InvalidDuration(str(value), "empty duration")

    text = value
    negative = False
    if text[0] in "+-":
        negative = text[0] == "-"
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise InvalidDuration(value)

    total = Decimal(0)
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if match is None:
            raise InvalidDuration(value)
        number, unit = match.groups()
        try:
            total += Decimal(number) * UNIT_SECONDS[unit]
        except InvalidOperation:
            raise InvalidDuration(value)
        pos = match.end()

    if negative and total != 0:
        raise InvalidDuration(value, "negative duration")
    if total > MAX_DURATION_SECONDS:
        raise InvalidDuration(value, "duration out of range")

    return timedelta(microseconds=int(total * 1000000))


def to_duration(value: Union[str, timedelta]) -> timedelta:
    """Accept either an already parsed duration or a duration string."""
    if isinstance(value, timedelta):
        if value < timedelta(0):
            raise InvalidDuration(str(value), "negative duration")
        return value
    return parse_duration(value)


def format_ttl(duration: timedelta) -> str:
    """
    Format a duration as whole seconds for the authority, e.g. "31536000s".
    """
    return f"{int(duration.total_seconds())}s"


def span_to_str(span: int) -> str:
    """
    Convert a time span in seconds to a human-readable string.

    The span is expressed in the largest unit (years, months, weeks, days or
    hours) that divides it evenly.

    Args:
        span: Time span in seconds

    Returns:
        Human-readable time span (e.g., "1 year", "2 months", "3 weeks")
        Empty string if span is negative or zero
    """
    if span <= 0:
        return ""

    # (seconds_per_unit, singular_name, plural_name)
    time_units = [
        (SECONDS_PER_YEAR, "year", "years"),
        (SECONDS_PER_MONTH, "month", "months"),
        (SECONDS_PER_WEEK, "week", "weeks"),
        (SECONDS_PER_DAY, "day", "days"),
        (SECONDS_PER_HOUR, "hour", "hours"),
    ]

    for seconds_per_unit, singular, plural in time_units:
        if span % seconds_per_unit == 0 and span // seconds_per_unit >= 1:
            unit_count = span // seconds_per_unit
            return f"{unit_count} {singular if unit_count == 1 else plural}"

    return f"{span} seconds"


def duration_to_str(duration: timedelta) -> str:
    """Human-readable form of a duration, "0 seconds" for zero."""
    return span_to_str(int(duration.total_seconds())) or "0 seconds"
