"""Parsing of human-readable durations such as ``"1d"`` or ``"15m"``."""

import re
from datetime import timedelta
from typing import Union

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")

_UNIT_SECONDS = {
    "": 1,
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
}


def parse_expiry(value: Union[str, int, timedelta]) -> timedelta:
    """Convert an expiry like ``"30d"``, ``"12h"``, ``"45s"`` or ``3600`` to a timedelta.

    Bare numbers (int or digit-only strings) are seconds.

    Raises:
        ValueError: If the value is negative, zero or not in a known format.
    """
    if isinstance(value, timedelta):
        delta = value
    elif isinstance(value, bool):
        raise ValueError(f"Invalid expiry: {value!r}")
    elif isinstance(value, int):
        delta = timedelta(seconds=value)
    else:
        match = _DURATION_RE.match(str(value).lower())
        if not match:
            raise ValueError(f"Invalid expiry: {value!r}")
        amount, unit = match.groups()
        delta = timedelta(seconds=int(amount) * _UNIT_SECONDS[unit])

    if delta <= timedelta(0):
        raise ValueError(f"Expiry must be positive: {value!r}")
    return delta
