"""Conversions between seconds and ``HH:MM:SS`` display strings."""

from __future__ import annotations

import math

from segstitch.errors import MalformedInputError


def format_time(seconds: float, precision: int = 0) -> str:
    """
    Formats a duration as ``HH:MM:SS``.

    Arguments:
        seconds (float): Non-negative duration in seconds.
        precision (int, optional): Fractional digits appended to the seconds
            field, by default 0.

    Returns:
        str: The formatted duration; hours are not wrapped at 24.
    """
    if not math.isfinite(seconds) or seconds < 0:
        raise MalformedInputError(f"Cannot format {seconds!r} as a time.")
    scale = 10**precision
    whole, fraction = divmod(round(seconds * scale), scale)
    minutes, secs = divmod(int(whole), 60)
    hours, minutes = divmod(minutes, 60)
    text = f"{hours:02d}:{minutes:02d}:{secs:02d}"
    if precision > 0:
        text += f".{int(fraction):0{precision}d}"
    return text


def to_seconds(formatted_time: str) -> float:
    """
    Parses ``SS``, ``MM:SS`` or ``HH:MM:SS`` (with optional fraction) into seconds.

    Arguments:
        formatted_time (str): Time string, e.g. ``"01:02:03.5"``.

    Returns:
        float: Total seconds.
    """
    parts = formatted_time.strip().split(":")
    if not 1 <= len(parts) <= 3 or any(
        not part.strip() or part.strip().startswith(("-", "+")) for part in parts
    ):
        raise MalformedInputError(f"Invalid time string {formatted_time!r}.")
    try:
        *larger, last = parts
        total = float(last)
        for multiplier, part in zip((60, 3600), reversed(larger)):
            total += int(part) * multiplier
    except ValueError as err:
        raise MalformedInputError(f"Invalid time string {formatted_time!r}.") from err
    if not math.isfinite(total) or total < 0:
        raise MalformedInputError(f"Invalid time string {formatted_time!r}.")
    return total
