"""Half-open interval containment and absolute/relative offset conversion."""

from __future__ import annotations


def contains(start: float, end: float, t: float) -> bool:
    """Returns whether ``t`` lies inside the half-open interval ``[start, end)``."""
    return start <= t < end


def to_relative(absolute_seconds: float, segment_start: float) -> float:
    """Converts an absolute timeline position into a segment-relative one."""
    return absolute_seconds - segment_start


def to_absolute(relative_seconds: float, segment_start: float) -> float:
    """Converts a segment-relative position into an absolute timeline one."""
    return segment_start + relative_seconds


def remaining(end: float, position: float) -> float:
    """Returns seconds left until ``end``, never negative."""
    return max(0.0, end - position)
