"""Ordered search from an absolute time to its interval and segment."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from segstitch.domain import EventInterval, Segment

if TYPE_CHECKING:
    from segstitch.timeline.builder import Timeline


def _floats(values) -> np.ndarray:
    return np.fromiter(values, dtype=np.float64)


def _search(starts: np.ndarray, ends: np.ndarray, t: float) -> int | None:
    """Returns the position of the half-open range holding ``t`` or ``None``.

    ``starts`` must be sorted ascending with non-overlapping ranges; for any
    other input the result is undefined.
    """
    position = int(np.searchsorted(starts, t, side="right")) - 1
    if position < 0 or not t < ends[position]:
        return None
    return position


class TimeLocator:
    """Binary search over the timeline's intervals and segments.

    Search arrays are rebuilt lazily whenever the timeline revision changes,
    so a locator can be kept for the lifetime of its timeline.
    """

    def __init__(self, timeline: Timeline) -> None:
        self._timeline = timeline
        self._revision = -1
        self._interval_starts = _floats(())
        self._interval_ends = _floats(())
        self._segment_starts = _floats(())
        self._segment_ends = _floats(())

    def _refresh(self) -> None:
        if self._revision == self._timeline.revision:
            return
        intervals = self._timeline.intervals
        segments = self._timeline.segments
        self._interval_starts = _floats(interval.start for interval in intervals)
        self._interval_ends = _floats(interval.end for interval in intervals)
        self._segment_starts = _floats(segment.start for segment in segments)
        self._segment_ends = _floats(segment.end for segment in segments)
        self._revision = self._timeline.revision

    def locate(self, absolute_seconds: float) -> EventInterval | None:
        """Returns the interval with ``start <= t < end`` or ``None``."""
        self._refresh()
        position = _search(
            self._interval_starts, self._interval_ends, float(absolute_seconds)
        )
        if position is None:
            return None
        return self._timeline.interval_at(position)

    def segment_for(self, absolute_seconds: float) -> Segment | None:
        """Returns the segment whose span holds ``t`` or ``None``."""
        self._refresh()
        position = _search(
            self._segment_starts, self._segment_ends, float(absolute_seconds)
        )
        if position is None:
            return None
        return self._timeline.segment_at(position)

    def next_interval_after(self, absolute_seconds: float) -> EventInterval | None:
        """Returns the first interval starting strictly after ``t``."""
        self._refresh()
        position = int(
            np.searchsorted(self._interval_starts, float(absolute_seconds), side="right")
        )
        if position >= len(self._interval_starts):
            return None
        return self._timeline.interval_at(position)
