"""Typed failures raised by timeline ingestion, lookup, and playback."""

from __future__ import annotations


class SegstitchError(Exception):
    """Base class for every failure raised by this package."""


class MalformedInputError(SegstitchError, ValueError):
    """Raised when a segment definition or time value has a bad shape or value."""


class DuplicateEventIdError(SegstitchError, ValueError):
    """Raised when an event id is already registered on the timeline."""

    def __init__(self, event_id: str, url: str) -> None:
        super().__init__(
            f"Event id {event_id!r} in segment {url!r} is already on the timeline."
        )
        self.event_id = event_id
        self.url = url


class UnknownEventIdError(SegstitchError, LookupError):
    """Raised when an event id is not on the timeline."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Unknown event id {event_id!r}.")
        self.event_id = event_id


class UnknownSegmentError(SegstitchError, LookupError):
    """Raised when no segment carries the requested url."""

    def __init__(self, url: str) -> None:
        super().__init__(f"No segment with url {url!r}.")
        self.url = url


class TimeOutOfRangeError(SegstitchError, LookupError):
    """Raised when an absolute time falls outside every interval or segment."""

    def __init__(self, absolute_seconds: float) -> None:
        super().__init__(f"No timeline entry contains t={absolute_seconds!r}s.")
        self.absolute_seconds = absolute_seconds


class AdapterUnavailableError(SegstitchError, RuntimeError):
    """Raised when the playback adapter is unset or one of its calls fails."""
