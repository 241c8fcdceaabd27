"""Domain records for stitched segments and their timed events."""

from __future__ import annotations

from dataclasses import dataclass

from segstitch.errors import SegstitchError


@dataclass(frozen=True, slots=True)
class Segment:
    """One media file placed at a fixed absolute offset on the timeline."""

    url: str
    start: float
    length: float
    index: int

    @property
    def end(self) -> float:
        """Absolute end of the segment (exclusive)."""
        return self.start + self.length


@dataclass(frozen=True, slots=True)
class EventInterval:
    """A named half-open ``[start, end)`` interval in absolute timeline seconds.

    ``relative_start`` and ``relative_end`` keep the values exactly as ingested,
    so exporting and segment-relative seeking never round-trip through float
    subtraction.
    """

    id: str
    start: float
    end: float
    segment_index: int
    relative_start: float
    relative_end: float


@dataclass(frozen=True, slots=True)
class IndexEntry:
    """Reverse-lookup record for one event id."""

    timeline_position: int
    segment_index: int


@dataclass(frozen=True, slots=True)
class EventLookup:
    """An event interval together with the segment that owns it."""

    interval: EventInterval
    segment: Segment


@dataclass(frozen=True, slots=True)
class IngestionRejection:
    """A segment definition rejected during a lenient bulk ingestion."""

    position: int
    url: str | None
    error: SegstitchError
