"""Dictionary-backed reverse lookup from event id to interval and segment."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from segstitch.domain import EventInterval, EventLookup, IndexEntry, Segment


class EventIndex:
    """Maps event ids to their timeline position and owning segment.

    The index reads the interval and segment sequences owned by its timeline;
    it never copies them.
    """

    def __init__(
        self,
        intervals: Sequence[EventInterval],
        segments: Sequence[Segment],
    ) -> None:
        self._intervals = intervals
        self._segments = segments
        self._entries: dict[str, IndexEntry] = {}

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def ids(self) -> Iterator[str]:
        """Iterates registered ids in ingestion order."""
        return iter(self._entries)

    def entry(self, event_id: str) -> IndexEntry | None:
        """Returns the raw index entry for ``event_id`` or ``None``."""
        return self._entries.get(event_id)

    def lookup(self, event_id: str) -> EventLookup | None:
        """Returns the interval and owning segment for ``event_id`` or ``None``."""
        entry = self._entries.get(event_id)
        if entry is None:
            return None
        return EventLookup(
            interval=self._intervals[entry.timeline_position],
            segment=self._segments[entry.segment_index],
        )

    def register(self, interval: EventInterval, timeline_position: int) -> None:
        """Adds one entry; the timeline has already rejected duplicate ids."""
        self._entries[interval.id] = IndexEntry(
            timeline_position=timeline_position,
            segment_index=interval.segment_index,
        )
