"""
Timeline Builder

Stitches per-segment timing definitions into one absolute, time-ordered
timeline. Each definition has the shape::

    {
        "url": "https://example.org/part-1.mp3",
        "length_seconds": 4542.51,
        "times": {
            "_ub6": {"start": 0.0, "end": 1.0},
            "_ub7": {"start": 1.0, "end": 1.28},
        },
    }

Event bounds are relative to their own segment. Ingestion is append-only and
all-or-nothing per segment: a rejected definition leaves the timeline exactly
as it was.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from numbers import Real
from typing import Any, TypeAlias

from segstitch.domain import EventInterval, IngestionRejection, Segment
from segstitch.errors import (
    DuplicateEventIdError,
    MalformedInputError,
    TimeOutOfRangeError,
    UnknownEventIdError,
    UnknownSegmentError,
)
from segstitch.timeline import interval_math
from segstitch.timeline.event_index import EventIndex
from segstitch.timeline.locator import TimeLocator
from segstitch.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)

TimingDefinition: TypeAlias = Mapping[str, Any]


@dataclass(frozen=True)
class _ValidatedEvent:
    """One event that passed validation, still in segment-relative seconds."""

    id: str
    start: float
    end: float


@dataclass(frozen=True)
class _ValidatedSegment:
    """A fully validated segment definition ready to be appended."""

    url: str
    length: float
    events: tuple[_ValidatedEvent, ...]


def _read_number(value: object, *, field: str, url: object) -> float:
    """Returns ``value`` as a finite float or raises ``MalformedInputError``."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise MalformedInputError(
            f"Segment {url!r}: {field} must be a number, got {value!r}."
        )
    number = float(value)
    if not math.isfinite(number):
        raise MalformedInputError(f"Segment {url!r}: {field} must be finite.")
    return number


def _validate_event(
    event_id: object, raw_event: object, *, url: str, length: float
) -> _ValidatedEvent:
    """Validates one relative event definition against its segment length."""
    if not isinstance(event_id, str) or not event_id:
        raise MalformedInputError(
            f"Segment {url!r}: event ids must be non-empty strings, got {event_id!r}."
        )
    if not isinstance(raw_event, Mapping):
        raise MalformedInputError(
            f"Segment {url!r}: event {event_id!r} must be a mapping with start/end."
        )
    if "start" not in raw_event or "end" not in raw_event:
        raise MalformedInputError(
            f"Segment {url!r}: event {event_id!r} needs both start and end."
        )
    start = _read_number(raw_event["start"], field=f"{event_id}.start", url=url)
    end = _read_number(raw_event["end"], field=f"{event_id}.end", url=url)
    if start < 0:
        raise MalformedInputError(
            f"Segment {url!r}: event {event_id!r} starts before the segment."
        )
    if start >= end:
        raise MalformedInputError(
            f"Segment {url!r}: event {event_id!r} has start {start} >= end {end}."
        )
    if end > length:
        raise MalformedInputError(
            f"Segment {url!r}: event {event_id!r} ends at {end}, "
            f"past the segment length {length}."
        )
    return _ValidatedEvent(id=event_id, start=start, end=end)


def _validate_definition(raw_def: object) -> _ValidatedSegment:
    """Validates shape and values of one segment definition."""
    if not isinstance(raw_def, Mapping):
        raise MalformedInputError(
            f"Segment definitions must be mappings, got {type(raw_def).__name__}."
        )
    url = raw_def.get("url")
    if not isinstance(url, str) or not url.strip():
        raise MalformedInputError(f"Segment url must be a non-empty string: {url!r}.")
    if "length_seconds" not in raw_def:
        raise MalformedInputError(f"Segment {url!r}: missing length_seconds.")
    length = _read_number(raw_def["length_seconds"], field="length_seconds", url=url)
    if length <= 0:
        raise MalformedInputError(
            f"Segment {url!r}: length_seconds must be > 0, got {length}."
        )
    times = raw_def.get("times", {})
    if not isinstance(times, Mapping):
        raise MalformedInputError(f"Segment {url!r}: times must be a mapping.")

    events = sorted(
        (
            _validate_event(event_id, raw_event, url=url, length=length)
            for event_id, raw_event in times.items()
        ),
        key=lambda event: (event.start, event.end),
    )
    for previous, current in zip(events, events[1:]):
        if current.start < previous.end:
            raise MalformedInputError(
                f"Segment {url!r}: events {previous.id!r} and {current.id!r} overlap."
            )
    return _ValidatedSegment(url=url, length=length, events=tuple(events))


class Timeline:
    """Absolute, time-ordered view over a sequence of stitched segments.

    Segments, intervals and the event index are read-shared by every
    scheduler, controller and session that uses this timeline.
    """

    def __init__(self) -> None:
        self._segments: list[Segment] = []
        self._intervals: list[EventInterval] = []
        self._index = EventIndex(self._intervals, self._segments)
        self._revision = 0
        self._locator: TimeLocator | None = None

    @classmethod
    def from_timing_array(
        cls, definitions: Iterable[TimingDefinition], *, strict: bool = True
    ) -> Timeline:
        """Builds a timeline from a list of segment definitions."""
        timeline = cls()
        timeline.extend(definitions, strict=strict)
        return timeline

    # ── ingestion ──────────────────────────────────────────────────────
    def add_segment(self, raw_def: TimingDefinition) -> Segment:
        """Validates and appends one segment definition.

        Arguments:
            raw_def: Mapping with ``url``, ``length_seconds`` and ``times``.

        Returns:
            Segment: The appended segment, placed after every earlier one.

        Raises:
            MalformedInputError: The definition has a bad shape or value, or its
                url is already on the timeline.
            DuplicateEventIdError: An event id is already on the timeline.
        """
        validated = _validate_definition(raw_def)
        if self.segment_for_url(validated.url) is not None:
            raise MalformedInputError(
                f"Segment {validated.url!r} is already on the timeline."
            )
        for event in validated.events:
            if event.id in self._index:
                raise DuplicateEventIdError(event.id, validated.url)

        offset = self._segments[-1].end if self._segments else 0.0
        segment = Segment(
            url=validated.url,
            start=offset,
            length=validated.length,
            index=len(self._segments),
        )
        self._segments.append(segment)
        for event in validated.events:
            interval = EventInterval(
                id=event.id,
                start=interval_math.to_absolute(event.start, offset),
                end=interval_math.to_absolute(event.end, offset),
                segment_index=segment.index,
                relative_start=event.start,
                relative_end=event.end,
            )
            self._intervals.append(interval)
            self._index.register(interval, len(self._intervals) - 1)
        self._revision += 1

        logger.info(
            "Added segment %d (%s) at %.3fs with %d events.",
            segment.index,
            segment.url,
            segment.start,
            len(validated.events),
        )
        return segment

    def extend(
        self, definitions: Iterable[TimingDefinition], *, strict: bool = True
    ) -> list[IngestionRejection]:
        """Adds several segment definitions in order.

        In strict mode the first rejected definition raises and the segments
        before it stay ingested. Otherwise each rejection is logged and
        returned, and ingestion continues with the next definition.
        """
        rejections: list[IngestionRejection] = []
        for position, raw_def in enumerate(definitions):
            try:
                self.add_segment(raw_def)
            except (MalformedInputError, DuplicateEventIdError) as err:
                if strict:
                    raise
                url = raw_def.get("url") if isinstance(raw_def, Mapping) else None
                logger.warning("Rejected segment #%d (%s): %s", position, url, err)
                rejections.append(
                    IngestionRejection(
                        position=position,
                        url=url if isinstance(url, str) else None,
                        error=err,
                    )
                )
        return rejections

    # ── read access ────────────────────────────────────────────────────
    @property
    def segments(self) -> tuple[Segment, ...]:
        return tuple(self._segments)

    @property
    def intervals(self) -> tuple[EventInterval, ...]:
        return tuple(self._intervals)

    @property
    def index(self) -> EventIndex:
        return self._index

    @property
    def locator(self) -> TimeLocator:
        """Time locator shared by every reader of this timeline."""
        if self._locator is None:
            self._locator = TimeLocator(self)
        return self._locator

    @property
    def revision(self) -> int:
        """Counter bumped on every successful ingestion."""
        return self._revision

    @property
    def total_length(self) -> float:
        """Total stitched length in seconds; 0.0 for an empty timeline."""
        return self._segments[-1].end if self._segments else 0.0

    def __len__(self) -> int:
        return len(self._intervals)

    def segment_at(self, segment_index: int) -> Segment:
        return self._segments[segment_index]

    def interval_at(self, timeline_position: int) -> EventInterval:
        return self._intervals[timeline_position]

    def urls(self) -> list[str]:
        """Returns segment urls in timeline order."""
        return [segment.url for segment in self._segments]

    def segment_for_url(self, url: str) -> Segment | None:
        """Returns the segment carrying ``url`` or ``None``."""
        for segment in self._segments:
            if segment.url == url:
                return segment
        return None

    def _require_segment(self, url: str) -> Segment:
        segment = self.segment_for_url(url)
        if segment is None:
            raise UnknownSegmentError(url)
        return segment

    def segment_length(self, url: str) -> float:
        return self._require_segment(url).length

    def segment_start(self, url: str) -> float:
        """Returns the absolute start of the segment carrying ``url``."""
        return self._require_segment(url).start

    def event_start(self, event_id: str) -> float:
        """Returns the absolute start of ``event_id``."""
        found = self._index.lookup(event_id)
        if found is None:
            raise UnknownEventIdError(event_id)
        return found.interval.start

    def to_relative_time(self, absolute_seconds: float) -> tuple[Segment, float]:
        """Maps an absolute time to its segment and the segment-relative offset."""
        segment = self.locator.segment_for(absolute_seconds)
        if segment is None:
            raise TimeOutOfRangeError(absolute_seconds)
        return segment, interval_math.to_relative(absolute_seconds, segment.start)

    # ── export ─────────────────────────────────────────────────────────
    def get_timing_array(self, url: str) -> dict[str, Any]:
        """Rebuilds the ingestion definition of the segment carrying ``url``."""
        segment = self._require_segment(url)
        return self._export_segment(segment)

    def to_timing_array(self) -> list[dict[str, Any]]:
        """Exports every segment in timeline order."""
        return [self._export_segment(segment) for segment in self._segments]

    def _export_segment(self, segment: Segment) -> dict[str, Any]:
        times = {
            interval.id: {
                "start": interval.relative_start,
                "end": interval.relative_end,
            }
            for interval in self._intervals
            if interval.segment_index == segment.index
        }
        return {"url": segment.url, "length_seconds": segment.length, "times": times}
