"""Stitch independently authored media segments into one timed-event timeline."""

from .errors import (
    AdapterUnavailableError,
    DuplicateEventIdError,
    MalformedInputError,
    SegstitchError,
    TimeOutOfRangeError,
    UnknownEventIdError,
    UnknownSegmentError,
)
from .domain import EventInterval, EventLookup, IndexEntry, Segment
from .timeline import EventIndex, TimeLocator, Timeline
from .playback import (
    BoundaryScheduler,
    PlaybackAdapter,
    PlaybackController,
    PlaybackSignal,
    SchedulerPhase,
)
from .session import PlaybackSession

__version__ = "1.0.0"
