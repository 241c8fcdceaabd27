"""Translates "play event X" and "play at time T" into adapter commands."""

from __future__ import annotations

import logging

from segstitch.domain import EventLookup
from segstitch.errors import (
    AdapterUnavailableError,
    TimeOutOfRangeError,
    UnknownEventIdError,
)
from segstitch.playback.adapter import PlaybackAdapter
from segstitch.playback.scheduler import BoundaryScheduler
from segstitch.timeline.builder import Timeline
from segstitch.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)


class PlaybackController:
    """Issues segment-relative adapter calls for absolute timeline requests."""

    def __init__(self, timeline: Timeline, scheduler: BoundaryScheduler) -> None:
        self._timeline = timeline
        self._scheduler = scheduler

    def _require_adapter(self) -> PlaybackAdapter:
        adapter = self._scheduler.adapter
        if adapter is None:
            raise AdapterUnavailableError("No playback adapter is attached.")
        return adapter

    def play_from_event_id(self, event_id: str) -> EventLookup:
        """Starts playback at the beginning of ``event_id``.

        The scheduler's active event is updated before playback starts, so
        ``current_event_id()`` is consistent as soon as this returns.

        Raises:
            UnknownEventIdError: ``event_id`` is not on the timeline.
            AdapterUnavailableError: The adapter is unset or one of its calls failed.
        """
        found = self._timeline.index.lookup(event_id)
        if found is None:
            raise UnknownEventIdError(event_id)
        adapter = self._require_adapter()
        interval, segment = found.interval, found.segment

        try:
            adapter.pause()
            if adapter.get_active_source_url() != segment.url:
                logger.debug("Loading source %s.", segment.url)
                adapter.set_active_source(segment.url)
            adapter.seek_to(interval.relative_start)
        except AdapterUnavailableError:
            raise
        except Exception as err:
            raise AdapterUnavailableError(f"Playback adapter failed: {err}") from err

        self._scheduler.jump_to(interval, segment)
        try:
            adapter.play()
        except Exception as err:
            self._scheduler.close()
            raise AdapterUnavailableError(f"Playback adapter failed: {err}") from err

        logger.info(
            "Playing %s from %.3fs (segment %d at %.3fs).",
            event_id,
            interval.start,
            segment.index,
            interval.relative_start,
        )
        return found

    def play_from_time(self, absolute_seconds: float) -> EventLookup:
        """Starts playback at the beginning of the event containing ``t``.

        Raises:
            TimeOutOfRangeError: No event interval contains ``t``.
        """
        interval = self._timeline.locator.locate(absolute_seconds)
        if interval is None:
            raise TimeOutOfRangeError(absolute_seconds)
        return self.play_from_event_id(interval.id)

    def current_event_id(self) -> str | None:
        return self._scheduler.active_event_id

    def current_time(self) -> float:
        """Absolute playhead position read from the adapter."""
        return self._scheduler.absolute_position()
