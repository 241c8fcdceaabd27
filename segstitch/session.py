"""One-object playback session binding a timeline to one adapter."""

from __future__ import annotations

import logging

from segstitch.config import AppConfig, get_settings
from segstitch.domain import EventLookup
from segstitch.errors import AdapterUnavailableError
from segstitch.playback.adapter import PlaybackAdapter, PlaybackSignal
from segstitch.playback.controller import PlaybackController
from segstitch.playback.scheduler import (
    BoundaryScheduler,
    ErrorCallback,
    EventCallback,
    SchedulerPhase,
)
from segstitch.playback.timers import AsyncioTimerService, TimerService
from segstitch.timeline.builder import Timeline
from segstitch.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)


class PlaybackSession:
    """Boundary scheduler and playback controller for one adapter.

    Many sessions may share one timeline; each owns its own schedule state.

    Example:
        >>> session = PlaybackSession(timeline, adapter, on_start=print)
        >>> session.play_from_event_id("_ub7")
    """

    def __init__(
        self,
        timeline: Timeline,
        adapter: PlaybackAdapter | None = None,
        *,
        timers: TimerService | None = None,
        on_start: EventCallback | None = None,
        on_end: EventCallback | None = None,
        on_error: ErrorCallback | None = None,
        settings: AppConfig | None = None,
    ) -> None:
        settings = settings if settings is not None else get_settings()
        self._timeline = timeline
        self._scheduler = BoundaryScheduler(
            timeline,
            adapter,
            timers if timers is not None else AsyncioTimerService(),
            on_start=on_start,
            on_end=on_end,
            on_error=on_error,
            config=settings.scheduler,
        )
        self._controller = PlaybackController(timeline, self._scheduler)

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def scheduler(self) -> BoundaryScheduler:
        return self._scheduler

    @property
    def adapter(self) -> PlaybackAdapter | None:
        return self._scheduler.adapter

    @property
    def phase(self) -> SchedulerPhase:
        return self._scheduler.phase

    def attach_adapter(self, adapter: PlaybackAdapter | None) -> None:
        """Binds (or unbinds, with ``None``) the playback adapter."""
        logger.debug("Attaching adapter %r.", adapter)
        self._scheduler.attach_adapter(adapter)

    def _require_adapter(self) -> None:
        if self._scheduler.adapter is None:
            raise AdapterUnavailableError("No playback adapter is attached.")

    def handle_signal(self, signal: PlaybackSignal | str) -> None:
        """Forwards one host playback signal to the scheduler."""
        self._require_adapter()
        self._scheduler.handle_signal(signal)

    def play_from_event_id(self, event_id: str) -> EventLookup:
        return self._controller.play_from_event_id(event_id)

    def play_from_time(self, absolute_seconds: float) -> EventLookup:
        return self._controller.play_from_time(absolute_seconds)

    def current_event_id(self) -> str | None:
        return self._controller.current_event_id()

    def current_time(self) -> float:
        return self._controller.current_time()

    def close(self) -> None:
        """Cancels any pending wake-up; no notifications are emitted."""
        self._scheduler.close()
