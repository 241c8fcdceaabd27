"""
Boundary Scheduler

Watches the live playback position of one adapter and emits start/end
notifications as playback crosses event boundaries.

The scheduler is a two-phase state machine:

    IDLE                no active event; while playing, the position is
                        re-checked after a fixed gap delay.
    WATCHING(event_id)  a wake-up is armed for the remaining time of the
                        active event plus a small slack.

On every wake-up the adapter position is re-read. A position still inside the
active event re-arms silently, so buffering stalls never produce duplicate
notifications. Exactly one wake-up is pending at a time. Every wake-up carries
a generation token, and a callback whose token is no longer current is
ignored.

Signals and wake-ups are processed strictly in arrival order. Anything that
arrives while a transition is running (for example a signal raised from inside
``on_start``) is queued behind it. Jumps are the exception: the new active event
and its wake-up are applied immediately, signals still queued from before the
jump are dropped, and only the end/start notifications wait in the queue.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TypeAlias

from segstitch.config import SchedulerConfig, get_settings
from segstitch.domain import EventInterval, Segment
from segstitch.errors import AdapterUnavailableError
from segstitch.playback.adapter import PlaybackAdapter, PlaybackSignal
from segstitch.playback.timers import TimerHandle, TimerService
from segstitch.timeline import interval_math
from segstitch.timeline.builder import Timeline
from segstitch.utils.logger import get_logger

logger: logging.Logger = get_logger(__name__)

EventCallback: TypeAlias = Callable[[str], None]
ErrorCallback: TypeAlias = Callable[[AdapterUnavailableError], None]


class SchedulerPhase(StrEnum):
    """Observable phase of a boundary scheduler."""

    IDLE = "idle"
    WATCHING = "watching"


@dataclass
class ScheduleState:
    """Working state owned by exactly one scheduler instance."""

    active_event_id: str | None = None
    last_known_position: float | None = None
    pending_timer: TimerHandle | None = None
    segment_index: int | None = None
    generation: int = 0

    @property
    def phase(self) -> SchedulerPhase:
        if self.active_event_id is None:
            return SchedulerPhase.IDLE
        return SchedulerPhase.WATCHING


class BoundaryScheduler:
    """Self-rescheduling boundary watcher bound to one playback adapter.

    Arguments:
        timeline: Read-shared timeline to resolve positions against.
        adapter: The playback adapter to poll; may be attached later.
        timers: Service used to arm cancellable wake-ups.
        on_start: Called with an event id when playback enters that event.
        on_end: Called with an event id when playback leaves that event.
        on_error: Receives adapter failures raised inside wake-ups. Without
            it such failures propagate out of the timer callback.
        config: Slack and gap re-check timing; defaults to the app settings.
    """

    def __init__(
        self,
        timeline: Timeline,
        adapter: PlaybackAdapter | None,
        timers: TimerService,
        *,
        on_start: EventCallback | None = None,
        on_end: EventCallback | None = None,
        on_error: ErrorCallback | None = None,
        config: SchedulerConfig | None = None,
    ) -> None:
        config = config if config is not None else get_settings().scheduler
        self._timeline = timeline
        self._adapter = adapter
        self._timers = timers
        self._on_start = on_start
        self._on_end = on_end
        self._on_error = on_error
        self._slack_seconds = config.slack_seconds
        self._gap_recheck_seconds = config.gap_recheck_seconds
        self._state = ScheduleState()
        self._actions: deque[tuple[Callable[[], None], bool]] = deque()
        self._running = False
        self._jumps = 0

    # ── observation ────────────────────────────────────────────────────
    @property
    def state(self) -> ScheduleState:
        return self._state

    @property
    def phase(self) -> SchedulerPhase:
        return self._state.phase

    @property
    def active_event_id(self) -> str | None:
        return self._state.active_event_id

    @property
    def adapter(self) -> PlaybackAdapter | None:
        return self._adapter

    def attach_adapter(self, adapter: PlaybackAdapter | None) -> None:
        """Binds another adapter; any pending wake-up is cancelled first."""
        self._cancel_pending()
        self._adapter = adapter
        self._state.segment_index = None

    def absolute_position(self) -> float:
        """Reads the adapter and returns the absolute playhead in seconds."""
        _, position = self._read_position()
        return position

    # ── external signals ───────────────────────────────────────────────
    def handle_signal(self, signal: PlaybackSignal | str) -> None:
        """Processes one host playback signal."""
        signal = PlaybackSignal(signal)
        logger.debug("Signal %s in phase %s.", signal, self.phase)
        if signal.resumes:
            self._dispatch(self._resume)
        else:
            self._dispatch(self._stop)

    def resume(self) -> None:
        self.handle_signal(PlaybackSignal.PLAY)

    def stop(self) -> None:
        self.handle_signal(PlaybackSignal.PAUSE)

    def jump_to(self, interval: EventInterval, segment: Segment) -> None:
        """Makes ``interval`` the active event before the adapter reports it.

        The active id and the wake-up for the new event's end are set before
        this returns, even when called from inside ``on_start``/``on_end``.
        The previous event (if any) then ends and the new one starts. Jumping
        to the event that is already active only re-arms the wake-up.
        """
        self._cancel_pending()
        self._jumps += 1
        self._state.segment_index = segment.index
        self._state.last_known_position = interval.start
        previous = self._state.active_event_id
        if previous == interval.id:
            self._arm_boundary(interval, interval.start)
            return
        self._state.active_event_id = interval.id
        self._arm_boundary(interval, interval.start)
        self._drop_queued_signals()
        logger.debug("Jumped from %s to %s.", previous, interval.id)
        self._dispatch(
            lambda: self._announce_jump(previous, interval.id), survives_jump=True
        )

    def close(self) -> None:
        """Cancels the pending wake-up without emitting notifications."""
        self._cancel_pending()
        self._actions.clear()

    # ── dispatch ───────────────────────────────────────────────────────
    def _dispatch(
        self, action: Callable[[], None], *, survives_jump: bool = False
    ) -> None:
        self._actions.append((action, survives_jump))
        if self._running:
            return
        self._running = True
        try:
            while self._actions:
                queued, _ = self._actions.popleft()
                queued()
        except BaseException:
            self._actions.clear()
            raise
        finally:
            self._running = False

    def _wake(self, generation: int) -> None:
        try:
            self._dispatch(lambda: self._on_wake(generation))
        except AdapterUnavailableError as err:
            if self._on_error is None:
                raise
            logger.error("Boundary watching stopped: %s", err)
            self._on_error(err)

    # ── transitions ────────────────────────────────────────────────────
    def _resume(self) -> None:
        self._cancel_pending()
        self._reconcile()

    def _stop(self) -> None:
        self._cancel_pending()
        self._leave_active()

    def _on_wake(self, generation: int) -> None:
        if generation != self._state.generation or self._state.pending_timer is None:
            logger.debug("Ignoring stale wake-up #%d.", generation)
            return
        self._state.pending_timer = None
        self._reconcile()

    def _announce_jump(self, previous: str | None, event_id: str) -> None:
        if previous is not None and self._on_end is not None:
            self._on_end(previous)
        if self._on_start is not None:
            self._on_start(event_id)

    def _reconcile(self) -> None:
        """Compares the live position with the active event and acts on it."""
        _, position = self._read_position()
        active = self._active_interval()
        if active is not None and interval_math.contains(
            active.start, active.end, position
        ):
            self._arm_boundary(active, position)
            return
        jumps = self._jumps
        self._leave_active()
        if jumps != self._jumps:
            # on_end jumped elsewhere.
            return
        interval = self._timeline.locator.locate(position)
        if interval is None:
            self._arm_gap_recheck(position)
            return
        self._enter(interval, position)

    def _enter(self, interval: EventInterval, position: float) -> None:
        self._state.active_event_id = interval.id
        logger.debug("Entered %s at %.3fs.", interval.id, position)
        self._arm_boundary(interval, position)
        if self._on_start is not None:
            self._on_start(interval.id)

    def _leave_active(self) -> None:
        event_id = self._state.active_event_id
        if event_id is None:
            return
        self._state.active_event_id = None
        logger.debug("Left %s.", event_id)
        if self._on_end is not None:
            self._on_end(event_id)

    def _active_interval(self) -> EventInterval | None:
        event_id = self._state.active_event_id
        if event_id is None:
            return None
        found = self._timeline.index.lookup(event_id)
        return found.interval if found is not None else None

    # ── wake-ups ───────────────────────────────────────────────────────
    def _arm_boundary(self, interval: EventInterval, position: float) -> None:
        delay = interval_math.remaining(interval.end, position) + self._slack_seconds
        self._arm(delay)

    def _arm_gap_recheck(self, position: float) -> None:
        if position >= self._timeline.total_length:
            logger.debug("Playhead %.3fs is past the timeline end.", position)
            return
        self._arm(self._gap_recheck_seconds)

    def _arm(self, delay: float) -> None:
        self._cancel_pending()
        generation = self._state.generation
        self._state.pending_timer = self._timers.call_later(
            delay, lambda: self._wake(generation)
        )
        logger.debug("Armed wake-up #%d in %.3fs.", generation, delay)

    def _cancel_pending(self) -> None:
        timer = self._state.pending_timer
        self._state.pending_timer = None
        self._state.generation += 1
        if timer is not None:
            timer.cancel()

    # ── adapter access ─────────────────────────────────────────────────
    def _read_position(self) -> tuple[Segment, float]:
        """Returns the active segment and the absolute playhead."""
        if self._adapter is None:
            self._cancel_pending()
            raise AdapterUnavailableError("No playback adapter is attached.")
        try:
            url = self._adapter.get_active_source_url()
            relative = float(self._adapter.get_position_seconds())
        except Exception as err:
            self._cancel_pending()
            raise AdapterUnavailableError(f"Playback adapter failed: {err}") from err
        segment = self._timeline.segment_for_url(url)
        if segment is None:
            self._cancel_pending()
            raise AdapterUnavailableError(
                f"Active source {url!r} is not part of the timeline."
            )
        position = interval_math.to_absolute(relative, segment.start)
        self._state.segment_index = segment.index
        self._state.last_known_position = position
        return segment, position

