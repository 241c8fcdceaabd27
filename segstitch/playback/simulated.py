"""Deterministic playback adapter running on a virtual clock."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

from segstitch.domain import Segment
from segstitch.playback.adapter import PlaybackSignal
from segstitch.playback.timers import ManualTimerService
from segstitch.timeline.builder import Timeline

SignalSink: TypeAlias = Callable[[PlaybackSignal], None]


class SimulatedPlaybackAdapter:
    """Plays a stitched timeline continuously on a ``ManualTimerService`` clock.

    The playhead advances with the clock while playing and stops at the end of
    the timeline. When it crosses into the next segment the active source
    switches the way a host playlist would. Commands are recorded in
    ``commands`` and, once a sink is connected, ``play``/``pause``/``seek_to``
    deliver the matching signals synchronously.
    """

    def __init__(
        self,
        timeline: Timeline,
        clock: ManualTimerService,
    ) -> None:
        if not timeline.segments:
            raise ValueError("Cannot simulate playback of an empty timeline.")
        self._timeline = timeline
        self._clock = clock
        self._playing = False
        self._anchor_position = 0.0
        self._anchor_time = clock.now
        self._loaded: Segment = timeline.segment_at(0)
        self._sink: SignalSink | None = None
        self.commands: list[tuple[str, object]] = []

    def connect(self, sink: SignalSink | None) -> None:
        """Routes playback signals to ``sink`` (usually a session or scheduler)."""
        self._sink = sink

    @property
    def playing(self) -> bool:
        return self._playing

    def absolute_position(self) -> float:
        """Virtual playhead in absolute timeline seconds."""
        position = self._anchor_position
        if self._playing:
            position += self._clock.now - self._anchor_time
        return min(position, self._timeline.total_length)

    def _current_segment(self) -> Segment:
        position = self.absolute_position()
        if self._playing and not self._loaded.start <= position < self._loaded.end:
            following = self._timeline.locator.segment_for(position)
            self._loaded = following or self._timeline.segment_at(-1)
        return self._loaded

    def _reanchor(self, position: float) -> None:
        self._anchor_position = position
        self._anchor_time = self._clock.now

    def _emit(self, signal: PlaybackSignal) -> None:
        if self._sink is not None:
            self._sink(signal)

    # ── PlaybackAdapter ────────────────────────────────────────────────
    def get_position_seconds(self) -> float:
        segment = self._current_segment()
        position = self.absolute_position()
        if position >= segment.end:
            # Ended media reports its full duration.
            return segment.length
        return position - segment.start

    def get_active_source_url(self) -> str:
        return self._current_segment().url

    def set_active_source(self, url: str) -> None:
        self.commands.append(("set_active_source", url))
        segment = self._timeline.segment_for_url(url)
        if segment is None:
            raise ValueError(f"Unknown source {url!r}.")
        self._loaded = segment
        self._reanchor(segment.start)

    def seek_to(self, relative_seconds: float) -> None:
        self.commands.append(("seek_to", relative_seconds))
        self._reanchor(self._loaded.start + relative_seconds)
        self._emit(PlaybackSignal.SEEKED)

    def play(self) -> None:
        self.commands.append(("play", None))
        if self._playing:
            return
        self._reanchor(self.absolute_position())
        self._playing = True
        self._emit(PlaybackSignal.PLAY)

    def pause(self) -> None:
        self.commands.append(("pause", None))
        if not self._playing:
            return
        self._reanchor(self.absolute_position())
        self._playing = False
        self._emit(PlaybackSignal.PAUSE)
