"""Host-facing playback adapter contract and the signals it delivers."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol, runtime_checkable


@runtime_checkable
class PlaybackAdapter(Protocol):
    """Narrow capability over one concrete media element.

    Positions are relative to the adapter's active source, never absolute.
    """

    def get_position_seconds(self) -> float:
        """Current playback offset inside the active source."""
        ...

    def get_active_source_url(self) -> str:
        """Url of the source currently loaded."""
        ...

    def set_active_source(self, url: str) -> None:
        """Loads another source."""
        ...

    def seek_to(self, relative_seconds: float) -> None:
        """Moves the playhead inside the active source."""
        ...

    def play(self) -> None:
        """Starts or resumes playback."""
        ...

    def pause(self) -> None:
        """Pauses playback."""
        ...


class PlaybackSignal(StrEnum):
    """Playback notifications the host forwards from its media element."""

    PLAY = "play"
    PLAYING = "playing"
    SEEKED = "seeked"
    PAUSE = "pause"
    SUSPEND = "suspend"
    ABORT = "abort"

    @property
    def resumes(self) -> bool:
        """Whether this signal (re)starts boundary watching."""
        return self in _RESUME_SIGNALS


_RESUME_SIGNALS = frozenset(
    {PlaybackSignal.PLAY, PlaybackSignal.PLAYING, PlaybackSignal.SEEKED}
)
