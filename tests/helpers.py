"""Shared test doubles and builders."""

from collections.abc import Sequence
from typing import Any

from segstitch.config import SchedulerConfig


def segment(url: str, length: float, **times: tuple[float, float]) -> dict[str, Any]:
    """Builds one ingestion-format segment definition."""
    return {
        "url": url,
        "length_seconds": length,
        "times": {
            event_id: {"start": start, "end": end}
            for event_id, (start, end) in times.items()
        },
    }


class FakeAdapter:
    """Playback adapter whose position is set directly by the test."""

    def __init__(self, url: str = "a.mp3", position: float = 0.0) -> None:
        self.url = url
        self.position = position
        self.error: Exception | None = None
        self.calls: list[tuple[str, object]] = []

    def _check(self) -> None:
        if self.error is not None:
            raise self.error

    def get_position_seconds(self) -> float:
        self._check()
        return self.position

    def get_active_source_url(self) -> str:
        self._check()
        return self.url

    def set_active_source(self, url: str) -> None:
        self._check()
        self.calls.append(("set_active_source", url))
        self.url = url
        self.position = 0.0

    def seek_to(self, relative_seconds: float) -> None:
        self._check()
        self.calls.append(("seek_to", relative_seconds))
        self.position = relative_seconds

    def play(self) -> None:
        self._check()
        self.calls.append(("play", None))

    def pause(self) -> None:
        self._check()
        self.calls.append(("pause", None))


class EventRecorder:
    """Collects start/end notifications in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []

    def on_start(self, event_id: str) -> None:
        self.events.append(("start", event_id))

    def on_end(self, event_id: str) -> None:
        self.events.append(("end", event_id))


SCHEDULER_CONFIG = SchedulerConfig(slack_seconds=0.005, gap_recheck_seconds=0.25)


def expected_pairs(event_ids: Sequence[str]) -> list[tuple[str, str]]:
    """Start/end pairs for a run that traverses ``event_ids`` in order."""
    return [
        pair
        for event_id in event_ids
        for pair in (("start", event_id), ("end", event_id))
    ]
