import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from segstitch.config import SchedulerConfig
from segstitch.playback.scheduler import BoundaryScheduler
from segstitch.playback.timers import ManualTimerService
from segstitch.timeline.builder import Timeline
from tests.helpers import SCHEDULER_CONFIG, EventRecorder, segment


@pytest.fixture
def two_event_timeline() -> Timeline:
    """Single 10s segment with ``x`` on [0, 4) and ``y`` on [4, 10)."""
    return Timeline.from_timing_array(
        [segment("a.mp3", 10, x=(0, 4), y=(4, 10))]
    )


@pytest.fixture
def clock() -> ManualTimerService:
    return ManualTimerService()


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def make_scheduler(
    clock: ManualTimerService, recorder: EventRecorder
) -> Callable[..., BoundaryScheduler]:
    """Builds a scheduler on the manual clock that reports into ``recorder``."""

    def _make(
        timeline: Timeline,
        adapter: Any,
        *,
        config: SchedulerConfig = SCHEDULER_CONFIG,
        **kwargs: Any,
    ) -> BoundaryScheduler:
        return BoundaryScheduler(
            timeline,
            adapter,
            clock,
            on_start=recorder.on_start,
            on_end=recorder.on_end,
            config=config,
            **kwargs,
        )

    return _make


@pytest.fixture(autouse=True)
def _silence_halo(monkeypatch):
    """Replace Halo spinners with a no-op context manager for tests."""

    class _DummyHalo:
        def __init__(self, *args, **kwargs):
            self.text = kwargs.get("text")

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

    monkeypatch.setattr("segstitch.utils.timeline_utils.Halo", _DummyHalo)

