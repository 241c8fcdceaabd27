"""Behavior tests for translating play requests into adapter commands."""

import pytest

from segstitch.errors import (
    AdapterUnavailableError,
    TimeOutOfRangeError,
    UnknownEventIdError,
)
from segstitch.playback.controller import PlaybackController
from segstitch.playback.scheduler import SchedulerPhase
from segstitch.timeline.builder import Timeline
from tests.helpers import FakeAdapter, segment


@pytest.fixture
def stitched() -> Timeline:
    return Timeline.from_timing_array(
        [
            segment("a.mp3", 5, x=(0, 4)),
            segment("b.mp3", 5, z=(1, 2), w=(3, 5)),
        ]
    )


def test_play_from_event_id_loads_seeks_and_plays(
    stitched, make_scheduler, recorder
) -> None:
    """A different source is loaded, then seeked to the relative start."""
    adapter = FakeAdapter(url="a.mp3")
    scheduler = make_scheduler(stitched, adapter)
    controller = PlaybackController(stitched, scheduler)

    found = controller.play_from_event_id("z")

    assert (found.interval.start, found.interval.end) == (6, 7)
    assert adapter.calls == [
        ("pause", None),
        ("set_active_source", "b.mp3"),
        ("seek_to", 1),
        ("play", None),
    ]
    assert controller.current_event_id() == "z"
    assert scheduler.phase is SchedulerPhase.WATCHING
    assert recorder.events == [("start", "z")]


def test_play_from_event_id_keeps_loaded_source(stitched, make_scheduler) -> None:
    """No reload happens when the adapter already holds the segment."""
    adapter = FakeAdapter(url="b.mp3", position=0.2)
    controller = PlaybackController(stitched, make_scheduler(stitched, adapter))

    controller.play_from_event_id("w")

    assert ("set_active_source", "b.mp3") not in adapter.calls
    assert ("seek_to", 3) in adapter.calls


def test_current_event_switches_eagerly_while_watching(
    stitched, make_scheduler, recorder
) -> None:
    """Jumping away from a watched event ends it and starts the target."""
    adapter = FakeAdapter(url="a.mp3", position=1.0)
    scheduler = make_scheduler(stitched, adapter)
    scheduler.resume()
    controller = PlaybackController(stitched, scheduler)

    controller.play_from_event_id("w")

    assert controller.current_event_id() == "w"
    assert recorder.events == [("start", "x"), ("end", "x"), ("start", "w")]
    assert controller.current_time() == 8


def test_play_from_time_resolves_event(stitched, make_scheduler) -> None:
    """A time inside an event starts playback at that event's start."""
    adapter = FakeAdapter(url="a.mp3")
    controller = PlaybackController(stitched, make_scheduler(stitched, adapter))

    found = controller.play_from_time(6.5)

    assert found.interval.id == "z"
    assert adapter.position == 1


@pytest.mark.parametrize("t", [4.5, 7.5, 10.0, -1.0])
def test_play_from_time_out_of_range(stitched, make_scheduler, t) -> None:
    """Gaps and times outside the timeline raise TimeOutOfRangeError."""
    adapter = FakeAdapter(url="a.mp3")
    controller = PlaybackController(stitched, make_scheduler(stitched, adapter))

    with pytest.raises(TimeOutOfRangeError):
        controller.play_from_time(t)
    assert adapter.calls == []


def test_unknown_event_id(stitched, make_scheduler) -> None:
    """Unknown ids raise before touching the adapter."""
    adapter = FakeAdapter()
    controller = PlaybackController(stitched, make_scheduler(stitched, adapter))

    with pytest.raises(UnknownEventIdError):
        controller.play_from_event_id("nope")
    assert adapter.calls == []


def test_adapter_errors_are_typed(stitched, make_scheduler, recorder) -> None:
    """Adapter failures surface as AdapterUnavailableError."""
    adapter = FakeAdapter()
    adapter.error = ConnectionError("gone")
    controller = PlaybackController(stitched, make_scheduler(stitched, adapter))

    with pytest.raises(AdapterUnavailableError):
        controller.play_from_event_id("x")
    assert recorder.events == []

    controller = PlaybackController(stitched, make_scheduler(stitched, None))
    with pytest.raises(AdapterUnavailableError):
        controller.play_from_event_id("x")
