"""End-to-end behavior tests for playback sessions."""

import pytest

from segstitch.config import AppConfig, SchedulerConfig
from segstitch.errors import AdapterUnavailableError
from segstitch.playback.scheduler import SchedulerPhase
from segstitch.playback.simulated import SimulatedPlaybackAdapter
from segstitch.playback.timers import ManualTimerService
from segstitch.session import PlaybackSession
from segstitch.timeline.builder import Timeline
from tests.helpers import EventRecorder, FakeAdapter, expected_pairs, segment

SETTINGS = AppConfig(
    scheduler=SchedulerConfig(slack_seconds=0.005, gap_recheck_seconds=0.05)
)


@pytest.fixture
def timeline() -> Timeline:
    return Timeline.from_timing_array(
        [
            segment("a.mp3", 10, x=(0, 4), y=(4, 10)),
            segment("b.mp3", 5, z=(1, 2), w=(2, 4.5)),
        ]
    )


def _simulated_session(timeline: Timeline, recorder: EventRecorder):
    clock = ManualTimerService()
    adapter = SimulatedPlaybackAdapter(timeline, clock)
    session = PlaybackSession(
        timeline,
        adapter,
        timers=clock,
        on_start=recorder.on_start,
        on_end=recorder.on_end,
        settings=SETTINGS,
    )
    adapter.connect(session.handle_signal)
    return session, adapter, clock


def test_full_run_across_segments(timeline, recorder) -> None:
    """Continuous playback crosses segments and notifies every event once."""
    session, adapter, clock = _simulated_session(timeline, recorder)

    adapter.play()
    clock.run_until_idle()

    assert recorder.events == expected_pairs(["x", "y", "z", "w"])
    assert session.phase is SchedulerPhase.IDLE


def test_play_from_event_id_then_continue(timeline, recorder) -> None:
    """Jumping into the second segment plays on from there."""
    session, adapter, clock = _simulated_session(timeline, recorder)

    session.play_from_event_id("z")

    assert session.current_event_id() == "z"
    assert session.current_time() == pytest.approx(11)
    assert adapter.get_active_source_url() == "b.mp3"

    clock.run_until_idle()

    assert recorder.events == expected_pairs(["z", "w"])


def test_pause_and_resume_mid_event(timeline, recorder) -> None:
    """Pausing ends the event; resuming inside it starts it again."""
    session, adapter, clock = _simulated_session(timeline, recorder)
    adapter.play()
    clock.advance(2)

    adapter.pause()
    clock.advance(30)
    adapter.play()

    assert recorder.events == [("start", "x"), ("end", "x"), ("start", "x")]
    assert session.current_time() == pytest.approx(2)


def test_play_from_time_seeks_to_event_start(timeline, recorder) -> None:
    """Playing from a time starts at the containing event."""
    session, adapter, clock = _simulated_session(timeline, recorder)

    session.play_from_time(13.2)

    assert session.current_event_id() == "w"
    assert session.current_time() == pytest.approx(12)


def test_session_without_adapter(timeline) -> None:
    """Signals and playback need an attached adapter."""
    session = PlaybackSession(timeline, timers=ManualTimerService(), settings=SETTINGS)

    with pytest.raises(AdapterUnavailableError):
        session.handle_signal("play")
    with pytest.raises(AdapterUnavailableError):
        session.play_from_event_id("x")

    session.attach_adapter(FakeAdapter(position=5.0))
    session.handle_signal("play")

    assert session.current_event_id() == "y"


def test_attach_adapter_cancels_pending_wakeup(timeline) -> None:
    """Re-binding the adapter drops the previous adapter's wake-up."""
    clock = ManualTimerService()
    session = PlaybackSession(
        timeline, FakeAdapter(position=1.0), timers=clock, settings=SETTINGS
    )
    session.handle_signal("play")

    session.attach_adapter(None)

    assert clock.pending() == []
    assert session.adapter is None


def test_close_cancels_without_notifications(timeline, recorder) -> None:
    """Closing stops the loop silently."""
    session, adapter, clock = _simulated_session(timeline, recorder)
    adapter.play()

    session.close()

    assert clock.pending() == []
    assert recorder.events == [("start", "x")]


def test_jump_from_on_end_skips_the_next_event(timeline) -> None:
    """Jumping away while an event ends wins over the signals it triggers."""
    events: list[tuple[str, str]] = []
    seen: list[str | None] = []
    clock = ManualTimerService()
    adapter = SimulatedPlaybackAdapter(timeline, clock)

    def on_end(event_id: str) -> None:
        events.append(("end", event_id))
        if event_id == "x":
            session.play_from_event_id("z")
            seen.append(session.current_event_id())

    session = PlaybackSession(
        timeline,
        adapter,
        timers=clock,
        on_start=lambda event_id: events.append(("start", event_id)),
        on_end=on_end,
        settings=SETTINGS,
    )
    adapter.connect(session.handle_signal)

    adapter.play()
    clock.run_until_idle()

    assert seen == ["z"]
    assert events == expected_pairs(["x", "z", "w"])
    assert adapter.get_active_source_url() == "b.mp3"
