"""
segstitch command line

Loads a timing file, stitches its segments into one timeline and prints it.

Usage:
    segstitch TIMING_FILE                 print the stitched timeline
    segstitch TIMING_FILE --locate 0:07   show the event and segment at a time
    segstitch TIMING_FILE --export URL    print one segment's timing JSON
    segstitch TIMING_FILE --simulate      replay the timeline on a virtual clock
"""

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

from segstitch.config import AppConfig, reload_settings
from segstitch.errors import (
    DuplicateEventIdError,
    MalformedInputError,
    UnknownSegmentError,
)
from segstitch.playback.simulated import SimulatedPlaybackAdapter
from segstitch.playback.timers import ManualTimerService
from segstitch.session import PlaybackSession
from segstitch.timeline.builder import Timeline
from segstitch.utils.logger import configure_logging, get_logger
from segstitch.utils.time_format import format_time, to_seconds
from segstitch.utils.timeline_utils import color_txt, load_timing_file, print_timeline

logger: logging.Logger = get_logger("segstitch")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="segstitch",
        description="Stitch media segments into one timed-event timeline",
    )
    parser.add_argument(
        "timing_file",
        type=str,
        help="JSON file with one segment definition or a list of them",
    )
    parser.add_argument(
        "--locate",
        type=str,
        metavar="TIME",
        help="Absolute time (seconds or HH:MM:SS) to resolve to an event",
    )
    parser.add_argument(
        "--export",
        type=str,
        metavar="URL",
        help="Print the timing definition of the segment with this url",
    )
    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Play the whole timeline on a virtual clock and print notifications",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip malformed segments instead of stopping at the first one",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (overrides LOG_LEVEL)",
    )
    return parser


def main() -> None:
    """
    Main function to handle the command line interface logic.
    """
    load_dotenv()
    args: argparse.Namespace = _build_parser().parse_args()
    configure_logging(args.log_level)
    settings: AppConfig = reload_settings()
    use_color: bool = settings.display.use_color and not args.no_color
    precision: int = settings.display.time_precision

    try:
        definitions = load_timing_file(args.timing_file)
    except (OSError, MalformedInputError) as err:
        logger.error(msg=f"Unable to load {args.timing_file}: {err}")
        sys.exit(1)

    timeline = Timeline()
    try:
        rejections = timeline.extend(definitions, strict=not args.lenient)
    except (MalformedInputError, DuplicateEventIdError) as err:
        logger.error(msg=f"Rejected timing file {args.timing_file}: {err}")
        sys.exit(1)
    if rejections:
        logger.warning(
            "Skipped %d of %d segment definitions.", len(rejections), len(definitions)
        )

    print_timeline(timeline, use_color=use_color, precision=precision)

    if args.locate is not None:
        if not _print_location(timeline, args.locate, precision):
            sys.exit(1)

    if args.export is not None:
        try:
            exported = timeline.get_timing_array(args.export)
        except UnknownSegmentError as err:
            logger.error(msg=str(err))
            sys.exit(1)
        print(json.dumps(exported, indent=2))

    if args.simulate:
        _run_simulation(timeline, settings, use_color=use_color)


def _print_location(timeline: Timeline, raw_time: str, precision: int) -> bool:
    """Prints what lies at ``raw_time``; returns False when nothing does."""
    try:
        absolute = to_seconds(raw_time)
    except MalformedInputError as err:
        logger.error(msg=str(err))
        return False

    segment = timeline.locator.segment_for(absolute)
    if segment is None:
        logger.error("%s is outside the timeline.", raw_time)
        return False
    interval = timeline.locator.locate(absolute)
    relative = absolute - segment.start
    where = (
        f"{format_time(absolute, precision)} -> {segment.url} "
        f"@ {format_time(relative, precision)}"
    )
    if interval is None:
        following = timeline.locator.next_interval_after(absolute)
        suffix = f", next event {following.id}" if following is not None else ""
        print(f"{where}: between events{suffix}")
    else:
        print(f"{where}: event {interval.id}")
    return True


def _run_simulation(
    timeline: Timeline, settings: AppConfig, *, use_color: bool
) -> None:
    """Replays the timeline through the boundary scheduler on a virtual clock."""
    if not timeline.segments:
        logger.warning("Nothing to simulate: the timeline is empty.")
        return
    precision = settings.display.time_precision
    clock = ManualTimerService()
    adapter = SimulatedPlaybackAdapter(timeline, clock)

    def _report(kind: str, color: str, event_id: str) -> None:
        stamp = format_time(adapter.absolute_position(), precision)
        label = color_txt(kind, "black", color, 5) if use_color else kind.ljust(5)
        print(f"{stamp} {label} {event_id}")

    session = PlaybackSession(
        timeline,
        adapter,
        timers=clock,
        on_start=lambda event_id: _report("start", "green", event_id),
        on_end=lambda event_id: _report("end", "red", event_id),
        settings=settings,
    )
    adapter.connect(session.handle_signal)
    adapter.play()
    wakeups = clock.run_until_idle()
    session.close()
    logger.info("Simulation finished after %d wake-ups.", wakeups)


if __name__ == "__main__":
    main()
