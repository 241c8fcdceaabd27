"""
Timeline Utility Functions for segstitch

This module loads and saves timing files and renders a stitched timeline as a
colored terminal table.

Functions:
    - load_timing_file: Reads segment definitions from a JSON file.
    - save_timing_file: Writes segment definitions to a JSON file.
    - color_txt: Colorizes a string.
    - format_timeline_rows: Builds the table rows for a timeline.
    - print_timeline: Prints the timeline table.
"""

import json
import logging
from pathlib import Path
from typing import Any

from colored import attr, bg, fg
from halo import Halo

from segstitch.errors import MalformedInputError
from segstitch.timeline.builder import Timeline
from segstitch.utils.logger import get_logger
from segstitch.utils.time_format import format_time

logger: logging.Logger = get_logger(__name__)


def load_timing_file(file_name: str | Path) -> list[dict[str, Any]]:
    """
    Reads segment definitions from a JSON timing file.

    Arguments:
        file_name (str | Path): File holding one segment object or a list of them.

    Returns:
        list[dict[str, Any]]: The segment definitions in file order.
    """
    path = Path(file_name)
    logger.info(msg=f"Loading timing file {path}.")
    with Halo(text=f"Loading {path.name}", spinner="dots", text_color="green"):
        try:
            with open(path, mode="r", encoding="utf-8") as file:
                payload = json.load(file)
        except json.JSONDecodeError as err:
            raise MalformedInputError(f"{path} is not valid JSON: {err}") from err

    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        raise MalformedInputError(
            f"{path} must hold a segment object or a list of them."
        )
    logger.debug(msg=f"Read {len(payload)} segment definitions from {path}.")
    return payload


def save_timing_file(definitions: list[dict[str, Any]], file_name: str | Path) -> Path:
    """
    Writes segment definitions to a JSON timing file.

    Arguments:
        definitions (list[dict[str, Any]]): Definitions, e.g. ``Timeline.to_timing_array()``.
        file_name (str | Path): Destination path.

    Returns:
        Path: The path written.
    """
    path = Path(file_name)
    with Halo(text=f"Saving timing to {path}", spinner="dots", text_color="green"):
        with open(path, mode="w", encoding="utf-8") as file:
            json.dump(definitions, file, indent=2)
            file.write("\n")
    logger.info(msg=f"Timing for {len(definitions)} segments saved to {path}")
    return path


def color_txt(
    string: str, fg_color: str, bg_color: str, padding: int = 0
) -> str:
    """
    Colorizes a string.

    Arguments:
        string (str): String to be colorized.
        fg_color (str): Foreground color.
        bg_color (str): Background color.
        padding (int, optional): Width to left-justify to before coloring.

    Returns:
        str: Colorized string.
    """
    if padding:
        string = string.ljust(padding)

    return f"{fg(fg_color)}{bg(bg_color)}{string}{attr('reset')}"


def format_timeline_rows(
    timeline: Timeline, precision: int = 2
) -> list[tuple[str, str, str, str]]:
    """
    Builds one ``(start, end, event, source)`` row per event interval.

    Arguments:
        timeline (Timeline): Timeline to render.
        precision (int, optional): Fractional digits of the time columns.

    Returns:
        list[tuple[str, str, str, str]]: Rows in timeline order.
    """
    return [
        (
            format_time(interval.start, precision),
            format_time(interval.end, precision),
            interval.id,
            timeline.segment_at(interval.segment_index).url,
        )
        for interval in timeline.intervals
    ]


def print_timeline(
    timeline: Timeline, *, use_color: bool = True, precision: int = 2
) -> None:
    """
    Prints the stitched timeline as a table.

    Arguments:
        timeline (Timeline): Timeline to print.
        use_color (bool, optional): Colorize the header, by default True.
        precision (int, optional): Fractional digits of the time columns.
    """
    rows = format_timeline_rows(timeline, precision)
    logger.info(msg=f"Printing timeline with {len(rows)} entries.")
    headers = ("Start", "End", "Event", "Source")
    widths = [
        max([len(header)] + [len(row[column]) for row in rows])
        for column, header in enumerate(headers)
    ]

    header_colors = ("green", "green", "yellow", "blue")
    if use_color:
        print(
            " ".join(
                color_txt(header, "black", color, width)
                for header, color, width in zip(headers, header_colors, widths)
            )
        )
    else:
        print(" ".join(header.ljust(width) for header, width in zip(headers, widths)))

    for row in rows:
        print(" ".join(cell.ljust(width) for cell, width in zip(row, widths)))

    total = format_time(timeline.total_length, precision)
    print(f"{len(timeline.segments)} segments, {len(rows)} events, total {total}")
