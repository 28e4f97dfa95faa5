"""Output formatting for tickline.

Pure functions for turning timeline positions into display strings.
These functions have no side effects and are easily testable.
"""

from __future__ import annotations

from .project import Project


def format_time(seconds: float) -> str:
    """Format seconds as M:SS.s or MM:SS.s.

    Negative times get a leading minus sign.

    Args:
        seconds: Time in seconds to format.

    Returns:
        Formatted time string.

    Examples:
        >>> format_time(11.67)
        '0:11.7'
        >>> format_time(125.3)
        '2:05.3'
        >>> format_time(-1.5)
        '-0:01.5'
    """
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)
    minutes = int(seconds // 60)
    remaining_seconds = seconds - (minutes * 60)
    return f"{sign}{minutes}:{remaining_seconds:04.1f}"


def format_bar_beat(bar_index: int, beat: float) -> str:
    """Format a zero-based bar and beat as 1-based ``bar:beat``.

    Fractional beats keep up to two decimals.

    Examples:
        >>> format_bar_beat(0, 0.0)
        '1:1'
        >>> format_bar_beat(1, 2.5)
        '2:3.5'
    """
    beat_str = f"{beat + 1:.2f}".rstrip("0").rstrip(".")
    return f"{bar_index + 1}:{beat_str}"


def format_conversion_table(project: Project, ticks: list[float]) -> str:
    """Format tick conversions as a markdown table.

    Args:
        project: Project providing tempo and time signature maps.
        ticks: Tick positions to convert.

    Returns:
        Markdown table with Tick, Time, Bar:Beat and BPM columns.
    """
    lines = [
        "| Tick | Time | Bar:Beat | BPM |",
        "|------|------|----------|-----|",
    ]
    for tick in ticks:
        seconds = project.tempo_map.get_time(tick)
        bar, beat = project.time_signature_map.get_bar_and_beat(tick)
        bpm = project.tempo_map.get_bpm_at(tick)
        lines.append(
            f"| {tick:g} | {format_time(seconds)} | {format_bar_beat(bar, beat)} | {bpm:g} |"
        )
    return "\n".join(lines)
