"""Bar and beat grid enumeration.

Walks the time signature segments overlapping a tick window and yields
the bar and beat lines a timeline ruler or piano roll draws.
"""

from __future__ import annotations

import math
from collections.abc import Iterator

from .models import GridLine
from .time_signature import TimeSignatureMap


def iter_grid_lines(
    time_signature_map: TimeSignatureMap,
    start_tick: float,
    end_tick: float,
    include_beats: bool = True,
) -> Iterator[GridLine]:
    """Yield grid lines with ticks in ``[start_tick, end_tick]``.

    Lines come out in ascending tick order. Each bar contributes its bar
    line (beat 0) and, when ``include_beats`` is set, one line per
    remaining beat of the bar's time signature.

    Args:
        time_signature_map: Map providing the bar structure.
        start_tick: First tick of the window.
        end_tick: Last tick of the window (inclusive).
        include_beats: Whether to yield beat lines as well as bar lines.

    Yields:
        GridLine objects.

    Examples:
        >>> ts_map = TimeSignatureMap()
        >>> [line.tick for line in iter_grid_lines(ts_map, 0, 1920, include_beats=False)]
        [0.0, 1920.0]
    """
    if end_tick < start_tick:
        return

    segments = time_signature_map.segments()
    start_status = time_signature_map.get_meter_status(start_tick)
    end_status = time_signature_map.get_meter_status(end_tick)
    first_visible_bar = math.floor(start_status.bar_index)

    for index in range(start_status.time_signature_index, end_status.time_signature_index + 1):
        segment = segments[index]
        if index + 1 < len(segments):
            next_bar = segments[index + 1].bar_index
        else:
            next_bar = math.floor(end_status.bar_index) + 1

        # The first segment also covers the bars before its own index.
        first_bar = first_visible_bar if index == 0 else max(first_visible_bar, segment.bar_index)

        beat_count = segment.numerator if include_beats else 1
        for bar in range(first_bar, next_bar):
            bar_tick = segment.start_tick + (bar - segment.bar_index) * segment.ticks_per_bar
            for beat in range(beat_count):
                tick = bar_tick + beat * segment.ticks_per_beat
                if tick > end_tick:
                    return
                if tick >= start_tick:
                    yield GridLine(tick=tick, bar_index=bar, beat_index=beat)
