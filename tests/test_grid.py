"""Tests for grid line enumeration."""

from __future__ import annotations

import pytest

from tickline.exceptions import ValidationError
from tickline.grid import iter_grid_lines
from tickline.time_signature import TimeSignatureMap


def _lines(ts_map: TimeSignatureMap, start: float, end: float, beats: bool = True) -> list:
    return [
        (line.tick, line.bar_index, line.beat_index)
        for line in iter_grid_lines(ts_map, start, end, beats)
    ]


class TestIterGridLines:
    """Tests for iter_grid_lines."""

    def test_bars_only(self) -> None:
        """Bar lines in 4/4 every 1920 ticks."""
        ts_map = TimeSignatureMap(tpqn=480)

        assert _lines(ts_map, 0, 5760, beats=False) == [
            (0, 0, 0),
            (1920, 1, 0),
            (3840, 2, 0),
            (5760, 3, 0),
        ]

    def test_beats_within_window(self) -> None:
        """Beat lines are clipped to the window."""
        ts_map = TimeSignatureMap(tpqn=480)

        assert _lines(ts_map, 1000, 2500) == [
            (1440, 0, 3),
            (1920, 1, 0),
            (2400, 1, 1),
        ]

    def test_crosses_time_signature_change(self) -> None:
        """Lines switch spacing at a time signature change."""
        ts_map = TimeSignatureMap(tpqn=480)
        ts_map.add_time_signature(0, 2, 4)
        ts_map.add_time_signature(1, 3, 8)

        assert _lines(ts_map, 0, 1920) == [
            (0, 0, 0),
            (480, 0, 1),
            (960, 1, 0),
            (1200, 1, 1),
            (1440, 1, 2),
            (1680, 2, 0),
            (1920, 2, 1),
        ]

    def test_ticks_ascending(self) -> None:
        """Lines always come out in ascending order."""
        ts_map = TimeSignatureMap(tpqn=480)
        ts_map.add_time_signature(0, 5, 4)
        ts_map.add_time_signature(3, 7, 8)
        ts_map.add_time_signature(5, 4, 4)

        ticks = [line[0] for line in _lines(ts_map, 0, 30000)]

        assert ticks == sorted(ticks)
        assert len(ticks) == len(set(ticks))

    def test_first_segment_extends_before_its_bar(self) -> None:
        """Bars before the first event are drawn with its signature."""
        ts_map = TimeSignatureMap(tpqn=480)
        ts_map.add_time_signature(2, 3, 4)

        assert _lines(ts_map, 0, 2880, beats=False) == [
            (0, 0, 0),
            (1440, 1, 0),
            (2880, 2, 0),
        ]

    def test_negative_window(self) -> None:
        """Windows reaching before tick 0 give negative bars."""
        ts_map = TimeSignatureMap(tpqn=480)

        assert _lines(ts_map, -1920, 0, beats=False) == [(-1920, -1, 0), (0, 0, 0)]

    def test_empty_window(self) -> None:
        """An inverted window yields nothing."""
        ts_map = TimeSignatureMap(tpqn=480)

        assert _lines(ts_map, 100, 0) == []

    def test_rejected_numerator_edit_keeps_grid_drawable(self) -> None:
        """A fractional numerator is refused, so the grid still renders."""
        ts_map = TimeSignatureMap(tpqn=480)
        ts = ts_map.add_time_signature(0, 4, 4)

        with pytest.raises(ValidationError):
            ts.numerator.value = 3.5

        assert _lines(ts_map, 0, 1920) == [
            (0, 0, 0),
            (480, 0, 1),
            (960, 0, 2),
            (1440, 0, 3),
            (1920, 1, 0),
        ]
