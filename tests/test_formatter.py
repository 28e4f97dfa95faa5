"""Tests for output formatting."""

from __future__ import annotations

from tickline.formatter import format_bar_beat, format_conversion_table, format_time
from tickline.models import ProjectInfo, TempoInfo, TimeSignatureInfo
from tickline.project import Project


class TestFormatTime:
    """Tests for format_time."""

    def test_seconds_only(self) -> None:
        assert format_time(11.67) == "0:11.7"

    def test_minutes(self) -> None:
        assert format_time(65.5) == "1:05.5"
        assert format_time(125.3) == "2:05.3"

    def test_negative(self) -> None:
        assert format_time(-1.5) == "-0:01.5"


class TestFormatBarBeat:
    """Tests for format_bar_beat."""

    def test_one_based(self) -> None:
        """Zero-based input is shown one-based."""
        assert format_bar_beat(0, 0) == "1:1"
        assert format_bar_beat(3, 2) == "4:3"

    def test_fractional_beat(self) -> None:
        assert format_bar_beat(1, 2.5) == "2:3.5"
        assert format_bar_beat(0, 0.25) == "1:1.25"


class TestFormatConversionTable:
    """Tests for format_conversion_table."""

    def test_table(self) -> None:
        """Rows show time, bar:beat and BPM per tick."""
        project = Project(
            ProjectInfo(
                tempos=(TempoInfo(0, 120), TempoInfo(1920, 60)),
                time_signatures=(TimeSignatureInfo(0, 4, 4),),
            )
        )

        table = format_conversion_table(project, [0, 2880, 3840])

        assert table.splitlines() == [
            "| Tick | Time | Bar:Beat | BPM |",
            "|------|------|----------|-----|",
            "| 0 | 0:00.0 | 1:1 | 120 |",
            "| 2880 | 0:04.0 | 2:3 | 60 |",
            "| 3840 | 0:06.0 | 3:1 | 60 |",
        ]
