"""Tests for project file reading and writing."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tickline.config import TimelineConfig
from tickline.exceptions import ParseError
from tickline.models import PartInfo, ProjectInfo, TempoInfo, TimeSignatureInfo, TrackInfo
from tickline.project import Project
from tickline.storage import load_project, read_project_info, save_project


def write_project(tmp_path: Path, content: str) -> Path:
    """Write a project file with the given raw content."""
    path = tmp_path / "song.json"
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadProject:
    """Tests for reading project files."""

    def test_loads_valid_project(self, tmp_path: Path) -> None:
        """A well-formed file yields a working project."""
        path = write_project(
            tmp_path,
            json.dumps(
                {
                    "tempos": [{"pos": 0, "bpm": 120}, {"pos": 1920, "bpm": 60}],
                    "time_signatures": [{"bar_index": 0, "numerator": 4, "denominator": 4}],
                    "tracks": [{"name": "Keys", "parts": [{"start_pos": 0, "end_pos": 960}]}],
                }
            ),
        )

        project = load_project(path)

        assert project.tempo_map.get_time(3840) == pytest.approx(6.0)
        assert project.tracks[0].name.value == "Keys"

    def test_applies_config(self, tmp_path: Path) -> None:
        """The given config sets the project resolution."""
        path = write_project(tmp_path, "{}")

        project = load_project(path, TimelineConfig(ticks_per_quarter_note=96))

        assert project.tempo_map.tpqn == 96

    def test_missing_lists_use_config_defaults(self, tmp_path: Path) -> None:
        """A file without tempos or time signatures takes them from the config."""
        path = write_project(tmp_path, json.dumps({"tracks": []}))
        config = TimelineConfig(default_bpm=60.0, default_time_signature=(3, 4))

        project = load_project(path, config)

        assert project.tempo_map.get_time(480) == pytest.approx(1.0)
        assert project.time_signature_map.get_tick_by_bar_index(1) == 1440

    def test_fractional_numerator(self, tmp_path: Path) -> None:
        """A fractional numerator is reported instead of truncated."""
        path = write_project(
            tmp_path,
            json.dumps({"time_signatures": [{"bar_index": 0, "numerator": 3.5, "denominator": 4}]}),
        )

        with pytest.raises(ParseError):
            load_project(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ParseError."""
        with pytest.raises(ParseError, match="not found"):
            load_project(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Broken JSON raises ParseError."""
        path = write_project(tmp_path, "{not json")

        with pytest.raises(ParseError, match="Invalid JSON"):
            load_project(path)

    def test_missing_field(self, tmp_path: Path) -> None:
        """A record without a required field raises ParseError."""
        path = write_project(tmp_path, '{"tempos": [{"pos": 0}]}')

        with pytest.raises(ParseError, match="missing field"):
            read_project_info(path)

    def test_wrong_structure(self, tmp_path: Path) -> None:
        """A non-object document raises ParseError."""
        path = write_project(tmp_path, "[1, 2, 3]")

        with pytest.raises(ParseError):
            read_project_info(path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        """A non-positive BPM is reported as ParseError."""
        path = write_project(tmp_path, '{"tempos": [{"pos": 0, "bpm": 0}]}')

        with pytest.raises(ParseError, match="Invalid value"):
            load_project(path)


class TestSaveProject:
    """Tests for writing project files."""

    def test_round_trip(self, tmp_path: Path) -> None:
        """A saved project loads back identically."""
        info = ProjectInfo(
            tempos=(TempoInfo(0, 100), TempoInfo(3840, 150)),
            time_signatures=(TimeSignatureInfo(0, 4, 4), TimeSignatureInfo(4, 7, 8)),
            tracks=(TrackInfo(name="Pad", parts=(PartInfo(0, 7680, "A"),)),),
        )
        path = tmp_path / "out.json"

        assert save_project(path, Project(info)) is True
        assert read_project_info(path) == info

    def test_unwritable_path(self, tmp_path: Path) -> None:
        """Write failures are reported, not raised."""
        assert save_project(tmp_path / "missing" / "out.json", Project()) is False
