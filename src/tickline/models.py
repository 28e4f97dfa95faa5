"""Domain models for tickline.

Two families of types live here:

* Immutable info records (``TempoInfo``, ``PartInfo``, ...) used to
  persist and restore a project. They convert to and from plain
  dictionaries for JSON serialization.
* Live, editable entities (``Tempo``, ``TimeSignature``, ``Part``)
  whose fields are ``DataProperty`` cells. Their values are validated
  on creation and on every mutation, so an ordered list never holds
  an entity that would break the mapping math.

Positions are measured in ticks from the project start.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from .config import DEFAULT_BPM, DEFAULT_TIME_SIGNATURE, TimelineConfig
from .exceptions import ValidationError
from .properties import DataProperty


def _require_dict(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"Expected dict, got {type(data).__name__}")
    return data


@dataclass(frozen=True)
class TempoInfo:
    """Persisted form of a tempo event.

    Attributes:
        pos: Tick position where the tempo starts.
        bpm: Quarter notes per minute from ``pos`` on.
    """

    pos: float
    bpm: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"pos": self.pos, "bpm": self.bpm}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TempoInfo:
        """Create from dictionary (parsed JSON)."""
        data = _require_dict(data)
        return cls(pos=float(data["pos"]), bpm=float(data["bpm"]))


@dataclass(frozen=True)
class TimeSignatureInfo:
    """Persisted form of a time signature event.

    Attributes:
        bar_index: Zero-based bar where the signature starts.
        numerator: Beats per bar.
        denominator: Note value of one beat (4 = quarter note).
    """

    bar_index: int
    numerator: int
    denominator: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "bar_index": self.bar_index,
            "numerator": self.numerator,
            "denominator": self.denominator,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimeSignatureInfo:
        """Create from dictionary (parsed JSON)."""
        data = _require_dict(data)
        return cls(
            bar_index=_as_integer("Bar index", data["bar_index"]),
            numerator=_as_integer("Numerator", data["numerator"]),
            denominator=_as_integer("Denominator", data["denominator"]),
        )


@dataclass(frozen=True)
class PartInfo:
    """Persisted form of a part (an editable region on a track).

    Attributes:
        start_pos: Start tick.
        end_pos: End tick, never before ``start_pos``.
        name: Display name.
    """

    start_pos: float
    end_pos: float
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"start_pos": self.start_pos, "end_pos": self.end_pos, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PartInfo:
        """Create from dictionary (parsed JSON)."""
        data = _require_dict(data)
        return cls(
            start_pos=float(data["start_pos"]),
            end_pos=float(data["end_pos"]),
            name=str(data.get("name", "")),
        )


@dataclass(frozen=True)
class TrackInfo:
    """Persisted form of a track and its parts."""

    name: str = ""
    mute: bool = False
    solo: bool = False
    gain: float = 0.0
    pan: float = 0.0
    parts: tuple[PartInfo, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "mute": self.mute,
            "solo": self.solo,
            "gain": self.gain,
            "pan": self.pan,
            "parts": [part.to_dict() for part in self.parts],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TrackInfo:
        """Create from dictionary (parsed JSON)."""
        data = _require_dict(data)
        return cls(
            name=str(data.get("name", "")),
            mute=bool(data.get("mute", False)),
            solo=bool(data.get("solo", False)),
            gain=float(data.get("gain", 0.0)),
            pan=float(data.get("pan", 0.0)),
            parts=tuple(PartInfo.from_dict(p) for p in data.get("parts", [])),
        )


def _default_tempos(config: TimelineConfig | None = None) -> tuple[TempoInfo, ...]:
    bpm = config.default_bpm if config is not None else DEFAULT_BPM
    return (TempoInfo(pos=0.0, bpm=float(bpm)),)


def _default_time_signatures(
    config: TimelineConfig | None = None,
) -> tuple[TimeSignatureInfo, ...]:
    numerator, denominator = (
        config.default_time_signature if config is not None else DEFAULT_TIME_SIGNATURE
    )
    return (TimeSignatureInfo(bar_index=0, numerator=numerator, denominator=denominator),)


@dataclass(frozen=True)
class ProjectInfo:
    """Persisted form of a whole project.

    A fresh project starts with one tempo at tick 0 and one time
    signature at bar 0. Use ``for_config`` to take those two events from
    a ``TimelineConfig`` instead of the built-in 120 BPM and 4/4.
    """

    tempos: tuple[TempoInfo, ...] = field(default_factory=_default_tempos)
    time_signatures: tuple[TimeSignatureInfo, ...] = field(
        default_factory=_default_time_signatures
    )
    tracks: tuple[TrackInfo, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "tempos": [tempo.to_dict() for tempo in self.tempos],
            "time_signatures": [ts.to_dict() for ts in self.time_signatures],
            "tracks": [track.to_dict() for track in self.tracks],
        }

    @classmethod
    def for_config(cls, config: TimelineConfig) -> ProjectInfo:
        """Create an empty project using the configured default tempo and meter."""
        return cls(
            tempos=_default_tempos(config),
            time_signatures=_default_time_signatures(config),
        )

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], config: TimelineConfig | None = None
    ) -> ProjectInfo:
        """Create from dictionary (parsed JSON).

        Missing tempo or time signature lists fall back to the defaults,
        taken from ``config`` when one is given.

        Raises:
            TypeError: If data (or a nested record) is not a dictionary.
            KeyError: If a nested record lacks a required field.
            ValueError: If a field cannot be converted to a number.
        """
        data = _require_dict(data)
        tempos = data.get("tempos")
        time_signatures = data.get("time_signatures")
        return cls(
            tempos=(
                tuple(TempoInfo.from_dict(t) for t in tempos)
                if tempos is not None
                else _default_tempos(config)
            ),
            time_signatures=(
                tuple(TimeSignatureInfo.from_dict(ts) for ts in time_signatures)
                if time_signatures is not None
                else _default_time_signatures(config)
            ),
            tracks=tuple(TrackInfo.from_dict(t) for t in data.get("tracks", [])),
        )


@dataclass(frozen=True)
class MeterStatus:
    """Where a tick falls in the bar structure.

    Attributes:
        time_signature_index: Index of the governing time signature event.
        bar_index: Fractional zero-based bar position. The integer part is
            the bar; the fraction is the progress through that bar.
    """

    time_signature_index: int
    bar_index: float


@dataclass(frozen=True)
class GridLine:
    """A bar or beat line on the timeline grid.

    Attributes:
        tick: Tick position of the line.
        bar_index: Zero-based bar the line belongs to.
        beat_index: Zero-based beat within the bar; 0 is the bar line.
    """

    tick: float
    bar_index: int
    beat_index: int

    @property
    def is_bar(self) -> bool:
        return self.beat_index == 0


# --- Validators -------------------------------------------------------------


def _check_position(value: float) -> None:
    if not math.isfinite(value):
        raise ValidationError(f"Position must be finite, got {value}")


def _check_bpm(value: float) -> None:
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(f"BPM must be a positive number, got {value}")


def _check_integer(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")


def _check_bar_index(value: int) -> None:
    _check_integer("Bar index", value)
    if value < 0:
        raise ValidationError(f"Bar index must be non-negative, got {value}")


def _check_numerator(value: int) -> None:
    _check_integer("Numerator", value)
    if value < 1:
        raise ValidationError(f"Numerator must be positive, got {value}")


def _check_denominator(value: int) -> None:
    _check_integer("Denominator", value)
    if value < 1 or value & (value - 1):
        raise ValidationError(f"Denominator must be a positive power of two, got {value}")


def _as_integer(name: str, value: Any) -> int:
    """Convert an integral number to int, rejecting lossy conversions."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    _check_integer(name, value)
    return value


# --- Live entities ----------------------------------------------------------


class Tempo:
    """An editable tempo event.

    Attributes:
        pos: Tick position where this tempo starts.
        bpm: Quarter notes per minute, always positive.
    """

    def __init__(self, pos: float, bpm: float) -> None:
        self.pos: DataProperty[float] = DataProperty(float(pos), _check_position)
        self.bpm: DataProperty[float] = DataProperty(float(bpm), _check_bpm)

    @classmethod
    def from_info(cls, info: TempoInfo) -> Tempo:
        return cls(info.pos, info.bpm)

    def get_info(self) -> TempoInfo:
        return TempoInfo(pos=self.pos.value, bpm=self.bpm.value)

    def __repr__(self) -> str:
        return f"Tempo(pos={self.pos.value}, bpm={self.bpm.value})"


class TimeSignature:
    """An editable time signature event.

    Attributes:
        bar_index: Zero-based bar where this signature starts.
        numerator: Beats per bar.
        denominator: Beat note value, a power of two.
    """

    def __init__(self, bar_index: int, numerator: int, denominator: int) -> None:
        self.bar_index: DataProperty[int] = DataProperty(
            _as_integer("Bar index", bar_index), _check_bar_index
        )
        self.numerator: DataProperty[int] = DataProperty(
            _as_integer("Numerator", numerator), _check_numerator
        )
        self.denominator: DataProperty[int] = DataProperty(
            _as_integer("Denominator", denominator), _check_denominator
        )

    @classmethod
    def from_info(cls, info: TimeSignatureInfo) -> TimeSignature:
        return cls(info.bar_index, info.numerator, info.denominator)

    def get_info(self) -> TimeSignatureInfo:
        return TimeSignatureInfo(
            bar_index=self.bar_index.value,
            numerator=self.numerator.value,
            denominator=self.denominator.value,
        )

    def ticks_per_beat(self, tpqn: int) -> float:
        """Ticks in one beat of this signature.

        Args:
            tpqn: Ticks per quarter note.

        Returns:
            ``tpqn * 4 / denominator``, e.g. 240 for an eighth-note beat
            at 480 TPQN.
        """
        return tpqn * 4 / self.denominator.value

    def ticks_per_bar(self, tpqn: int) -> float:
        """Ticks in one bar of this signature."""
        return self.numerator.value * self.ticks_per_beat(tpqn)

    def __repr__(self) -> str:
        return (
            f"TimeSignature(bar_index={self.bar_index.value}, "
            f"{self.numerator.value}/{self.denominator.value})"
        )


class Part:
    """An editable region on a track.

    ``start_pos`` may never move past ``end_pos`` and vice versa; use
    ``set_range`` to move both bounds at once.

    Attributes:
        start_pos: Start tick.
        end_pos: End tick.
        name: Display name.
    """

    def __init__(self, start_pos: float, end_pos: float, name: str = "") -> None:
        _check_position(start_pos)
        _check_position(end_pos)
        if start_pos > end_pos:
            raise ValidationError(f"Part start {start_pos} is after its end {end_pos}")
        self.start_pos: DataProperty[float] = DataProperty(float(start_pos))
        self.end_pos: DataProperty[float] = DataProperty(float(end_pos))
        self.start_pos.validator = self._check_start
        self.end_pos.validator = self._check_end
        self.name: DataProperty[str] = DataProperty(name)

    @classmethod
    def from_info(cls, info: PartInfo) -> Part:
        return cls(info.start_pos, info.end_pos, info.name)

    def get_info(self) -> PartInfo:
        return PartInfo(
            start_pos=self.start_pos.value,
            end_pos=self.end_pos.value,
            name=self.name.value,
        )

    @property
    def length(self) -> float:
        return self.end_pos.value - self.start_pos.value

    def set_range(self, start_pos: float, end_pos: float) -> None:
        """Move both bounds, assigning them in an order that stays valid.

        Raises:
            ValidationError: If ``start_pos > end_pos``. Nothing changes.
        """
        _check_position(start_pos)
        _check_position(end_pos)
        if start_pos > end_pos:
            raise ValidationError(f"Part start {start_pos} is after its end {end_pos}")
        if start_pos > self.end_pos.value:
            self.end_pos.value = float(end_pos)
            self.start_pos.value = float(start_pos)
        else:
            self.start_pos.value = float(start_pos)
            self.end_pos.value = float(end_pos)

    def _check_start(self, value: float) -> None:
        _check_position(value)
        if value > self.end_pos.value:
            raise ValidationError(f"Part start {value} is after its end {self.end_pos.value}")

    def _check_end(self, value: float) -> None:
        _check_position(value)
        if value < self.start_pos.value:
            raise ValidationError(f"Part end {value} is before its start {self.start_pos.value}")

    def __repr__(self) -> str:
        return f"Part({self.start_pos.value}, {self.end_pos.value}, name={self.name.value!r})"
