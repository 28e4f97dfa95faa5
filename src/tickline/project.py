"""Projects and tracks.

A ``Project`` owns exactly one tempo map and one time signature map.
Tracks read both through their project reference and never copy them,
so an edit to the project tempo is seen by every track's next query.
Each ``Track`` owns its parts, kept in start order.
"""

from __future__ import annotations

import logging

from .config import TimelineConfig
from .models import Part, PartInfo, ProjectInfo, Tempo, TimeSignature, TrackInfo
from .ordered_list import OrderedEntityList, part_in_order
from .properties import DataProperty
from .tempo import TempoMap
from .time_signature import TimeSignatureMap

logger = logging.getLogger(__name__)


def create_part_list() -> OrderedEntityList[Part]:
    """Create an empty part list re-sorting parts when their bounds move."""
    return OrderedEntityList(part_in_order, watch=lambda part: (part.start_pos, part.end_pos))


class Track:
    """A track holding an ordered collection of parts.

    Attributes:
        project: The owning project.
        name: Track name.
        mute: Whether the track is muted.
        solo: Whether the track is soloed.
        gain: Gain in dB.
        pan: Stereo position in [-1, 1].
        parts: Parts ordered by start, longer parts first on equal starts.
    """

    def __init__(self, project: Project, info: TrackInfo | None = None) -> None:
        self.project = project
        self.name: DataProperty[str] = DataProperty("")
        self.mute: DataProperty[bool] = DataProperty(False)
        self.solo: DataProperty[bool] = DataProperty(False)
        self.gain: DataProperty[float] = DataProperty(0.0)
        self.pan: DataProperty[float] = DataProperty(0.0)
        self.parts = create_part_list()
        if info is not None:
            self.set_info(info)

    @property
    def tempo_map(self) -> TempoMap:
        return self.project.tempo_map

    @property
    def time_signature_map(self) -> TimeSignatureMap:
        return self.project.time_signature_map

    def create_part(self, info: PartInfo) -> Part:
        """Build a part from its info without inserting it.

        Raises:
            ValidationError: If the info has ``start_pos > end_pos``.
        """
        return Part.from_info(info)

    def insert_part(self, part: Part) -> None:
        self.parts.insert(part)

    def remove_part(self, part: Part) -> bool:
        """Remove a part. Returns False if the part is not on this track."""
        return self.parts.remove(part)

    def part_time_range(self, part: Part) -> tuple[float, float]:
        """Start and end of a part in seconds, via the project tempo."""
        return (
            self.tempo_map.get_time(part.start_pos.value),
            self.tempo_map.get_time(part.end_pos.value),
        )

    def get_info(self) -> TrackInfo:
        return TrackInfo(
            name=self.name.value,
            mute=self.mute.value,
            solo=self.solo.value,
            gain=self.gain.value,
            pan=self.pan.value,
            parts=tuple(part.get_info() for part in self.parts),
        )

    def set_info(self, info: TrackInfo) -> None:
        """Replace the track state with ``info``.

        Raises:
            ValidationError: If a part info is invalid. The track is left
                untouched in that case.
        """
        parts = [self.create_part(part_info) for part_info in info.parts]
        self.name.value = info.name
        self.mute.value = info.mute
        self.solo.value = info.solo
        self.gain.value = info.gain
        self.pan.value = info.pan
        self.parts.clear()
        for part in parts:
            self.parts.insert(part)

    def __repr__(self) -> str:
        return f"Track({self.name.value!r}, parts={len(self.parts)})"


class Project:
    """A project: tempo, time signatures and tracks.

    Args:
        info: Initial state. Defaults to a project with no tracks and the
            configured default tempo and time signature.
        config: Resolution and defaults. Defaults to ``TimelineConfig()``.
    """

    def __init__(
        self,
        info: ProjectInfo | None = None,
        config: TimelineConfig | None = None,
    ) -> None:
        self.config = config if config is not None else TimelineConfig()
        self.tempo_map = TempoMap(
            tpqn=self.config.ticks_per_quarter_note,
            default_bpm=self.config.default_bpm,
        )
        self.time_signature_map = TimeSignatureMap(
            tpqn=self.config.ticks_per_quarter_note,
            default_time_signature=self.config.default_time_signature,
        )
        self.tracks: list[Track] = []
        self.set_info(info if info is not None else ProjectInfo.for_config(self.config))

    @property
    def tempos(self) -> OrderedEntityList[Tempo]:
        return self.tempo_map.tempos

    @property
    def time_signatures(self) -> OrderedEntityList[TimeSignature]:
        return self.time_signature_map.time_signatures

    def add_track(self, info: TrackInfo | None = None) -> Track:
        track = Track(self, info)
        self.tracks.append(track)
        logger.debug("Added %r", track)
        return track

    def remove_track(self, track: Track) -> bool:
        """Remove a track by identity. Returns False if it is not in the project."""
        for i, candidate in enumerate(self.tracks):
            if candidate is track:
                del self.tracks[i]
                return True
        return False

    def get_info(self) -> ProjectInfo:
        return ProjectInfo(
            tempos=self.tempo_map.get_info(),
            time_signatures=self.time_signature_map.get_info(),
            tracks=tuple(track.get_info() for track in self.tracks),
        )

    def set_info(self, info: ProjectInfo) -> None:
        """Replace the whole project state with ``info``.

        Every record is validated before anything is replaced.

        Raises:
            ValidationError: If any record holds an invalid value.
        """
        for tempo_info in info.tempos:
            Tempo.from_info(tempo_info)
        for ts_info in info.time_signatures:
            TimeSignature.from_info(ts_info)
        for track_info in info.tracks:
            for part_info in track_info.parts:
                Part.from_info(part_info)

        self.tempo_map.set_info(info.tempos)
        self.time_signature_map.set_info(info.time_signatures)
        self.tracks = [Track(self, track_info) for track_info in info.tracks]
        logger.debug(
            "Loaded project with %d tempos, %d time signatures, %d tracks",
            len(info.tempos),
            len(info.time_signatures),
            len(info.tracks),
        )
