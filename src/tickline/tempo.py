"""Tick to seconds conversion under a stepwise tempo.

The tempo of a project is a list of ``Tempo`` events sorted by tick
position. Each event starts a segment of constant BPM that lasts until
the next event; the last segment is open-ended and the first one is
extended backward past tick 0.

``TempoMap`` answers queries through a cumulative table holding the
elapsed seconds at every event. The table is rebuilt in one linear pass
whenever the tempo list's ``version`` moved since the last rebuild, so
no query can observe a stale table.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np

from .config import (
    DEFAULT_BPM,
    DEFAULT_TPQN,
    check_default_bpm,
    check_ticks_per_quarter_note,
)
from .models import Tempo, TempoInfo
from .ordered_list import OrderedEntityList, tempo_in_order

logger = logging.getLogger(__name__)


def create_tempo_list() -> OrderedEntityList[Tempo]:
    """Create an empty tempo list watching each event's position and BPM."""
    return OrderedEntityList(tempo_in_order, watch=lambda tempo: (tempo.pos, tempo.bpm))


def segment_index(starts: np.ndarray, value: float) -> int:
    """Index of the last segment starting at or before ``value``.

    Values before the first start clamp to segment 0.

    Args:
        starts: Non-decreasing segment start values.
        value: The value to locate.

    Returns:
        Segment index in ``[0, len(starts) - 1]``.
    """
    index = int(np.searchsorted(starts, value, side="right")) - 1
    return max(index, 0)


class TempoMap:
    """Bidirectional tick/seconds mapping for one project.

    Args:
        tempos: The project's tempo list. A new empty list is created
            when omitted. The map reads it by reference; every track of a
            project shares the same instance.
        tpqn: Ticks per quarter note.
        default_bpm: Tempo assumed while the list is empty.

    Raises:
        ValidationError: If ``tpqn`` is not a positive integer or
            ``default_bpm`` is not a positive finite number.

    Example:
        >>> tempo_map = TempoMap()
        >>> _ = tempo_map.add_tempo(0, 120)
        >>> _ = tempo_map.add_tempo(1920, 60)
        >>> tempo_map.get_time(3840)
        6.0
    """

    def __init__(
        self,
        tempos: OrderedEntityList[Tempo] | None = None,
        tpqn: int = DEFAULT_TPQN,
        default_bpm: float = DEFAULT_BPM,
    ) -> None:
        check_ticks_per_quarter_note(tpqn)
        check_default_bpm(default_bpm)
        self.tempos = tempos if tempos is not None else create_tempo_list()
        self.tpqn = tpqn
        self.default_bpm = default_bpm
        self.rebuild_count = 0
        self._cache_version = -1
        self._positions = np.zeros(1)
        self._bpms = np.full(1, float(default_bpm))
        self._cum_time = np.zeros(1)

    @property
    def is_dirty(self) -> bool:
        """True when the tempo list changed since the last rebuild."""
        return self._cache_version != self.tempos.version

    @property
    def cum_time(self) -> np.ndarray:
        """Elapsed seconds from tick 0 to each tempo event."""
        self._ensure_fresh()
        return self._cum_time.copy()

    def rebuild(self) -> None:
        """Recompute the cumulative time table from the tempo list."""
        count = len(self.tempos)
        if count == 0:
            positions = np.zeros(1)
            bpms = np.full(1, float(self.default_bpm))
        else:
            positions = np.fromiter((t.pos.value for t in self.tempos), dtype=float, count=count)
            bpms = np.fromiter((t.bpm.value for t in self.tempos), dtype=float, count=count)

        assert np.all(np.diff(positions) >= 0), "tempo list is out of order"
        assert np.all(bpms > 0), "tempo list holds a non-positive BPM"

        seconds_per_tick = 60.0 / (bpms * self.tpqn)
        cum_time = np.empty(len(positions))
        cum_time[0] = positions[0] * seconds_per_tick[0]
        if len(positions) > 1:
            cum_time[1:] = cum_time[0] + np.cumsum(np.diff(positions) * seconds_per_tick[:-1])

        self._positions = positions
        self._bpms = bpms
        self._cum_time = cum_time
        self._cache_version = self.tempos.version
        self.rebuild_count += 1
        logger.debug("Rebuilt tempo table with %d segments", len(positions))

    def get_time(self, tick: float) -> float:
        """Convert a tick position to elapsed seconds.

        Args:
            tick: Tick position. Ticks before the first event use the
                first event's BPM; ticks after the last use the last BPM.

        Returns:
            Seconds from tick 0. Negative for negative ticks.
        """
        self._ensure_fresh()
        i = segment_index(self._positions, tick)
        return float(
            self._cum_time[i] + (tick - self._positions[i]) * 60.0 / (self._bpms[i] * self.tpqn)
        )

    def get_tick(self, seconds: float) -> float:
        """Convert elapsed seconds to a tick position.

        Inverse of ``get_time`` up to floating point rounding.

        Args:
            seconds: Seconds from tick 0.

        Returns:
            Tick position.
        """
        self._ensure_fresh()
        i = segment_index(self._cum_time, seconds)
        return float(
            self._positions[i] + (seconds - self._cum_time[i]) * self._bpms[i] * self.tpqn / 60.0
        )

    def get_duration(self, start_tick: float, end_tick: float) -> float:
        """Seconds elapsed between two tick positions."""
        return self.get_time(end_tick) - self.get_time(start_tick)

    def get_bpm_at(self, tick: float) -> float:
        """BPM of the segment governing ``tick``."""
        self._ensure_fresh()
        return float(self._bpms[segment_index(self._positions, tick)])

    def add_tempo(self, pos: float, bpm: float) -> Tempo:
        """Add a tempo event, or retune the one already at ``pos``.

        Args:
            pos: Tick position of the event.
            bpm: Tempo from ``pos`` on.

        Returns:
            The inserted or updated event.

        Raises:
            ValidationError: If ``bpm`` is not positive or ``pos`` is not
                finite. The list is unchanged.
        """
        for tempo in self.tempos:
            if tempo.pos.value == pos:
                tempo.bpm.value = float(bpm)
                return tempo
        tempo = Tempo(pos, bpm)
        self.tempos.insert(tempo)
        return tempo

    def remove_tempo(self, tempo: Tempo) -> bool:
        """Remove a tempo event. Returns False if it was not in the map."""
        return self.tempos.remove(tempo)

    def set_bpm(self, tempo: Tempo, bpm: float) -> None:
        """Change the BPM of an event.

        Raises:
            ValidationError: If ``bpm`` is not positive.
        """
        tempo.bpm.value = float(bpm)

    def tempos_in_range(self, start_tick: float, end_tick: float) -> list[Tempo]:
        """Events positioned within ``[start_tick, end_tick]``, in order."""
        result: list[Tempo] = []
        for tempo in self.tempos:
            if tempo.pos.value > end_tick:
                break
            if tempo.pos.value >= start_tick:
                result.append(tempo)
        return result

    def get_info(self) -> tuple[TempoInfo, ...]:
        return tuple(tempo.get_info() for tempo in self.tempos)

    def set_info(self, infos: Iterable[TempoInfo]) -> None:
        """Replace every event with events built from ``infos``.

        All events are validated before the list is touched.

        Raises:
            ValidationError: If any info holds an invalid value.
        """
        tempos = [Tempo.from_info(info) for info in infos]
        self.tempos.clear()
        for tempo in tempos:
            existing = next(
                (t for t in self.tempos if t.pos.value == tempo.pos.value), None
            )
            if existing is not None:
                logger.warning("Dropping duplicate tempo at tick %s", tempo.pos.value)
                self.tempos.remove(existing)
            self.tempos.insert(tempo)

    def _ensure_fresh(self) -> None:
        if self.is_dirty:
            self.rebuild()
        assert self._cache_version == self.tempos.version, "stale tempo table"
