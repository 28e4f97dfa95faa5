"""Tick to bar/beat conversion under a stepwise time signature.

Time signature events are placed on bar indices. Each event governs
the bars from its own index up to the next event's index; the last
event is open-ended and the first one is extended backward to bar 0.

Bar boundaries are half-open: a tick exactly on the first tick of a
segment belongs to that segment, so bar ``n`` covers
``[tick_of(n), tick_of(n + 1))``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from .config import (
    DEFAULT_TIME_SIGNATURE,
    DEFAULT_TPQN,
    check_default_time_signature,
    check_ticks_per_quarter_note,
)
from .models import MeterStatus, TimeSignature, TimeSignatureInfo
from .ordered_list import OrderedEntityList, time_signature_in_order
from .tempo import segment_index

logger = logging.getLogger(__name__)


def create_time_signature_list() -> OrderedEntityList[TimeSignature]:
    """Create an empty time signature list watching every field of each event."""
    return OrderedEntityList(
        time_signature_in_order,
        watch=lambda ts: (ts.bar_index, ts.numerator, ts.denominator),
    )


@dataclass(frozen=True)
class MeterSegment:
    """A resolved time signature segment.

    Attributes:
        bar_index: First bar of the segment.
        numerator: Beats per bar.
        denominator: Beat note value.
        start_tick: Absolute tick of ``bar_index``.
        ticks_per_beat: Ticks in one beat.
        ticks_per_bar: Ticks in one bar.
    """

    bar_index: int
    numerator: int
    denominator: int
    start_tick: float
    ticks_per_beat: float
    ticks_per_bar: float


class TimeSignatureMap:
    """Bidirectional tick/bar mapping for one project.

    Args:
        time_signatures: The project's time signature list. A new empty
            list is created when omitted.
        tpqn: Ticks per quarter note.
        default_time_signature: (numerator, denominator) assumed from
            bar 0 while the list is empty.

    Raises:
        ValidationError: If ``tpqn`` is not a positive integer or the
            default signature is invalid.

    Example:
        >>> ts_map = TimeSignatureMap()
        >>> _ = ts_map.add_time_signature(0, 4, 4)
        >>> ts_map.get_tick_by_bar_and_beat(1, 2)
        2880.0
    """

    def __init__(
        self,
        time_signatures: OrderedEntityList[TimeSignature] | None = None,
        tpqn: int = DEFAULT_TPQN,
        default_time_signature: tuple[int, int] = DEFAULT_TIME_SIGNATURE,
    ) -> None:
        check_ticks_per_quarter_note(tpqn)
        check_default_time_signature(default_time_signature)
        self.time_signatures = (
            time_signatures if time_signatures is not None else create_time_signature_list()
        )
        self.tpqn = tpqn
        self.default_time_signature = default_time_signature
        self.rebuild_count = 0
        self._cache_version = -1
        self._segments: list[MeterSegment] = []
        self._bar_indices = np.zeros(1)
        self._start_ticks = np.zeros(1)

    @property
    def is_dirty(self) -> bool:
        """True when the time signature list changed since the last rebuild."""
        return self._cache_version != self.time_signatures.version

    def rebuild(self) -> None:
        """Recompute the cumulative bar start table from the event list."""
        events = list(self.time_signatures)
        if events:
            raw = [(ts.bar_index.value, ts.numerator.value, ts.denominator.value) for ts in events]
        else:
            numerator, denominator = self.default_time_signature
            raw = [(0, numerator, denominator)]

        segments: list[MeterSegment] = []
        start_tick = 0.0
        for i, (bar_index, numerator, denominator) in enumerate(raw):
            ticks_per_beat = self.tpqn * 4 / denominator
            ticks_per_bar = numerator * ticks_per_beat
            if i == 0:
                start_tick = bar_index * ticks_per_bar
            else:
                previous = segments[-1]
                assert bar_index >= previous.bar_index, "time signature list is out of order"
                start_tick = previous.start_tick + (
                    bar_index - previous.bar_index
                ) * previous.ticks_per_bar
            segments.append(
                MeterSegment(
                    bar_index=bar_index,
                    numerator=numerator,
                    denominator=denominator,
                    start_tick=start_tick,
                    ticks_per_beat=ticks_per_beat,
                    ticks_per_bar=ticks_per_bar,
                )
            )

        self._segments = segments
        self._bar_indices = np.array([s.bar_index for s in segments], dtype=float)
        self._start_ticks = np.array([s.start_tick for s in segments], dtype=float)
        self._cache_version = self.time_signatures.version
        self.rebuild_count += 1
        logger.debug("Rebuilt time signature table with %d segments", len(segments))

    def segments(self) -> list[MeterSegment]:
        """Resolved segments in bar order."""
        self._ensure_fresh()
        return list(self._segments)

    def get_meter_status(self, tick: float) -> MeterStatus:
        """Locate a tick in the bar structure.

        Args:
            tick: Tick position. Ticks before the first segment are
                measured with the first signature extended backward.

        Returns:
            The governing segment index and the fractional bar index.
        """
        self._ensure_fresh()
        i = segment_index(self._start_ticks, tick)
        segment = self._segments[i]
        bar_index = segment.bar_index + (tick - segment.start_tick) / segment.ticks_per_bar
        return MeterStatus(time_signature_index=i, bar_index=bar_index)

    def get_tick_by_bar_index(self, bar_index: float) -> float:
        """Tick where a bar starts.

        Exact for integer bars; fractional bars interpolate within the
        governing segment.
        """
        segment = self._segment_for_bar(bar_index)
        return segment.start_tick + (bar_index - segment.bar_index) * segment.ticks_per_bar

    def get_tick_by_bar_and_beat(self, bar_index: int, beat_index: float) -> float:
        """Tick of a beat within a bar, using the beat length of that bar."""
        segment = self._segment_for_bar(bar_index)
        bar_tick = segment.start_tick + (bar_index - segment.bar_index) * segment.ticks_per_bar
        return bar_tick + beat_index * segment.ticks_per_beat

    def get_bar_and_beat(self, tick: float) -> tuple[int, float]:
        """Split a tick into a whole bar and a fractional beat within it.

        Args:
            tick: Tick position.

        Returns:
            (bar_index, beat) with both zero-based; ``beat`` lies in
            ``[0, numerator)``.
        """
        status = self.get_meter_status(tick)
        segment = self._segments[status.time_signature_index]
        bar = math.floor(status.bar_index)
        bar_tick = segment.start_tick + (bar - segment.bar_index) * segment.ticks_per_bar
        beat = (tick - bar_tick) / segment.ticks_per_beat
        if beat >= segment.numerator:
            # Rounding put the tick on the next bar line.
            bar += 1
            beat = 0.0
        return bar, max(beat, 0.0)

    def add_time_signature(self, bar_index: int, numerator: int, denominator: int) -> TimeSignature:
        """Add a time signature, or change the one already at ``bar_index``.

        Raises:
            ValidationError: If any value is invalid. The list is unchanged.
        """
        candidate = TimeSignature(bar_index, numerator, denominator)
        for ts in self.time_signatures:
            if ts.bar_index.value == candidate.bar_index.value:
                self.set_meter(ts, numerator, denominator)
                return ts
        self.time_signatures.insert(candidate)
        return candidate

    def remove_time_signature(self, time_signature: TimeSignature) -> bool:
        """Remove an event. Returns False if it was not in the map."""
        return self.time_signatures.remove(time_signature)

    def set_meter(self, time_signature: TimeSignature, numerator: int, denominator: int) -> None:
        """Change numerator and denominator together.

        Both values are validated before either is assigned.

        Raises:
            ValidationError: If either value is invalid.
        """
        checked = TimeSignature(time_signature.bar_index.value, numerator, denominator)
        time_signature.numerator.value = checked.numerator.value
        time_signature.denominator.value = checked.denominator.value

    def get_info(self) -> tuple[TimeSignatureInfo, ...]:
        return tuple(ts.get_info() for ts in self.time_signatures)

    def set_info(self, infos: Iterable[TimeSignatureInfo]) -> None:
        """Replace every event with events built from ``infos``.

        Raises:
            ValidationError: If any info holds an invalid value. The
                list is left untouched in that case.
        """
        time_signatures = [TimeSignature.from_info(info) for info in infos]
        self.time_signatures.clear()
        for ts in time_signatures:
            existing = next(
                (e for e in self.time_signatures if e.bar_index.value == ts.bar_index.value),
                None,
            )
            if existing is not None:
                logger.warning("Dropping duplicate time signature at bar %d", ts.bar_index.value)
                self.time_signatures.remove(existing)
            self.time_signatures.insert(ts)

    def _segment_for_bar(self, bar_index: float) -> MeterSegment:
        self._ensure_fresh()
        return self._segments[segment_index(self._bar_indices, bar_index)]

    def _ensure_fresh(self) -> None:
        if self.is_dirty:
            self.rebuild()
        assert self._cache_version == self.time_signatures.version, "stale time signature table"
