"""Tests for OrderedEntityList and the shipped comparators."""

from __future__ import annotations

import random

import pytest

from tickline.models import Part, Tempo, TimeSignature
from tickline.ordered_list import (
    OrderedEntityList,
    part_in_order,
    tempo_in_order,
    time_signature_in_order,
)
from tickline.project import create_part_list
from tickline.tempo import create_tempo_list


def _bounds(parts: OrderedEntityList[Part]) -> list[tuple[float, float]]:
    return [(p.start_pos.value, p.end_pos.value) for p in parts]


class TestInsert:
    """Tests for insertion order."""

    def test_inserts_out_of_order_tempos_sorted(self) -> None:
        """Tempos come out sorted by position regardless of insert order."""
        tempos = OrderedEntityList(tempo_in_order)
        for pos in (1920, 0, 960, 3840):
            tempos.insert(Tempo(pos, 120))

        assert [t.pos.value for t in tempos] == [0, 960, 1920, 3840]

    def test_time_signatures_sorted_by_bar(self) -> None:
        """Time signatures are ordered by bar index."""
        signatures = OrderedEntityList(time_signature_in_order)
        signatures.insert(TimeSignature(8, 3, 4))
        signatures.insert(TimeSignature(0, 4, 4))
        signatures.insert(TimeSignature(4, 7, 8))

        assert [ts.bar_index.value for ts in signatures] == [0, 4, 8]

    def test_longer_part_first_on_equal_start(self) -> None:
        """A part containing another with the same start sorts first."""
        parts = OrderedEntityList(part_in_order)
        parts.insert(Part(100, 200))
        parts.insert(Part(100, 300))

        assert _bounds(parts) == [(100, 300), (100, 200)]

    def test_identical_parts_keep_insertion_order(self) -> None:
        """Exact ties keep the order they were inserted in."""
        parts = OrderedEntityList(part_in_order)
        first = Part(0, 100, name="first")
        second = Part(0, 100, name="second")
        parts.insert(first)
        parts.insert(second)

        assert parts[0] is first
        assert parts[1] is second

    def test_returns_index(self) -> None:
        """insert returns the position the item landed at."""
        tempos = OrderedEntityList(tempo_in_order)
        tempos.insert(Tempo(0, 120))
        tempos.insert(Tempo(1920, 120))

        assert tempos.insert(Tempo(960, 90)) == 1

    def test_rejects_same_object_twice(self) -> None:
        """The same object cannot be a member twice."""
        tempos = OrderedEntityList(tempo_in_order)
        tempo = Tempo(0, 120)
        tempos.insert(tempo)

        with pytest.raises(ValueError):
            tempos.insert(tempo)
        assert len(tempos) == 1

    def test_bumps_version_and_notifies(self) -> None:
        """Every insert increments version and calls listeners."""
        tempos = OrderedEntityList(tempo_in_order)
        calls: list[int] = []
        tempos.subscribe(lambda: calls.append(tempos.version))

        tempos.insert(Tempo(0, 120))
        tempos.insert(Tempo(960, 120))

        assert calls == [1, 2]


class TestRemove:
    """Tests for removal by identity."""

    def test_removes_member(self) -> None:
        """Removing a member returns True and shrinks the list."""
        tempos = OrderedEntityList(tempo_in_order)
        tempo = Tempo(0, 120)
        tempos.insert(tempo)

        assert tempos.remove(tempo) is True
        assert len(tempos) == 0

    def test_non_member_returns_false(self) -> None:
        """Removing an entity never inserted fails without changes."""
        tempos = OrderedEntityList(tempo_in_order)
        tempos.insert(Tempo(0, 120))
        version = tempos.version

        assert tempos.remove(Tempo(0, 120)) is False
        assert len(tempos) == 1
        assert tempos.version == version

    def test_removes_by_identity_not_equality(self) -> None:
        """Of two equal-valued parts, only the given object is removed."""
        parts = OrderedEntityList(part_in_order)
        first = Part(0, 100)
        second = Part(0, 100)
        parts.insert(first)
        parts.insert(second)

        parts.remove(second)

        assert list(parts) == [first]
        assert parts[0] is first

    def test_second_remove_is_idempotent(self) -> None:
        """Removing twice reports failure the second time."""
        parts = OrderedEntityList(part_in_order)
        part = Part(0, 10)
        parts.insert(part)

        assert parts.remove(part) is True
        assert parts.remove(part) is False


class TestWatchedProperties:
    """Tests for reacting to member property changes."""

    def test_moving_tempo_resorts_list(self) -> None:
        """Changing a tempo position moves it to its ordered place."""
        tempos = create_tempo_list()
        early = Tempo(0, 120)
        late = Tempo(1920, 90)
        tempos.insert(early)
        tempos.insert(late)

        early.pos.value = 3840

        assert list(tempos) == [late, early]
        assert tempos.is_sorted()

    def test_bpm_change_bumps_version(self) -> None:
        """A non-key property change still bumps the version."""
        tempos = create_tempo_list()
        tempo = Tempo(0, 120)
        tempos.insert(tempo)
        version = tempos.version

        tempo.bpm.value = 140

        assert tempos.version == version + 1

    def test_removed_item_no_longer_watched(self) -> None:
        """Changes to a removed item leave the list alone."""
        tempos = create_tempo_list()
        tempo = Tempo(0, 120)
        tempos.insert(tempo)
        tempos.remove(tempo)
        version = tempos.version

        tempo.bpm.value = 60

        assert tempos.version == version

    def test_resizing_part_resorts(self) -> None:
        """Growing a part past a same-start sibling moves it ahead."""
        parts = create_part_list()
        short = Part(100, 200)
        long = Part(100, 300)
        parts.insert(short)
        parts.insert(long)

        short.end_pos.value = 400

        assert _bounds(parts) == [(100, 400), (100, 300)]


class TestOrderingInvariant:
    """Ordering holds after arbitrary interleavings of edits."""

    @pytest.mark.parametrize("seed", range(10))
    def test_random_insert_remove_keeps_order(self, seed: int) -> None:
        """Random inserts, removes and moves never break the order."""
        rng = random.Random(seed)
        parts = create_part_list()
        members: list[Part] = []

        for _ in range(200):
            action = rng.random()
            if action < 0.5 or not members:
                start = rng.randrange(0, 50) * 10
                part = Part(start, start + rng.randrange(0, 20) * 10)
                parts.insert(part)
                members.append(part)
            elif action < 0.8:
                part = members.pop(rng.randrange(len(members)))
                assert parts.remove(part) is True
            else:
                part = rng.choice(members)
                start = rng.randrange(0, 50) * 10
                part.set_range(start, start + rng.randrange(0, 20) * 10)

            assert parts.is_sorted()
            assert len(parts) == len(members)


class TestAccess:
    """Tests for read access."""

    def test_indexing_and_iteration(self) -> None:
        """Indexing, len and iteration agree."""
        tempos = OrderedEntityList(tempo_in_order)
        for pos in (0, 480, 960):
            tempos.insert(Tempo(pos, 100))

        assert len(tempos) == 3
        assert [tempos[i] for i in range(3)] == list(tempos)
        assert tempos[-1].pos.value == 960

    def test_index_and_contains(self) -> None:
        """index and membership use identity."""
        tempos = OrderedEntityList(tempo_in_order)
        tempo = Tempo(0, 120)
        tempos.insert(tempo)

        assert tempos.index(tempo) == 0
        assert tempos.index(Tempo(0, 120)) == -1
        assert tempo in tempos
        assert Tempo(0, 120) not in tempos

    def test_clear(self) -> None:
        """clear empties the list and bumps the version."""
        tempos = create_tempo_list()
        tempo = Tempo(0, 120)
        tempos.insert(tempo)
        version = tempos.version

        tempos.clear()

        assert len(tempos) == 0
        assert tempos.version == version + 1
        tempo.bpm.value = 90
        assert tempos.version == version + 1
