"""Ordered entity collections for tickline.

``OrderedEntityList`` keeps tempo events, time signature events and
the parts of a track sorted under a comparator supplied by the caller.
The comparators used by the rest of the package live here as well.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Generic, TypeVar

from .properties import DataProperty

if TYPE_CHECKING:
    from .models import Part, Tempo, TimeSignature

logger = logging.getLogger(__name__)

T = TypeVar("T")

OrderPredicate = Callable[[T, T], bool]
WatchFunction = Callable[[T], Iterable[DataProperty]]
Listener = Callable[[], None]


def tempo_in_order(prev: Tempo, following: Tempo) -> bool:
    """Tempo events are ordered by position alone."""
    return prev.pos.value <= following.pos.value


def time_signature_in_order(prev: TimeSignature, following: TimeSignature) -> bool:
    """Time signature events are ordered by bar index alone."""
    return prev.bar_index.value <= following.bar_index.value


def part_in_order(prev: Part, following: Part) -> bool:
    """Parts sort by start ascending, then by end descending.

    A part that fully contains another part with the same start comes
    first. Exact ties are in order both ways, so insertion order wins.
    """
    if prev.start_pos.value != following.start_pos.value:
        return prev.start_pos.value < following.start_pos.value
    return prev.end_pos.value >= following.end_pos.value


class OrderedEntityList(Generic[T]):
    """A list kept sorted by an injected ordering predicate.

    ``is_in_order(prev, following)`` returns True when ``prev`` may
    legally precede ``following``. Inserted items are placed after every
    existing item they tie with, so equal items keep their insertion order.

    Items are tracked by identity: ``remove`` and ``index`` never use
    ``==``. When a ``watch`` function is supplied, the list subscribes
    to the properties it returns for each member; a change to any of
    them bumps ``version``, moves the member if it is now out of
    order, and notifies listeners.

    Attributes:
        version: Counter incremented after every change that can affect
            derived data. Caches compare it to decide whether to rebuild.
    """

    def __init__(
        self,
        is_in_order: OrderPredicate[T],
        watch: WatchFunction[T] | None = None,
    ) -> None:
        self._is_in_order = is_in_order
        self._watch = watch
        self._items: list[T] = []
        self._subscriptions: dict[int, tuple[list[DataProperty], Callable]] = {}
        self._listeners: list[Listener] = []
        self.version = 0

    def insert(self, item: T) -> int:
        """Insert an item at its ordered position.

        Args:
            item: The entity to insert.

        Returns:
            The index the item was inserted at.

        Raises:
            ValueError: If this very object is already a member.
        """
        if item in self:
            raise ValueError(f"{item!r} is already in the list")
        index = self._find_insert_index(item)
        self._items.insert(index, item)
        self._attach(item)
        logger.debug("Inserted %r at index %d", item, index)
        self._changed()
        return index

    def remove(self, item: T) -> bool:
        """Remove an item by identity.

        Args:
            item: The entity to remove.

        Returns:
            True if the item was a member and has been removed,
            False if it was not found (the list is left untouched).
        """
        index = self.index(item)
        if index < 0:
            return False
        del self._items[index]
        self._detach(item)
        logger.debug("Removed %r from index %d", item, index)
        self._changed()
        return True

    def clear(self) -> None:
        """Remove every item."""
        for item in self._items:
            self._detach(item)
        self._items.clear()
        self._changed()

    def index(self, item: T) -> int:
        """Return the index of ``item`` by identity, or -1 if absent."""
        for i, candidate in enumerate(self._items):
            if candidate is item:
                return i
        return -1

    def subscribe(self, listener: Listener) -> None:
        """Register a callable invoked after every change to the list."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        """Remove a listener. Unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def is_sorted(self) -> bool:
        """Check the ordering invariant on every adjacent pair."""
        return all(
            self._is_in_order(prev, following)
            for prev, following in zip(self._items, self._items[1:])
        )

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __contains__(self, item: object) -> bool:
        return any(candidate is item for candidate in self._items)

    def __repr__(self) -> str:
        return f"OrderedEntityList({self._items!r})"

    def _find_insert_index(self, item: T) -> int:
        # Scan from the back so ties land after existing equal items.
        index = len(self._items)
        while index > 0 and not self._is_in_order(self._items[index - 1], item):
            index -= 1
        return index

    def _attach(self, item: T) -> None:
        if self._watch is None:
            return
        properties = list(self._watch(item))

        def handler(_value: object) -> None:
            self._on_item_changed(item)

        for prop in properties:
            prop.subscribe(handler)
        self._subscriptions[id(item)] = (properties, handler)

    def _detach(self, item: T) -> None:
        entry = self._subscriptions.pop(id(item), None)
        if entry is None:
            return
        properties, handler = entry
        for prop in properties:
            prop.unsubscribe(handler)

    def _on_item_changed(self, item: T) -> None:
        index = self.index(item)
        if index < 0:
            return
        in_order_before = index == 0 or self._is_in_order(self._items[index - 1], item)
        in_order_after = index == len(self._items) - 1 or self._is_in_order(
            item, self._items[index + 1]
        )
        if not (in_order_before and in_order_after):
            del self._items[index]
            new_index = self._find_insert_index(item)
            self._items.insert(new_index, item)
            logger.debug("Moved %r from index %d to %d", item, index, new_index)
        self._changed()

    def _changed(self) -> None:
        self.version += 1
        for listener in list(self._listeners):
            listener()
