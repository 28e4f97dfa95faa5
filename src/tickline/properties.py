"""Observable value cells for timeline entities.

Tempo, time signature and part fields are held in ``DataProperty``
cells so that derived structures (ordered lists, cumulative tables)
can be told when a value changes and invalidate their caches.

Example:
    >>> bpm = DataProperty(120.0)
    >>> seen = []
    >>> bpm.subscribe(seen.append)
    >>> bpm.value = 90.0
    >>> seen
    [90.0]
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")

ChangeHandler = Callable[[T], None]
Validator = Callable[[T], None]


class DataProperty(Generic[T]):
    """A scalar value with change notification.

    Handlers are only notified when the stored value actually changes.
    An optional validator runs before every assignment (including the
    initial one) and is expected to raise ``ValidationError`` to reject
    the value, in which case the stored value is left untouched.

    Attributes:
        value: The current value. Assigning validates, stores and notifies.
        validator: Callable run on every assignment, or None.
    """

    def __init__(self, value: T, validator: Validator[T] | None = None) -> None:
        if validator is not None:
            validator(value)
        self._value = value
        self.validator = validator
        self._handlers: list[ChangeHandler[T]] = []

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        if self.validator is not None:
            self.validator(new_value)
        if new_value == self._value:
            return
        self._value = new_value
        for handler in list(self._handlers):
            handler(new_value)

    def subscribe(self, handler: ChangeHandler[T]) -> None:
        """Register a handler called with the new value after each change.

        Args:
            handler: Callable receiving the new value. Registering the
                same handler twice has no effect.
        """
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: ChangeHandler[T]) -> None:
        """Remove a previously registered handler.

        Args:
            handler: Handler to remove. Unknown handlers are ignored.
        """
        if handler in self._handlers:
            self._handlers.remove(handler)

    def __repr__(self) -> str:
        return f"DataProperty({self._value!r})"
