"""Fixed-capacity FIFO sequence."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class BoundedSequence(Generic[T]):
    """Insertion-ordered sequence that evicts its oldest item on overflow.

    ``len(seq) <= capacity`` holds after every operation, and the retained
    items are always the most recently appended ones in insertion order.
    """

    def __init__(self, capacity: int, items: Iterable[T] = ()) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"capacity must be a positive integer, got {capacity!r}")
        self._capacity = capacity
        self._items: deque[T] = deque(items, maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, item: T) -> None:
        """Add *item* as the newest element, evicting the oldest if full."""
        self._items.append(item)

    def extend(self, items: Iterable[T]) -> None:
        for item in items:
            self._items.append(item)

    def replace(self, items: Iterable[T]) -> None:
        """Replace the contents with the last ``capacity`` of *items*, in order."""
        self._items = deque(items, maxlen=self._capacity)

    def to_ordered_sequence(self) -> tuple[T, ...]:
        """Return the contents oldest-to-newest as of this call.

        The result is a tuple, so it can be iterated any number of times
        and later appends never show up in it.
        """
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.to_ordered_sequence())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(capacity={self._capacity}, size={len(self._items)})"
