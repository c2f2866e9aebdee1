"""A small priority queue whose entries can have their priority updated."""

from __future__ import annotations

from typing import Generic, Hashable, TypeVar

V = TypeVar("V", bound=Hashable)


class SimpleQueue(Generic[V]):
    """Priority queue that pops the value with the lowest priority.

    Pushing a value already present updates its priority instead of adding it
    a second time.
    """

    def __init__(self) -> None:
        # Kept in descending priority order, so the next value sits at the end.
        self._entries: list[tuple[V, float]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __contains__(self, value: object) -> bool:
        return any(v == value for v, _ in self._entries)

    def _sort(self) -> None:
        self._entries.sort(key=lambda entry: entry[1], reverse=True)

    def push(self, value: V, priority: float) -> None:
        """Insert ``value`` with ``priority``, or update its priority if present."""
        for i, (existing, _) in enumerate(self._entries):
            if existing == value:
                self._entries[i] = (value, priority)
                self._sort()
                return
        for i, (_, existing_priority) in enumerate(self._entries):
            if existing_priority < priority:
                self._entries.insert(i, (value, priority))
                return
        self._entries.append((value, priority))

    def pop(self) -> V:
        """Remove and return the value with the lowest priority."""
        if not self._entries:
            raise IndexError("pop from an empty queue")
        self._sort()
        value, _ = self._entries.pop()
        return value

    def exists(self, value: V) -> bool:
        """Whether ``value`` is currently queued."""
        return value in self

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()