"""Navigation history for reversing zooms.

The stack is an immutable value: push, pop and clear return new stacks,
so the zoom resolver can stay a pure function of its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .window import NavigationHistoryEntry


@dataclass(frozen=True)
class NavigationStack:
    """Previously active (window, cadence) pairs, most recent first."""

    entries: tuple[NavigationHistoryEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[NavigationHistoryEntry]:
        return iter(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def depth(self) -> int:
        return len(self.entries)

    @property
    def top(self) -> NavigationHistoryEntry | None:
        """Most recently pushed entry, or None when empty."""
        return self.entries[0] if self.entries else None

    def push(self, entry: NavigationHistoryEntry) -> NavigationStack:
        return NavigationStack((entry, *self.entries))

    def pop(self) -> tuple[NavigationHistoryEntry, NavigationStack]:
        """Return the top entry and the stack below it.

        Raises:
            IndexError: If the stack is empty.
        """
        if not self.entries:
            raise IndexError("pop from empty navigation stack")
        return self.entries[0], NavigationStack(self.entries[1:])

    def clear(self) -> NavigationStack:
        return EMPTY_STACK


EMPTY_STACK = NavigationStack()
