"""Undo/redo log of grid snapshots."""

import time
from dataclasses import dataclass, field
from typing import Optional

from .grid import Grid, copy_grid


@dataclass
class HistoryEntry:
    grid: Grid
    timestamp: float = field(default_factory=time.time)


class HistoryStore:
    """Linear history with a cursor.

    Seeded with one entry so the cursor is always valid.  Pushing while the
    cursor is not at the tail drops the redo branch.  Every grid going in or
    coming out is copied, so callers never alias a stored snapshot.
    """

    def __init__(self, initial: Grid):
        self.entries: list[HistoryEntry] = [HistoryEntry(copy_grid(initial))]
        self.cursor = 0

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def can_undo(self) -> bool:
        return self.cursor > 0

    @property
    def can_redo(self) -> bool:
        return self.cursor < len(self.entries) - 1

    @property
    def current(self) -> Grid:
        return copy_grid(self.entries[self.cursor].grid)

    def push(self, grid: Grid) -> None:
        if self.cursor < len(self.entries) - 1:
            del self.entries[self.cursor + 1:]
        self.entries.append(HistoryEntry(copy_grid(grid)))
        self.cursor = len(self.entries) - 1

    def undo(self) -> Optional[Grid]:
        if not self.can_undo:
            return None
        self.cursor -= 1
        return copy_grid(self.entries[self.cursor].grid)

    def redo(self) -> Optional[Grid]:
        if not self.can_redo:
            return None
        self.cursor += 1
        return copy_grid(self.entries[self.cursor].grid)

    def reset(self, grid: Grid) -> None:
        self.entries = [HistoryEntry(copy_grid(grid))]
        self.cursor = 0
