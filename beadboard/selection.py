"""Cell selections: sets of "y,x" keys over a grid."""

from collections import deque
from typing import Iterable, NamedTuple

from .grid import Grid, GridSize

Selection = set[str]


class Bounds(NamedTuple):
    min_y: int
    min_x: int
    max_y: int
    max_x: int


def cell_key(y: int, x: int) -> str:
    return f"{y},{x}"


def parse_cell_key(key: str) -> tuple[int, int]:
    """Inverse of cell_key. Returns (y, x)."""
    ys, xs = key.split(",")
    return int(ys), int(xs)


def cells_of(selection: Iterable[str]) -> list[tuple[int, int]]:
    return [parse_cell_key(k) for k in selection]


def same_color_region(grid: Grid, y: int, x: int, size: GridSize) -> Selection:
    """4-connected region of cells sharing the exact value at (y, x).

    Read-only.  An Empty seed collects the connected Empty region.
    Out-of-bounds seeds give an empty set.
    """
    if not size.contains(y, x):
        return set()
    target = grid[y][x]
    visited: Selection = set()
    queue: deque[tuple[int, int]] = deque([(y, x)])
    while queue:
        cy, cx = queue.popleft()
        if not size.contains(cy, cx):
            continue
        key = cell_key(cy, cx)
        if key in visited or grid[cy][cx] != target:
            continue
        visited.add(key)
        queue.append((cy + 1, cx))
        queue.append((cy - 1, cx))
        queue.append((cy, cx + 1))
        queue.append((cy, cx - 1))
    return visited


def bounds(selection: Iterable[str]) -> Bounds:
    """Tight bounding box; (0, 0, 0, 0) for an empty selection."""
    cells = cells_of(selection)
    if not cells:
        return Bounds(0, 0, 0, 0)
    ys = [y for y, _ in cells]
    xs = [x for _, x in cells]
    return Bounds(min(ys), min(xs), max(ys), max(xs))


def clip(selection: Iterable[str], size: GridSize) -> Selection:
    """Drop keys that fall outside ``size``."""
    return {cell_key(y, x) for y, x in cells_of(selection) if size.contains(y, x)}


def clamp_offset(selection: Selection, dx: int, dy: int,
                 size: GridSize) -> tuple[int, int]:
    """Clamp a move offset so the selection's bounding box stays on the grid."""
    if not selection:
        return 0, 0
    b = bounds(selection)
    dx = max(-b.min_x, min(dx, size.width - 1 - b.max_x))
    dy = max(-b.min_y, min(dy, size.height - 1 - b.max_y))
    return dx, dy


def translate(selection: Iterable[str], dx: int, dy: int,
              size: GridSize) -> Selection:
    """Shift every key by (dx, dy), keeping only in-bounds results."""
    out: Selection = set()
    for y, x in cells_of(selection):
        ty, tx = y + dy, x + dx
        if size.contains(ty, tx):
            out.add(cell_key(ty, tx))
    return out
