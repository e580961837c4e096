"""Grid data type and its pure operations.

A grid is a ``list[list[str]]`` of ``height`` rows by ``width`` columns.
Each cell holds a lowercase ``#rrggbb`` color or :data:`EMPTY`.  Apart from
:func:`flood_fill`, every function returns a new grid and leaves its input
untouched.
"""

from collections import Counter, deque
from dataclasses import dataclass
from typing import Iterable

EMPTY = "transparent"

Grid = list[list[str]]


@dataclass(frozen=True)
class GridSize:
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Grid size must be positive, got {self.width}x{self.height}")

    @property
    def cells(self) -> int:
        return self.width * self.height

    def contains(self, y: int, x: int) -> bool:
        return 0 <= y < self.height and 0 <= x < self.width

    def to_dict(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class PanOffset:
    """Accumulated pan displacement in cells (positive = right / down)."""
    x: int = 0
    y: int = 0

    def moved(self, dx: int, dy: int) -> "PanOffset":
        return PanOffset(self.x + dx, self.y + dy)

    @property
    def is_zero(self) -> bool:
        return self.x == 0 and self.y == 0


def init_empty(size: GridSize) -> Grid:
    """Grid of the given size with every cell Empty."""
    return [[EMPTY] * size.width for _ in range(size.height)]


def copy_grid(grid: Grid) -> Grid:
    """Row-by-row copy; cells are immutable strings so this is a deep copy."""
    return [row[:] for row in grid]


def grid_size_of(grid: Grid) -> GridSize:
    return GridSize(len(grid[0]) if grid else 0, len(grid))


def resize(grid: Grid, new_size: GridSize) -> Grid:
    """Top-left aligned resize; the overlap is kept, new cells are Empty."""
    out: Grid = []
    for y in range(new_size.height):
        src = grid[y] if y < len(grid) else []
        row = [src[x] if x < len(src) else EMPTY for x in range(new_size.width)]
        out.append(row)
    return out


def flood_fill(grid: Grid, start_y: int, start_x: int, target_color: str,
               replacement_color: str, size: GridSize) -> None:
    """4-connected breadth-first fill, in place.

    Only cells equal to ``target_color`` reachable from the start cell are
    repainted.  Filling a color with itself does nothing.
    """
    if target_color == replacement_color:
        return

    queue: deque[tuple[int, int]] = deque([(start_y, start_x)])
    while queue:
        cy, cx = queue.popleft()
        if not size.contains(cy, cx):
            continue
        if grid[cy][cx] != target_color:
            continue
        grid[cy][cx] = replacement_color
        queue.append((cy + 1, cx))
        queue.append((cy - 1, cx))
        queue.append((cy, cx + 1))
        queue.append((cy, cx - 1))


def shift_by(grid: Grid, size: GridSize, dx: int, dy: int) -> Grid:
    """Translate the whole grid by (dx, dy) cells.

    Output cell (y, x) takes source (y - dy, x - dx); sources outside the
    grid give Empty.  Positive dx moves content right, positive dy down.
    """
    out = init_empty(size)
    for y in range(size.height):
        sy = y - dy
        if not 0 <= sy < size.height:
            continue
        src = grid[sy]
        row = out[y]
        for x in range(size.width):
            sx = x - dx
            if 0 <= sx < size.width:
                row[x] = src[sx]
    return out


def shift_up(grid: Grid, size: GridSize) -> Grid:
    return shift_by(grid, size, 0, -1)


def shift_down(grid: Grid, size: GridSize) -> Grid:
    return shift_by(grid, size, 0, 1)


def shift_left(grid: Grid, size: GridSize) -> Grid:
    return shift_by(grid, size, -1, 0)


def shift_right(grid: Grid, size: GridSize) -> Grid:
    return shift_by(grid, size, 1, 0)


# direction -> (dx, dy)
DIRECTIONS: dict[str, tuple[int, int]] = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}


def translate_cells(grid: Grid, cells: Iterable[tuple[int, int]],
                    dx: int, dy: int, size: GridSize) -> Grid:
    """Move a subset of cells by (dx, dy) and return the new grid.

    All source cells are cleared first, then each non-Empty source color is
    written at its destination.  Destinations outside the grid are dropped.
    """
    out = copy_grid(grid)
    moved = [(y, x, grid[y][x]) for y, x in cells if size.contains(y, x)]
    for y, x, _ in moved:
        out[y][x] = EMPTY
    for y, x, color in moved:
        if color == EMPTY:
            continue
        ty, tx = y + dy, x + dx
        if size.contains(ty, tx):
            out[ty][tx] = color
    return out


def stamp(grid: Grid, overlay: Grid, top: int, left: int,
          size: GridSize) -> Grid:
    """Paste the non-Empty cells of ``overlay`` with its top-left at (top, left)."""
    out = copy_grid(grid)
    for oy, row in enumerate(overlay):
        for ox, color in enumerate(row):
            if color == EMPTY:
                continue
            ty, tx = top + oy, left + ox
            if size.contains(ty, tx):
                out[ty][tx] = color
    return out


def overlay_from_mask(mask: Iterable[Iterable[bool]], color: str) -> Grid:
    """Turn a glyph/QR mask into a stampable overlay: True -> color."""
    return [[color if on else EMPTY for on in row] for row in mask]


def replace_color(grid: Grid, old_color: str, new_color: str) -> Grid:
    """Every cell equal to ``old_color`` becomes ``new_color``."""
    return [[new_color if c == old_color else c for c in row] for row in grid]


def apply_color_map(grid: Grid, mapping: dict[str, str]) -> Grid:
    return [[mapping.get(c, c) for c in row] for row in grid]


def unique_colors(grid: Grid) -> list[str]:
    """Distinct non-Empty colors in row-major first-seen order."""
    seen: dict[str, None] = {}
    for row in grid:
        for c in row:
            if c != EMPTY and c not in seen:
                seen[c] = None
    return list(seen)


def color_counts(grid: Grid) -> list[tuple[str, int]]:
    """(color, bead count) for non-Empty colors, most used first."""
    usage: Counter[str] = Counter()
    for row in grid:
        for c in row:
            if c != EMPTY:
                usage[c] += 1
    return sorted(usage.items(), key=lambda x: -x[1])


def is_valid_grid(grid: object, size: GridSize) -> bool:
    """True if ``grid`` is a list of ``size.height`` rows of ``size.width`` strings."""
    if not isinstance(grid, list) or len(grid) != size.height:
        return False
    for row in grid:
        if not isinstance(row, list) or len(row) != size.width:
            return False
        if not all(isinstance(c, str) for c in row):
            return False
    return True
