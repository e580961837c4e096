"""Pattern JSON files.

::

    {
      "gridSize": {"width": 29, "height": 29},
      "scale": 100,
      "perlerPattern": [["#rrggbb" | "transparent", ...], ...]
    }
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .grid import EMPTY, Grid, GridSize, copy_grid, is_valid_grid

logger = logging.getLogger(__name__)

DEFAULT_SCALE = 100
_HEX_CELL = re.compile(r"#[0-9a-fA-F]{6}")


class PatternFileError(ValueError):
    """A pattern payload is malformed or incomplete."""


@dataclass
class PatternFile:
    grid_size: GridSize
    scale: int
    pattern: Grid

    def to_dict(self) -> dict:
        return {
            "gridSize": self.grid_size.to_dict(),
            "scale": self.scale,
            "perlerPattern": copy_grid(self.pattern),
        }


def dumps(grid_size: GridSize, scale: int, pattern: Grid) -> str:
    return json.dumps(PatternFile(grid_size, scale, pattern).to_dict(), indent=2)


def _parse_size(raw: object) -> GridSize:
    if not isinstance(raw, dict):
        raise PatternFileError("gridSize must be an object")
    w, h = raw.get("width"), raw.get("height")
    if not isinstance(w, int) or not isinstance(h, int) or isinstance(w, bool) or isinstance(h, bool):
        raise PatternFileError("gridSize.width and gridSize.height must be integers")
    try:
        return GridSize(w, h)
    except ValueError as e:
        raise PatternFileError(str(e)) from e


def _normalize_cell(c: str) -> str:
    if c == EMPTY:
        return EMPTY
    if not _HEX_CELL.fullmatch(c):
        raise PatternFileError(f"Invalid cell color {c!r}: expected #rrggbb or {EMPTY!r}")
    return c.lower()


def from_dict(data: object) -> PatternFile:
    """Validate a decoded payload."""
    if not isinstance(data, dict):
        raise PatternFileError("Pattern file must be a JSON object")
    if not data.get("perlerPattern") or not data.get("gridSize"):
        raise PatternFileError("Invalid pattern file: missing perlerPattern or gridSize")

    size = _parse_size(data["gridSize"])
    pattern = data["perlerPattern"]
    if not is_valid_grid(pattern, size):
        raise PatternFileError(
            f"perlerPattern does not match gridSize {size.width}x{size.height}")

    scale = data.get("scale") or DEFAULT_SCALE
    if not isinstance(scale, (int, float)) or isinstance(scale, bool):
        raise PatternFileError("scale must be a number")

    return PatternFile(size, int(scale), [[_normalize_cell(c) for c in row] for row in pattern])


def loads(text: str) -> PatternFile:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise PatternFileError(f"Error importing pattern: {e}") from e
    return from_dict(data)


def save(path: Union[str, Path], grid_size: GridSize, scale: int, pattern: Grid) -> None:
    Path(path).write_text(dumps(grid_size, scale, pattern), encoding="utf-8")


def load(path: Union[str, Path]) -> PatternFile:
    return loads(Path(path).read_text(encoding="utf-8"))
