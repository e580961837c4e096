"""Raster output for patterns.

:func:`bead_circles` is the grid to pixel mapping shared by every
renderer: one filled circle per non-Empty cell, filling the cell minus a
1 px border.
"""

from pathlib import Path
from typing import Iterator, NamedTuple, Optional, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from . import selection as sel
from .colorspace import hex_to_rgb
from .grid import EMPTY, Grid

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
CELL_SIZE = 20
PADDING = 20
CAPTION = "beadboard - fuse bead pattern"
CAPTION_FONT_SIZE = 17
TEXT_OVERSAMPLE = 6
TEXT_COVERAGE = 0.5
EXPORT_BG = (255, 255, 255)
BOARD_BG = (235, 235, 235)
PEG_COLOR = (205, 205, 205)
SELECTION_OUTLINE = (30, 120, 255)


class BeadCircle(NamedTuple):
    y: int
    x: int
    cx: float
    cy: float
    radius: float
    rgb: tuple[int, int, int]


def bead_circles(grid: Grid, cell_size: int = CELL_SIZE,
                 ox: int = 0, oy: int = 0) -> Iterator[BeadCircle]:
    """Yield the circle to draw for every non-Empty cell."""
    radius = cell_size / 2 - 1
    for y, row in enumerate(grid):
        for x, color in enumerate(row):
            if color == EMPTY:
                continue
            yield BeadCircle(y, x,
                             ox + x * cell_size + cell_size / 2,
                             oy + y * cell_size + cell_size / 2,
                             radius, hex_to_rgb(color))


def _draw_circle(draw: ImageDraw.ImageDraw, c: BeadCircle,
                 fill: tuple[int, ...]) -> None:
    draw.ellipse([c.cx - c.radius, c.cy - c.radius,
                  c.cx + c.radius, c.cy + c.radius], fill=fill)


def load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Try to load a sans system font, fall back to default."""
    candidates = [
        "/System/Library/Fonts/Helvetica.ttc",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "arial.ttf",
    ]
    for path in candidates:
        try:
            return ImageFont.truetype(path, size)
        except (OSError, IOError):
            continue
    return ImageFont.load_default()


def text_mask(text: str, width: int, height: int) -> list[list[bool]]:
    """Rasterize ``text`` into a width x height cell mask.

    Each cell is on when at least half of its oversampled pixels are inked.
    The mask is trimmed to the glyphs; blank text gives ``[]``.
    """
    ow, oh = width * TEXT_OVERSAMPLE, height * TEXT_OVERSAMPLE
    canvas = Image.new("L", (ow, oh), 0)
    draw = ImageDraw.Draw(canvas)
    font = load_font(max(6, int(oh * 0.8)))
    bbox = draw.textbbox((0, 0), text, font=font)
    tw, th = bbox[2] - bbox[0], bbox[3] - bbox[1]
    draw.text(((ow - tw) // 2 - bbox[0], (oh - th) // 2 - bbox[1]), text, fill=255, font=font)

    ink = np.asarray(canvas, dtype=np.float64) / 255.0
    coverage = ink.reshape(height, TEXT_OVERSAMPLE, width, TEXT_OVERSAMPLE).mean(axis=(1, 3))
    mask = coverage >= TEXT_COVERAGE
    rows = np.flatnonzero(mask.any(axis=1))
    cols = np.flatnonzero(mask.any(axis=0))
    if len(rows) == 0:
        return []
    return mask[rows[0]:rows[-1] + 1, cols[0]:cols[-1] + 1].tolist()


def render_pattern_image(grid: Grid, cell_size: int = CELL_SIZE,
                         padding: int = PADDING,
                         caption: Optional[str] = CAPTION) -> Image.Image:
    """Export image: beads on white, padded, with a caption line."""
    n_rows = len(grid)
    n_cols = len(grid[0]) if n_rows else 0
    w = n_cols * cell_size + padding * 2
    h = n_rows * cell_size + padding * 2
    img = Image.new("RGB", (w, h), EXPORT_BG)
    draw = ImageDraw.Draw(img)

    for c in bead_circles(grid, cell_size, padding, padding):
        _draw_circle(draw, c, c.rgb)

    if caption:
        font = load_font(CAPTION_FONT_SIZE)
        bbox = draw.textbbox((0, 0), caption, font=font)
        tw = bbox[2] - bbox[0]
        th = bbox[3] - bbox[1]
        draw.text(((w - tw) // 2, h - th - 5), caption, fill=(0, 0, 0), font=font)
    return img


def render_board(grid: Grid, cell_size: int = CELL_SIZE,
                 selection: Optional[set[str]] = None,
                 drag_offset: tuple[int, int] = (0, 0),
                 overlay: Optional[Grid] = None,
                 anchor: tuple[int, int] = (0, 0)) -> Image.Image:
    """Editing view: pegs, beads, selection outline, move ghost and stamp preview."""
    n_rows = len(grid)
    n_cols = len(grid[0]) if n_rows else 0
    img = Image.new("RGBA", (n_cols * cell_size, n_rows * cell_size), BOARD_BG + (255,))
    draw = ImageDraw.Draw(img)

    peg_r = max(1, cell_size // 8)
    for y in range(n_rows):
        for x in range(n_cols):
            cx = x * cell_size + cell_size / 2
            cy = y * cell_size + cell_size / 2
            draw.ellipse([cx - peg_r, cy - peg_r, cx + peg_r, cy + peg_r], fill=PEG_COLOR)

    for c in bead_circles(grid, cell_size):
        _draw_circle(draw, c, c.rgb)

    # Translucent previews go on a separate layer
    layer = Image.new("RGBA", img.size, (0, 0, 0, 0))
    ldraw = ImageDraw.Draw(layer)

    if selection:
        dx, dy = drag_offset
        for y, x in sel.cells_of(selection):
            if (dx or dy) and 0 <= y < n_rows and 0 <= x < n_cols and grid[y][x] != EMPTY:
                ghost = BeadCircle(y + dy, x + dx,
                                   (x + dx) * cell_size + cell_size / 2,
                                   (y + dy) * cell_size + cell_size / 2,
                                   cell_size / 2 - 1, hex_to_rgb(grid[y][x]))
                _draw_circle(ldraw, ghost, ghost.rgb + (140,))
            x0, y0 = x * cell_size, y * cell_size
            ldraw.rectangle([x0, y0, x0 + cell_size - 1, y0 + cell_size - 1],
                            outline=SELECTION_OUTLINE + (255,), width=max(1, cell_size // 10))

    if overlay:
        top, left = anchor
        for c in bead_circles(overlay, cell_size, left * cell_size, top * cell_size):
            _draw_circle(ldraw, c, c.rgb + (160,))

    return Image.alpha_composite(img, layer)


def save_png(path: Union[str, Path], grid: Grid, cell_size: int = CELL_SIZE) -> None:
    render_pattern_image(grid, cell_size).save(str(path))
