"""Image to bead grid conversion by per-cell dominant color voting.

The source image is drawn, aspect-preserved and centered, onto a
transparent sampling canvas of ``multiplier`` pixels per cell per axis.
Every cell then builds a coarse HSV histogram of its opaque pixels
(24 hue x 6 saturation x 6 value bins), each pixel weighted by
``0.7 + 0.3 * saturation``.  The cell color is the average RGB of the
heaviest bin, so a cell straddling a hard edge takes one side's color
instead of a muddy blend.  Cells without opaque pixels stay Empty.
"""

import base64
import binascii
import io
import itertools
import logging
import math
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np
from PIL import Image

from .colorspace import rgb_to_hex, rgb_to_hsv_array
from .grid import EMPTY, Grid, GridSize, init_empty

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
BINS_H = 24
BINS_S = 6
BINS_V = 6
N_BINS = BINS_H * BINS_S * BINS_V
ALPHA_CUTOFF = 10  # pixels with alpha <= this are not part of the image
DEFAULT_MULTIPLIER = 12

ImageSource = Union[bytes, bytearray, str, Path, Image.Image]


class GenerationError(RuntimeError):
    """The source image could not be decoded."""


class GenerationCancelled(Exception):
    """Raised inside a generation run once its session is cancelled."""


@dataclass(frozen=True)
class GenerationRequest:
    """Everything the background worker needs to build one grid."""

    image: ImageSource
    scale_percent: float
    grid_width: int
    grid_height: int
    multiplier: int = DEFAULT_MULTIPLIER
    offset_cells_x: int = 0
    offset_cells_y: int = 0

    @property
    def grid_size(self) -> GridSize:
        return GridSize(self.grid_width, self.grid_height)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def decode_image(source: ImageSource) -> Image.Image:
    """Decode ``source`` into an RGBA image.

    Accepts raw bytes, a ``data:`` URL, a file path, or a PIL image.
    """
    if isinstance(source, Image.Image):
        return source.convert("RGBA")

    try:
        if isinstance(source, (bytes, bytearray)):
            fp: Union[io.BytesIO, str, Path] = io.BytesIO(bytes(source))
        elif isinstance(source, str) and source.startswith("data:"):
            _header, _, payload = source.partition(",")
            fp = io.BytesIO(base64.b64decode(payload, validate=False))
        else:
            fp = source
        with Image.open(fp) as img:
            return img.convert("RGBA")
    except (OSError, ValueError, binascii.Error) as e:
        raise GenerationError(f"Cannot decode image: {e}") from e


# ---------------------------------------------------------------------------
# Sampling canvas
# ---------------------------------------------------------------------------

def draw_rect(img_w: int, img_h: int, sample_w: int, sample_h: int,
              scale_percent: float) -> tuple[float, float, float, float]:
    """Centered, aspect-preserving draw rectangle (x, y, w, h) on the canvas."""
    img_aspect = img_w / img_h
    grid_aspect = sample_w / sample_h
    if img_aspect > grid_aspect:
        w = sample_w * (scale_percent / 100.0)
        h = w / img_aspect
    else:
        h = sample_h * (scale_percent / 100.0)
        w = h * img_aspect
    return (sample_w - w) / 2.0, (sample_h - h) / 2.0, w, h


def _round(v: float) -> int:
    return int(math.floor(v + 0.5))


def rasterize(img: Image.Image, size: GridSize, multiplier: int,
              scale_percent: float, offset_cells_x: int = 0,
              offset_cells_y: int = 0) -> np.ndarray:
    """Draw ``img`` onto the sampling canvas and return it as (H, W, 4) uint8.

    Only the visible part of the scaled image is resampled, so extreme
    scale factors cost no more than the canvas itself.
    """
    sample_w = size.width * multiplier
    sample_h = size.height * multiplier
    canvas = Image.new("RGBA", (sample_w, sample_h), (0, 0, 0, 0))

    if img.width == 0 or img.height == 0 or scale_percent <= 0:
        return np.array(canvas)

    x, y, w, h = draw_rect(img.width, img.height, sample_w, sample_h, scale_percent)
    x += offset_cells_x * multiplier
    y += offset_cells_y * multiplier

    left, top = _round(x), _round(y)
    right, bottom = _round(x + w), _round(y + h)
    if right <= left or bottom <= top:
        return np.array(canvas)

    vis_l, vis_t = max(0, left), max(0, top)
    vis_r, vis_b = min(sample_w, right), min(sample_h, bottom)
    if vis_r <= vis_l or vis_b <= vis_t:
        return np.array(canvas)

    # Visible window mapped back into source pixel coordinates
    sx = img.width / (right - left)
    sy = img.height / (bottom - top)
    box = ((vis_l - left) * sx, (vis_t - top) * sy,
           (vis_r - left) * sx, (vis_b - top) * sy)
    part = img.resize((vis_r - vis_l, vis_b - vis_t),
                      Image.Resampling.BILINEAR, box=box)
    canvas.paste(part, (vis_l, vis_t))
    return np.array(canvas)


# ---------------------------------------------------------------------------
# Dominant color voting
# ---------------------------------------------------------------------------

def _bin_indices(hsv: np.ndarray) -> np.ndarray:
    h_bin = np.minimum(BINS_H - 1, np.floor(hsv[..., 0] / 360.0 * BINS_H)).astype(np.int64)
    s_bin = np.minimum(BINS_S - 1, np.floor(hsv[..., 1] * BINS_S)).astype(np.int64)
    v_bin = np.minimum(BINS_V - 1, np.floor(hsv[..., 2] * BINS_V)).astype(np.int64)
    return h_bin * (BINS_S * BINS_V) + s_bin * BINS_V + v_bin


def _dominant_row(block: np.ndarray, n_cols: int, multiplier: int) -> list[str]:
    """Dominant colors for one row of cells.

    block: (multiplier, n_cols * multiplier, 4) slice of the sampling canvas.
    """
    m = multiplier
    # (m, n_cols, m, 4) -> (n_cols, m*m, 4): one pixel list per cell
    cells = block.reshape(m, n_cols, m, 4).transpose(1, 0, 2, 3).reshape(n_cols, m * m, 4)
    opaque = cells[..., 3] > ALPHA_CUTOFF
    if not opaque.any():
        return [EMPTY] * n_cols

    rgb = cells[..., :3].astype(np.float64)
    hsv = rgb_to_hsv_array(cells[..., :3])
    weight = 0.7 + 0.3 * hsv[..., 1]

    cell_ids = np.broadcast_to(np.arange(n_cols)[:, None], opaque.shape)
    flat = (cell_ids * N_BINS + _bin_indices(hsv))[opaque]
    w = weight[opaque]
    length = n_cols * N_BINS

    count = np.bincount(flat, weights=w, minlength=length).reshape(n_cols, N_BINS)
    sums = [
        np.bincount(flat, weights=rgb[..., ch][opaque] * w,
                    minlength=length).reshape(n_cols, N_BINS)
        for ch in range(3)
    ]

    # argmax keeps the lowest bin index on ties
    best = count.argmax(axis=1)
    cols = np.arange(n_cols)
    best_count = count[cols, best]

    out: list[str] = []
    for cx in range(n_cols):
        c = best_count[cx]
        if c <= 0:
            out.append(EMPTY)
            continue
        b = best[cx]
        out.append(rgb_to_hex(sums[0][cx, b] / c, sums[1][cx, b] / c, sums[2][cx, b] / c))
    return out


def generate_dominant_cell_pattern(
    img: Image.Image, scale_percent: float, size: GridSize,
    multiplier: int = DEFAULT_MULTIPLIER,
    offset_cells_x: int = 0, offset_cells_y: int = 0,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> Grid:
    """Build a grid from an already decoded image."""
    if multiplier < 1:
        raise ValueError(f"multiplier must be >= 1, got {multiplier}")

    canvas = rasterize(img.convert("RGBA"), size, multiplier, scale_percent,
                       offset_cells_x, offset_cells_y)
    grid: Grid = []
    for cy in range(size.height):
        if should_cancel is not None and should_cancel():
            raise GenerationCancelled()
        block = canvas[cy * multiplier:(cy + 1) * multiplier]
        grid.append(_dominant_row(block, size.width, multiplier))
    return grid


def generate_pattern(request: GenerationRequest,
                     should_cancel: Optional[Callable[[], bool]] = None) -> Grid:
    """Run one generation request.

    A source that cannot be decoded gives an all-Empty grid of the requested
    size; the failure is logged.
    """
    size = request.grid_size
    try:
        img = decode_image(request.image)
    except GenerationError:
        logger.exception("Pattern generation failed for a %dx%d grid",
                         size.width, size.height)
        return init_empty(size)

    logger.debug("Generating %dx%d pattern (scale=%s%%, multiplier=%d, offset=%d,%d)",
                 size.width, size.height, request.scale_percent, request.multiplier,
                 request.offset_cells_x, request.offset_cells_y)
    return generate_dominant_cell_pattern(
        img, request.scale_percent, size, request.multiplier,
        request.offset_cells_x, request.offset_cells_y, should_cancel)


# ---------------------------------------------------------------------------
# Background sessions
# ---------------------------------------------------------------------------

class GenerationSession:
    """One-shot generation request that can be run in the background.

    ``on_complete(session, grid)`` is called from the running thread only
    if the session was not cancelled.  A cancelled session never reports a
    result.
    """

    _ids = itertools.count(1)

    def __init__(self, request: GenerationRequest,
                 on_complete: Optional[Callable[["GenerationSession", Grid], None]] = None):
        self.request = request
        self.id = next(self._ids)
        self.result: Optional[Grid] = None
        self._on_complete = on_complete
        self._cancelled = threading.Event()
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def __repr__(self) -> str:
        return f"<GenerationSession #{self.id} {self.request.grid_width}x{self.request.grid_height}>"

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def start(self) -> "GenerationSession":
        """Run in a daemon thread and return immediately."""
        self._thread = threading.Thread(
            target=self.run, name=f"generation-{self.id}", daemon=True)
        self._thread.start()
        return self

    def run(self) -> Optional[Grid]:
        """Run on the calling thread. Returns the grid, or None if cancelled."""
        try:
            if self.cancelled:
                return None
            try:
                grid = generate_pattern(self.request, should_cancel=self._cancelled.is_set)
            except GenerationCancelled:
                logger.debug("%r cancelled mid-run", self)
                return None
            if self.cancelled:
                logger.debug("%r finished after cancellation, result dropped", self)
                return None
            self.result = grid
            if self._on_complete is not None:
                self._on_complete(self, grid)
            return grid
        finally:
            self._done.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the run has finished. Returns False on timeout."""
        return self._done.wait(timeout)
