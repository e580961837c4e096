"""Pattern editor: owns the current grid and routes every edit through history.

Edits are synchronous.  Generation runs in a :class:`GenerationSession`;
at most one is live per editor and starting a new one cancels the old.
Results from a session that is no longer current are dropped.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Union

from . import grid as gm
from . import patternfile
from . import selection as sel
from .config import EditorConfig, choose_multiplier
from .generator import GenerationRequest, GenerationSession, ImageSource
from .grid import EMPTY, Grid, GridSize, PanOffset
from .history import HistoryStore
from .normalize import normalize
from .tools import SelectTool, TextStampTool, Tool, make_tool

logger = logging.getLogger(__name__)

Dispatch = Callable[[Callable[[], None]], None]
Runner = Callable[[GenerationSession], None]


@dataclass
class ImportResult:
    ok: bool
    error: Optional[str] = None


def _start_thread(session: GenerationSession) -> None:
    session.start()


class PatternEditor:
    """Editing state for one pattern.

    Args:
        config: defaults (grid size, color, scale, sampling multipliers)
        dispatch: runs a callable on the thread that owns the editor; used
            to hand generation results back.  By default a result produced
            on the owning thread is applied at once; one produced on any
            other thread waits in a queue until :meth:`poll` is called.
        runner: starts a generation session.  Defaults to a daemon thread.
    """

    def __init__(self, config: Optional[EditorConfig] = None,
                 dispatch: Optional[Dispatch] = None,
                 runner: Optional[Runner] = None):
        self.config = config or EditorConfig()
        self._dispatch = dispatch or self._deliver
        self._runner = runner or _start_thread
        self._lock = threading.RLock()
        self._owner = threading.get_ident()
        self._pending: "queue.SimpleQueue[Callable[[], None]]" = queue.SimpleQueue()

        self.size: GridSize = self.config.grid_size
        self.grid: Grid = gm.init_empty(self.size)
        self.history = HistoryStore(self.grid)

        self.current_color: str = self.config.default_color
        self.scale: int = self.config.scale_percent
        self.pan_offset = PanOffset()
        self.image: Optional[ImageSource] = None

        self.selection: sel.Selection = set()
        self.drag_offset: tuple[int, int] = (0, 0)
        self.pointer_is_down = False

        self._tools: dict[str, Tool] = {}
        self.tool: Tool = self._get_tool("paint")
        self._session: Optional[GenerationSession] = None

    # ------------------------------------------------------------------
    # Commit / history
    # ------------------------------------------------------------------

    def commit(self, new_grid: Grid) -> None:
        """Make ``new_grid`` current and record it as one history entry."""
        self.grid = new_grid
        self.history.push(new_grid)

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def _restore(self, grid: Optional[Grid]) -> bool:
        if grid is None:
            return False
        self.grid = grid
        size = gm.grid_size_of(grid)
        if size != self.size:
            self.size = size
            self.selection = sel.clip(self.selection, size)
        return True

    def undo(self) -> bool:
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        return self._restore(self.history.redo())

    # ------------------------------------------------------------------
    # Tools and pointer gestures
    # ------------------------------------------------------------------

    def _get_tool(self, name: str) -> Tool:
        if name not in self._tools:
            self._tools[name] = make_tool(name)
        return self._tools[name]

    def set_tool(self, tool: Union[str, Tool]) -> Tool:
        new = self._get_tool(tool) if isinstance(tool, str) else tool
        if new is not self.tool:
            self.tool.on_deactivate(self)
            self.tool = new
        return new

    @property
    def select_tool(self) -> SelectTool:
        return self._get_tool("select")  # type: ignore[return-value]

    @property
    def text_tool(self) -> TextStampTool:
        return self._get_tool("text")  # type: ignore[return-value]

    def pointer_down(self, y: int, x: int, subtract: bool = False) -> None:
        self.pointer_is_down = True
        if self.size.contains(y, x):
            self.tool.on_pointer_down(self, y, x, subtract)

    def pointer_move(self, y: int, x: int, subtract: bool = False) -> None:
        if self.size.contains(y, x):
            self.tool.on_pointer_move(self, y, x, subtract)

    def pointer_up(self) -> None:
        self.pointer_is_down = False
        self.tool.on_pointer_up(self)

    # ------------------------------------------------------------------
    # Grid edits
    # ------------------------------------------------------------------

    def set_cell(self, y: int, x: int, value: str) -> bool:
        """Paint (or erase with EMPTY) one cell. No history entry if unchanged."""
        if not self.size.contains(y, x) or self.grid[y][x] == value:
            return False
        new = gm.copy_grid(self.grid)
        new[y][x] = value
        self.commit(new)
        return True

    def fill(self, y: int, x: int, color: str) -> bool:
        """Bucket fill from (y, x) with ``color``."""
        if not self.size.contains(y, x):
            return False
        target = self.grid[y][x]
        if target == color:
            return False
        new = gm.copy_grid(self.grid)
        gm.flood_fill(new, y, x, target, color, self.size)
        self.commit(new)
        return True

    def replace_color(self, old_color: str, new_color: Optional[str]) -> bool:
        if not new_color or old_color == new_color:
            return False
        new = gm.replace_color(self.grid, old_color, new_color)
        if new == self.grid:
            return False
        self.commit(new)
        return True

    def normalize_colors(self, threshold: Optional[float] = None) -> bool:
        """Collapse near-identical colors in the grid, one history entry."""
        if threshold is None:
            threshold = self.config.normalize_threshold
        mapping = normalize(gm.unique_colors(self.grid), threshold)
        if all(k == v for k, v in mapping.items()):
            return False
        self.commit(gm.apply_color_map(self.grid, mapping))
        return True

    def stamp(self, overlay: Grid, top: int, left: int) -> bool:
        new = gm.stamp(self.grid, overlay, top, left, self.size)
        if new == self.grid:
            return False
        self.commit(new)
        return True

    def move_selection(self, dx: int, dy: int) -> bool:
        """Translate the selected cells, clamped to the grid, one history entry."""
        if not self.selection:
            return False
        dx, dy = sel.clamp_offset(self.selection, dx, dy, self.size)
        if dx == 0 and dy == 0:
            return False
        cells = sel.cells_of(self.selection)
        self.commit(gm.translate_cells(self.grid, cells, dx, dy, self.size))
        self.selection = sel.translate(self.selection, dx, dy, self.size)
        return True

    def clear_selection(self) -> None:
        self.selection = set()
        self.drag_offset = (0, 0)

    def clear(self) -> None:
        """Empty the grid, drop the source image and reset panning."""
        self.cancel_generation()
        self.commit(gm.init_empty(self.size))
        self.image = None
        self.pan_offset = PanOffset()
        self.clear_selection()
        self.text_tool.set_overlay(self, None)

    # ------------------------------------------------------------------
    # Overlay (text / QR stamps)
    # ------------------------------------------------------------------

    def set_overlay(self, overlay: Optional[Grid]) -> None:
        """Hold ``overlay`` as a floating stamp and activate the text tool."""
        self.set_tool("text")
        self.text_tool.set_overlay(self, overlay)

    @property
    def overlay(self) -> Optional[Grid]:
        return self.text_tool.overlay

    # ------------------------------------------------------------------
    # Size, panning
    # ------------------------------------------------------------------

    def set_grid_size(self, width: int, height: int) -> bool:
        new_size = GridSize(width, height)
        if new_size == self.size:
            return False
        self.cancel_generation()
        self.size = new_size
        self.selection = sel.clip(self.selection, new_size)
        self.commit(gm.resize(self.grid, new_size))
        return True

    def set_grid_size_locked(self, value: int) -> bool:
        """Set the longer side to ``value`` and keep the aspect ratio."""
        aspect = self.size.width / self.size.height
        if aspect >= 1:
            width, height = value, round(value / aspect)
        else:
            width, height = round(value * aspect), value
        floor = self.config.min_grid_side
        return self.set_grid_size(max(floor, width), max(floor, height))

    def pan(self, direction: str) -> None:
        """Shift the grid one cell and remember the offset for regeneration."""
        try:
            dx, dy = gm.DIRECTIONS[direction]
        except KeyError:
            raise ValueError(f"Unknown pan direction: {direction!r}") from None
        self.commit(gm.shift_by(self.grid, self.size, dx, dy))
        self.pan_offset = self.pan_offset.moved(dx, dy)

    def recenter(self) -> Optional[GenerationSession]:
        """Undo the accumulated pan now, then regenerate from the origin if possible."""
        offset = self.pan_offset
        if offset.is_zero:
            return None
        self.commit(gm.shift_by(self.grid, self.size, -offset.x, -offset.y))
        self.pan_offset = PanOffset()
        if self.image is not None:
            return self.regenerate()
        return None

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def load_image(self, source: ImageSource, scale: Optional[int] = None,
                   multiplier: Optional[int] = None) -> GenerationSession:
        """Use ``source`` as the pattern image and generate from the origin.

        ``scale`` replaces the current scale; ``multiplier`` applies to this
        first generation only (see :func:`beadboard.config.qr_preset`).
        """
        self.image = source
        self.pan_offset = PanOffset()
        if scale is not None:
            self.scale = scale
        return self.regenerate(multiplier)

    def set_scale(self, scale: int, regenerate: bool = True) -> Optional[GenerationSession]:
        self.scale = scale
        if regenerate and self.image is not None:
            return self.regenerate()
        return None

    def generation_request(self, multiplier: Optional[int] = None) -> GenerationRequest:
        if self.image is None:
            raise ValueError("No source image loaded")
        return GenerationRequest(
            image=self.image,
            scale_percent=self.scale,
            grid_width=self.size.width,
            grid_height=self.size.height,
            multiplier=multiplier or choose_multiplier(self.size, self.config),
            offset_cells_x=self.pan_offset.x,
            offset_cells_y=self.pan_offset.y,
        )

    def regenerate(self, multiplier: Optional[int] = None) -> Optional[GenerationSession]:
        """Start generation for the current image, scale and pan offset."""
        if self.image is None:
            return None
        session = GenerationSession(self.generation_request(multiplier), self._on_generated)
        with self._lock:
            if self._session is not None:
                self._session.cancel()
            self._session = session
        self._runner(session)
        return session

    def cancel_generation(self) -> None:
        with self._lock:
            if self._session is not None:
                self._session.cancel()
                self._session = None

    @property
    def generating(self) -> bool:
        session = self._session
        return session is not None and not session.done

    def _on_generated(self, session: GenerationSession, grid: Grid) -> None:
        self._dispatch(lambda: self.apply_generation(session, grid))

    def _deliver(self, fn: Callable[[], None]) -> None:
        if threading.get_ident() == self._owner:
            fn()
        else:
            self._pending.put(fn)

    def poll(self) -> int:
        """Apply generation results queued by worker threads.

        Call from the thread that created the editor.  Returns the number of
        deliveries handled, applied or dropped.
        """
        handled = 0
        while True:
            try:
                fn = self._pending.get_nowait()
            except queue.Empty:
                return handled
            fn()
            handled += 1

    def apply_generation(self, session: GenerationSession, grid: Grid) -> bool:
        """Install a finished generation if it is still the current one."""
        with self._lock:
            if session is not self._session or session.cancelled:
                logger.debug("Dropping result of superseded %r", session)
                return False
            self._session = None
            if gm.grid_size_of(grid) != self.size:
                logger.debug("Dropping result of %r: grid size changed", session)
                return False
            self.commit(grid)
        return True

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_json(self) -> str:
        return patternfile.dumps(self.size, self.scale, self.grid)

    def import_json(self, text: str) -> ImportResult:
        """Replace the grid with a pattern file. Invalid files change nothing."""
        try:
            pf = patternfile.loads(text)
        except patternfile.PatternFileError as e:
            logger.warning("Rejected pattern import: %s", e)
            return ImportResult(False, str(e))

        self.cancel_generation()
        if pf.grid_size != self.size:
            self.grid = gm.resize(self.grid, pf.grid_size)
            self.size = pf.grid_size
            self.selection = sel.clip(self.selection, pf.grid_size)
        self.commit(pf.pattern)
        self.scale = pf.scale
        return ImportResult(True)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def color_counts(self) -> list[tuple[str, int]]:
        return gm.color_counts(self.grid)

    def cell(self, y: int, x: int) -> Optional[str]:
        if not self.size.contains(y, x):
            return None
        return self.grid[y][x]

    def is_empty(self) -> bool:
        return all(c == EMPTY for row in self.grid for c in row)
