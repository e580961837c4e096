"""Editing tools.

Each tool interprets pointer gestures on its own; the editor forwards
``on_pointer_down`` / ``on_pointer_move`` / ``on_pointer_up`` to whichever
tool is active.  Coordinates are grid cells; the editor has already
dropped out-of-bounds positions.
"""

from typing import TYPE_CHECKING, Optional

from . import selection as sel
from .grid import EMPTY, Grid

if TYPE_CHECKING:
    from .editor import PatternEditor


class Tool:
    name = "none"

    def on_pointer_down(self, editor: "PatternEditor", y: int, x: int,
                        subtract: bool = False) -> None:
        pass

    def on_pointer_move(self, editor: "PatternEditor", y: int, x: int,
                        subtract: bool = False) -> None:
        pass

    def on_pointer_up(self, editor: "PatternEditor") -> None:
        pass

    def on_deactivate(self, editor: "PatternEditor") -> None:
        pass


class PaintTool(Tool):
    """Sets each touched cell to the current color, one history entry per cell."""

    name = "paint"

    def on_pointer_down(self, editor, y, x, subtract=False):
        editor.set_cell(y, x, editor.current_color)

    def on_pointer_move(self, editor, y, x, subtract=False):
        if editor.pointer_is_down:
            editor.set_cell(y, x, editor.current_color)


class EraseTool(PaintTool):
    name = "erase"

    def on_pointer_down(self, editor, y, x, subtract=False):
        editor.set_cell(y, x, EMPTY)

    def on_pointer_move(self, editor, y, x, subtract=False):
        if editor.pointer_is_down:
            editor.set_cell(y, x, EMPTY)


class EyedropperTool(Tool):
    """Adopts the clicked color and switches back to painting."""

    name = "eyedropper"

    def on_pointer_down(self, editor, y, x, subtract=False):
        color = editor.grid[y][x]
        if color != EMPTY:
            editor.current_color = color
            editor.set_tool("paint")


class BucketTool(Tool):
    name = "bucket"

    def on_pointer_down(self, editor, y, x, subtract=False):
        editor.fill(y, x, editor.current_color)


class SelectTool(Tool):
    """Cell selection and selection moves.

    ``mode`` is "single" (toggle one cell, drag to extend) or "region"
    (toggle the same-color connected region).  Pressing on an already
    selected cell without the subtract modifier drags the selection
    instead; the move is committed on release.
    """

    name = "select"

    def __init__(self, mode: str = "single"):
        if mode not in ("single", "region"):
            raise ValueError(f"Unknown select mode: {mode!r}")
        self.mode = mode
        self._move_origin: Optional[tuple[int, int]] = None

    @property
    def moving(self) -> bool:
        return self._move_origin is not None

    def on_pointer_down(self, editor, y, x, subtract=False):
        key = sel.cell_key(y, x)
        if not subtract and key in editor.selection:
            self._move_origin = (y, x)
            editor.drag_offset = (0, 0)
            return

        if self.mode == "region":
            region = sel.same_color_region(editor.grid, y, x, editor.size)
            if subtract:
                editor.selection -= region
            else:
                editor.selection |= region
        elif subtract:
            editor.selection.discard(key)
        else:
            editor.selection.add(key)

    def on_pointer_move(self, editor, y, x, subtract=False):
        if self._move_origin is not None:
            oy, ox = self._move_origin
            dx, dy = sel.clamp_offset(editor.selection, x - ox, y - oy, editor.size)
            editor.drag_offset = (dx, dy)
        elif self.mode == "single" and editor.pointer_is_down:
            key = sel.cell_key(y, x)
            if subtract:
                editor.selection.discard(key)
            else:
                editor.selection.add(key)

    def on_pointer_up(self, editor):
        if self._move_origin is None:
            return
        dx, dy = editor.drag_offset
        self._move_origin = None
        editor.drag_offset = (0, 0)
        editor.move_selection(dx, dy)

    def on_deactivate(self, editor):
        self._move_origin = None
        editor.drag_offset = (0, 0)


class TextStampTool(Tool):
    """Floating overlay that follows the pointer and is stamped on click."""

    name = "text"

    def __init__(self) -> None:
        self.overlay: Optional[Grid] = None
        self.anchor: tuple[int, int] = (0, 0)  # (top, left)

    def set_overlay(self, editor: "PatternEditor", overlay: Optional[Grid]) -> None:
        self.overlay = overlay
        self.anchor = (0, 0)
        if overlay:
            self._follow(editor, editor.size.height // 2, editor.size.width // 2)

    def _follow(self, editor: "PatternEditor", y: int, x: int) -> None:
        if not self.overlay:
            return
        oh = len(self.overlay)
        ow = len(self.overlay[0]) if oh else 0
        top = max(0, min(y - oh // 2, editor.size.height - oh))
        left = max(0, min(x - ow // 2, editor.size.width - ow))
        self.anchor = (top, left)

    def on_pointer_move(self, editor, y, x, subtract=False):
        self._follow(editor, y, x)

    def on_pointer_down(self, editor, y, x, subtract=False):
        if not self.overlay:
            return
        self._follow(editor, y, x)
        top, left = self.anchor
        editor.stamp(self.overlay, top, left)
        self.overlay = None

    def on_deactivate(self, editor):
        self.overlay = None


def make_tool(name: str) -> Tool:
    tools = {
        "none": Tool,
        "paint": PaintTool,
        "erase": EraseTool,
        "eyedropper": EyedropperTool,
        "bucket": BucketTool,
        "select": SelectTool,
        "text": TextStampTool,
    }
    try:
        return tools[name]()
    except KeyError:
        raise ValueError(f"Unknown tool: {name!r}") from None
