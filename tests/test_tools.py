"""Tests for editing tools driven through pointer gestures."""
import pytest

from beadboard.grid import EMPTY
from beadboard.tools import PaintTool, SelectTool, make_tool

from conftest import BLUE, GREEN, RED


def click(editor, y, x, subtract=False):
    editor.pointer_down(y, x, subtract)
    editor.pointer_up()


def drag(editor, path, subtract=False):
    (y0, x0), rest = path[0], path[1:]
    editor.pointer_down(y0, x0, subtract)
    for y, x in rest:
        editor.pointer_move(y, x, subtract)
    editor.pointer_up()


class TestPaintAndErase:
    def test_paint_drag(self, editor):
        editor.current_color = RED
        drag(editor, [(0, 0), (0, 1), (0, 2)])
        assert editor.grid[0][:3] == [RED] * 3
        assert len(editor.history) == 4

    def test_move_without_press_does_not_paint(self, editor):
        editor.pointer_move(1, 1)
        assert editor.is_empty()

    def test_out_of_bounds_ignored(self, editor):
        drag(editor, [(-1, 0), (9, 9), (0, 5)])
        assert editor.is_empty()
        assert len(editor.history) == 1

    def test_erase(self, editor):
        editor.fill(0, 0, RED)
        editor.set_tool("erase")
        drag(editor, [(2, 2), (2, 3)])
        assert editor.cell(2, 2) == EMPTY and editor.cell(2, 3) == EMPTY
        assert editor.cell(2, 1) == RED


class TestEyedropperAndBucket:
    def test_eyedropper_adopts_color(self, editor):
        editor.set_cell(1, 1, BLUE)
        editor.set_tool("eyedropper")
        click(editor, 1, 1)
        assert editor.current_color == BLUE
        assert isinstance(editor.tool, PaintTool)

    def test_eyedropper_ignores_empty(self, editor):
        editor.set_tool("eyedropper")
        click(editor, 0, 0)
        assert editor.current_color == "#000000"
        assert editor.tool.name == "eyedropper"

    def test_bucket(self, editor):
        editor.set_cell(0, 2, BLUE)
        editor.set_cell(1, 2, BLUE)
        editor.current_color = GREEN
        editor.set_tool("bucket")
        click(editor, 0, 2)
        assert editor.cell(0, 2) == GREEN and editor.cell(1, 2) == GREEN
        assert editor.cell(0, 0) == EMPTY


class TestSelectTool:
    def test_single_click_and_subtract(self, editor):
        editor.set_tool("select")
        click(editor, 0, 0)
        click(editor, 1, 1)
        assert editor.selection == {"0,0", "1,1"}
        click(editor, 0, 0, subtract=True)
        assert editor.selection == {"1,1"}

    def test_drag_extends(self, editor):
        editor.set_tool("select")
        drag(editor, [(0, 0), (0, 1), (1, 1)])
        assert editor.selection == {"0,0", "0,1", "1,1"}

    def test_region_mode(self, editor):
        editor.set_cell(0, 0, RED)
        editor.set_cell(0, 1, RED)
        editor.set_cell(4, 4, RED)
        editor.select_tool.mode = "region"
        editor.set_tool("select")
        click(editor, 0, 0)
        assert editor.selection == {"0,0", "0,1"}
        click(editor, 0, 1, subtract=True)
        assert editor.selection == set()

    def test_drag_selection_moves_cells(self, editor):
        editor.set_cell(0, 0, RED)
        editor.set_tool("select")
        click(editor, 0, 0)
        entries = len(editor.history)

        editor.pointer_down(0, 0)
        editor.pointer_move(0, 4)
        assert editor.drag_offset == (4, 0)
        editor.pointer_move(3, 4)
        assert editor.drag_offset == (4, 3)
        editor.pointer_up()

        assert editor.cell(3, 4) == RED
        assert editor.cell(0, 0) == EMPTY
        assert editor.selection == {"3,4"}
        assert editor.drag_offset == (0, 0)
        assert len(editor.history) == entries + 1

    def test_switching_tool_abandons_move(self, editor):
        editor.set_cell(0, 0, RED)
        editor.set_tool("select")
        click(editor, 0, 0)
        editor.pointer_down(0, 0)
        editor.pointer_move(0, 2)
        editor.set_tool("paint")
        editor.pointer_up()
        assert editor.cell(0, 0) == RED
        assert editor.drag_offset == (0, 0)

    def test_bad_mode(self):
        with pytest.raises(ValueError):
            SelectTool("lasso")


class TestTextStamp:
    def test_overlay_is_centered(self, editor):
        editor.set_overlay([[RED, RED]])
        assert editor.tool.name == "text"
        assert editor.text_tool.anchor == (2, 1)
        assert editor.overlay == [[RED, RED]]

    def test_click_stamps_and_clears(self, editor):
        editor.set_overlay([[RED, EMPTY, RED]])
        click(editor, 0, 0)
        assert editor.grid[0][:3] == [RED, EMPTY, RED]
        assert editor.overlay is None
        assert len(editor.history) == 2

    def test_overlay_follows_pointer_and_clamps(self, editor):
        editor.set_overlay([[RED, RED], [RED, RED]])
        editor.pointer_move(4, 4)
        assert editor.text_tool.anchor == (3, 3)

    def test_click_without_overlay(self, editor):
        editor.set_tool("text")
        click(editor, 1, 1)
        assert editor.is_empty()


def test_make_tool_unknown():
    with pytest.raises(ValueError):
        make_tool("laser")
