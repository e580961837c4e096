"""Tests for grid operations."""
import pytest

from beadboard import grid as gm
from beadboard.grid import EMPTY, GridSize, PanOffset

from conftest import BLUE, GREEN, RED


def numbered(size):
    return [[f"#0000{y:01x}{x:01x}" for x in range(size.width)] for y in range(size.height)]


class TestGridSize:
    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            GridSize(0, 3)
        with pytest.raises(ValueError):
            GridSize(3, -1)

    def test_contains(self):
        s = GridSize(4, 2)
        assert s.contains(1, 3)
        assert not s.contains(2, 0)
        assert not s.contains(0, -1)
        assert s.cells == 8

    def test_pan_offset(self):
        off = PanOffset().moved(0, -1).moved(1, 0)
        assert (off.x, off.y) == (1, -1)
        assert PanOffset().is_zero and not off.is_zero


class TestInitAndResize:
    def test_init_empty(self):
        g = gm.init_empty(GridSize(3, 2))
        assert g == [[EMPTY] * 3, [EMPTY] * 3]
        assert g[0] is not g[1]

    def test_resize_keeps_overlap(self):
        src = numbered(GridSize(4, 4))
        out = gm.resize(src, GridSize(6, 2))
        assert len(out) == 2 and all(len(r) == 6 for r in out)
        for y in range(2):
            for x in range(6):
                assert out[y][x] == (src[y][x] if x < 4 else EMPTY)

    def test_resize_does_not_touch_input(self):
        src = numbered(GridSize(2, 2))
        before = gm.copy_grid(src)
        gm.resize(src, GridSize(3, 3))
        assert src == before


class TestFloodFill:
    def test_fills_only_connected_region(self, size3):
        g = [
            [RED, RED, BLUE],
            [BLUE, RED, BLUE],
            [RED, BLUE, RED],
        ]
        gm.flood_fill(g, 0, 0, RED, GREEN, size3)
        assert g == [
            [GREEN, GREEN, BLUE],
            [BLUE, GREEN, BLUE],
            [RED, BLUE, RED],
        ]

    def test_same_color_is_noop(self, checker3, size3):
        before = gm.copy_grid(checker3)
        gm.flood_fill(checker3, 0, 0, RED, RED, size3)
        assert checker3 == before

    def test_fills_empty_region(self, size3):
        g = gm.init_empty(size3)
        gm.flood_fill(g, 1, 1, EMPTY, RED, size3)
        assert all(c == RED for row in g for c in row)

    def test_checkerboard_fills_single_cell(self, checker3, size3):
        gm.flood_fill(checker3, 1, 1, RED, GREEN, size3)
        assert sum(c == GREEN for row in checker3 for c in row) == 1


class TestShift:
    def test_shift_right_then_left_keeps_interior(self):
        size = GridSize(4, 3)
        src = numbered(size)
        back = gm.shift_left(gm.shift_right(src, size), size)
        for y in range(size.height):
            for x in range(size.width - 1):
                assert back[y][x] == src[y][x]
            assert back[y][size.width - 1] == EMPTY

    def test_shift_up_then_down_keeps_interior(self):
        size = GridSize(3, 4)
        src = numbered(size)
        back = gm.shift_down(gm.shift_up(src, size), size)
        assert back[0] == [EMPTY] * 3
        assert back[1:] == src[1:]

    @pytest.mark.parametrize("dx, dy", [(2, -1), (-1, 3), (0, 0)])
    def test_shift_by_round_trip_keeps_overlap(self, dx, dy):
        size = GridSize(5, 4)
        src = numbered(size)
        back = gm.shift_by(gm.shift_by(src, size, dx, dy), size, -dx, -dy)
        for y in range(size.height):
            for x in range(size.width):
                if size.contains(y + dy, x + dx):
                    assert back[y][x] == src[y][x]
                else:
                    assert back[y][x] == EMPTY

    def test_shift_convention(self, size3):
        g = gm.init_empty(size3)
        g[1][1] = RED
        assert gm.shift_right(g, size3)[1][2] == RED
        assert gm.shift_down(g, size3)[2][1] == RED
        assert gm.shift_up(g, size3)[0][1] == RED
        assert gm.shift_left(g, size3)[1][0] == RED

    def test_shift_by_whole_width_empties(self, checker3, size3):
        assert gm.shift_by(checker3, size3, 3, 0) == gm.init_empty(size3)


class TestCellMoves:
    def test_translate_cells_clears_sources_first(self):
        size = GridSize(3, 1)
        g = [[RED, BLUE, EMPTY]]
        out = gm.translate_cells(g, [(0, 0), (0, 1)], 1, 0, size)
        assert out == [[EMPTY, RED, BLUE]]
        assert g == [[RED, BLUE, EMPTY]]

    def test_translate_drops_out_of_bounds(self):
        size = GridSize(2, 1)
        out = gm.translate_cells([[RED, BLUE]], [(0, 1)], 1, 0, size)
        assert out == [[RED, EMPTY]]

    def test_stamp_skips_empty_overlay_cells(self, checker3, size3):
        overlay = [[GREEN, EMPTY], [EMPTY, GREEN]]
        out = gm.stamp(checker3, overlay, 1, 1, size3)
        assert out[1][1] == GREEN and out[2][2] == GREEN
        assert out[1][2] == checker3[1][2]
        assert out[2][1] == checker3[2][1]

    def test_stamp_clips_at_edges(self, size3):
        out = gm.stamp(gm.init_empty(size3), [[RED, RED]], 2, 2, size3)
        assert out[2][2] == RED
        assert sum(c == RED for row in out for c in row) == 1

    def test_overlay_from_mask(self):
        assert gm.overlay_from_mask([[True, False]], RED) == [[RED, EMPTY]]


class TestColors:
    def test_replace_color(self, checker3):
        out = gm.replace_color(checker3, RED, GREEN)
        assert RED not in {c for row in out for c in row}
        assert sum(c == GREEN for row in out for c in row) == 5

    def test_unique_colors_first_seen_order(self, checker3):
        checker3[0][0] = EMPTY
        assert gm.unique_colors(checker3) == [BLUE, RED]

    def test_color_counts_sorted(self, checker3):
        assert gm.color_counts(checker3) == [(RED, 5), (BLUE, 4)]
        assert gm.color_counts(gm.init_empty(GridSize(2, 2))) == []

    def test_is_valid_grid(self, checker3, size3):
        assert gm.is_valid_grid(checker3, size3)
        assert not gm.is_valid_grid(checker3, GridSize(3, 2))
        assert not gm.is_valid_grid([[RED, 1, RED]] * 3, size3)
        assert not gm.is_valid_grid("nope", size3)
