"""Tests for cell selections."""
from beadboard import selection as sel
from beadboard.grid import EMPTY, GridSize

from conftest import BLUE, RED


class TestKeys:
    def test_round_trip(self):
        assert sel.cell_key(3, 7) == "3,7"
        assert sel.parse_cell_key("3,7") == (3, 7)


class TestSameColorRegion:
    def test_uniform_grid_selects_everything(self):
        size = GridSize(4, 3)
        grid = [[RED] * 4 for _ in range(3)]
        assert len(sel.same_color_region(grid, 1, 2, size)) == 12

    def test_checkerboard_selects_one_cell(self, checker3, size3):
        assert sel.same_color_region(checker3, 1, 1, size3) == {"1,1"}

    def test_empty_seed_collects_empty_region(self, size3):
        grid = [[EMPTY, EMPTY, RED], [RED, RED, RED], [EMPTY, RED, EMPTY]]
        assert sel.same_color_region(grid, 0, 0, size3) == {"0,0", "0,1"}

    def test_out_of_bounds_seed(self, checker3, size3):
        assert sel.same_color_region(checker3, 5, 0, size3) == set()

    def test_does_not_modify_grid(self, checker3, size3):
        before = [row[:] for row in checker3]
        sel.same_color_region(checker3, 0, 0, size3)
        assert checker3 == before


class TestBoundsAndMoves:
    def test_bounds(self):
        assert sel.bounds({"1,2", "3,0"}) == (1, 0, 3, 2)
        assert sel.bounds(set()) == (0, 0, 0, 0)

    def test_clamp_offset(self):
        size = GridSize(5, 5)
        s = {"1,1", "2,2"}
        assert sel.clamp_offset(s, 10, 0, size) == (2, 0)
        assert sel.clamp_offset(s, -10, -10, size) == (-1, -1)
        assert sel.clamp_offset(s, 1, 1, size) == (1, 1)
        assert sel.clamp_offset(set(), 3, 3, size) == (0, 0)

    def test_clip_and_translate(self):
        size = GridSize(2, 2)
        assert sel.clip({"0,0", "2,0", "1,5"}, size) == {"0,0"}
        assert sel.translate({"0,0", "1,1"}, 1, 0, size) == {"0,1"}

    def test_cells_of(self):
        assert sorted(sel.cells_of({"0,1", "2,0"})) == [(0, 1), (2, 0)]


def test_region_of_blue_in_checkerboard_corner(checker3, size3):
    assert sel.same_color_region(checker3, 0, 1, size3) == {"0,1"}
    assert checker3[0][1] == BLUE
